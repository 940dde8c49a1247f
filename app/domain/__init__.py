"""
app/domain package marker.
"""

from app.domain.policy_record import (
    DIMENSION_ATTRIBUTES,
    GRANULARITIES,
    QUARTERS,
    CanonicalRecord,
    DimensionValue,
    InvalidPeriodError,
    LoadSummary,
    PeriodResolution,
    RawRow,
    ResolvedPeriod,
    UnknownDimensionError,
    dimension_of,
)

__all__ = [
    "DIMENSION_ATTRIBUTES",
    "GRANULARITIES",
    "QUARTERS",
    "CanonicalRecord",
    "DimensionValue",
    "InvalidPeriodError",
    "LoadSummary",
    "PeriodResolution",
    "RawRow",
    "ResolvedPeriod",
    "UnknownDimensionError",
    "dimension_of",
]
