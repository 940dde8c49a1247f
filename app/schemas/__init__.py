"""
app/schemas package marker.
"""

from app.schemas.aggregation import (
    AggregateBucketResponse,
    DimensionAggregationResponse,
    DimensionRowResponse,
    PeriodAggregationResponse,
)
from app.schemas.dataset import (
    DimensionsResponse,
    FilteredDataResponse,
    FilterOptionsResponse,
    HealthResponse,
    PolicyRecordResponse,
)

__all__ = [
    "AggregateBucketResponse",
    "DimensionAggregationResponse",
    "DimensionRowResponse",
    "PeriodAggregationResponse",
    "DimensionsResponse",
    "FilteredDataResponse",
    "FilterOptionsResponse",
    "HealthResponse",
    "PolicyRecordResponse",
]
