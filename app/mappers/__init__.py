"""
app/mappers package marker.
"""

from app.mappers.column_mapper import (
    CANONICAL_FIELDS,
    REQUIRED_FIELDS,
    ColumnMapper,
    ColumnMapping,
    normalize_header,
)

__all__ = [
    "CANONICAL_FIELDS",
    "REQUIRED_FIELDS",
    "ColumnMapper",
    "ColumnMapping",
    "normalize_header",
]
