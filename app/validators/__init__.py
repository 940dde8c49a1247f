"""
app/validators package marker.
"""

from app.validators.field_normalizer import FieldNormalizer, normalize_dimension, normalize_key
from app.validators.mapping_validator import ColumnMappingError, MappingErrorDetail, MappingValidator

__all__ = [
    "ColumnMappingError",
    "FieldNormalizer",
    "MappingErrorDetail",
    "MappingValidator",
    "normalize_dimension",
    "normalize_key",
]
