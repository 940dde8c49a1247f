"""
app/validators/mapping_validator.py

Validation for resolved header-to-field mappings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence


@dataclass(frozen=True)
class MappingErrorDetail:
    """
    Structured mapping error detail.
    """

    code: str
    message: str
    field_name: str | None = None
    source_column: str | None = None
    context: dict[str, Any] | None = None


class ColumnMappingError(ValueError):
    """
    Raised when the dataset header cannot be mapped onto canonical fields.
    """

    def __init__(self, *, message: str, errors: Sequence[MappingErrorDetail]) -> None:
        super().__init__(message)
        self.message = message
        self.errors = tuple(errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "errors": [
                {
                    "code": error.code,
                    "message": error.message,
                    "field_name": error.field_name,
                    "source_column": error.source_column,
                    "context": error.context,
                }
                for error in self.errors
            ],
        }


class MappingValidator:
    """
    Validates resolved field-to-header mappings.
    """

    def __init__(self, *, required_fields: Sequence[str]) -> None:
        self._required_fields = tuple(required_fields)

    def validate(
        self,
        *,
        mapping: Mapping[str, int],
        source_headers: Sequence[str],
    ) -> None:
        """
        Raise :class:`ColumnMappingError` listing every problem at once.

        *mapping* maps canonical field names to header positions.
        """

        errors: list[MappingErrorDetail] = []

        if not source_headers:
            errors.append(
                MappingErrorDetail(
                    code="empty_headers",
                    message="No header row was found in the dataset.",
                )
            )

        for required in self._required_fields:
            if required not in mapping:
                errors.append(
                    MappingErrorDetail(
                        code="required_column_missing",
                        message="Required column is absent from the dataset header.",
                        field_name=required,
                        context={"source_headers": list(source_headers)},
                    )
                )

        if errors:
            missing = sorted(
                error.field_name
                for error in errors
                if error.code == "required_column_missing" and error.field_name
            )
            missing_csv = ", ".join(missing) or "none"
            raise ColumnMappingError(
                message=f"Column mapping validation failed. Missing required columns: {missing_csv}.",
                errors=errors,
            )
