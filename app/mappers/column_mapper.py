"""
app/mappers/column_mapper.py

Explicit mapping from reinsurance dataset headers to canonical fields.

Headers are compared after normalization (lowercase, alphanumeric only)
and must match one of the listed spellings exactly. There is no substring
or fuzzy search: "Gross Book Prem" can never be mistaken for
"Gross UW Prem".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Sequence

from app.validators.mapping_validator import MappingValidator

logger = logging.getLogger(__name__)

CANONICAL_FIELDS: tuple[str, ...] = (
    "uy",
    "ext_type",
    "broker",
    "cedant",
    "insured",
    "max_liability",
    "gross_uw_prem",
    "gross_book_prem",
    "gross_actual_acq",
    "gross_paid_claims",
    "gross_os_loss",
    "country_name",
    "region",
    "hub",
    "inception_year",
    "inception_quarter",
    "inception_month",
    "com_date",
)

REQUIRED_FIELDS: tuple[str, ...] = (
    "uy",
    "gross_uw_prem",
    "gross_actual_acq",
    "gross_paid_claims",
    "gross_os_loss",
)

DEFAULT_HEADER_NAMES: dict[str, tuple[str, ...]] = {
    "uy": ("UY", "Underwriting Year"),
    "ext_type": ("Ext Type", "Extension Type"),
    "broker": ("Broker", "Broker Name"),
    "cedant": ("Cedant", "Cedant Name"),
    "insured": ("Org.Insured/Trty Name", "Insured", "Treaty Name"),
    "max_liability": ("Max Liability (FC)", "Max Liability"),
    "gross_uw_prem": ("Gross UW Prem",),
    "gross_book_prem": ("Gross Book Prem",),
    "gross_actual_acq": ("Gross Actual Acq.", "Gross Actual Acq"),
    "gross_paid_claims": ("Gross paid claims",),
    "gross_os_loss": ("Gross os loss",),
    "country_name": ("Country Name", "Country"),
    "region": ("Region",),
    "hub": ("Hub",),
    "inception_year": ("Inception Year",),
    "inception_quarter": ("Inception Quarter",),
    "inception_month": ("Inception Month",),
    "com_date": ("Com date", "Commitment Date"),
}


def normalize_header(header: str) -> str:
    """
    Normalize a column name for exact matching.
    """

    return "".join(ch for ch in header.strip().strip('"').lower() if ch.isalnum())


@dataclass(frozen=True)
class ColumnMapping:
    """
    Resolved mapping between canonical field names and header positions.
    """

    field_to_position: dict[str, int]
    source_headers: tuple[str, ...]

    def source_column(self, field_name: str) -> str | None:
        position = self.field_to_position.get(field_name)
        return self.source_headers[position] if position is not None else None


class ColumnMapper:
    """
    Builds and validates the header mapping once per dataset load.
    """

    def __init__(
        self,
        header_names: Mapping[str, Sequence[str]] | None = None,
        *,
        required_fields: Sequence[str] = REQUIRED_FIELDS,
    ) -> None:
        names = header_names or DEFAULT_HEADER_NAMES
        self._lookup: dict[str, str] = {}
        for field_name, spellings in names.items():
            for spelling in spellings:
                normalized = normalize_header(spelling)
                claimed_by = self._lookup.setdefault(normalized, field_name)
                if claimed_by != field_name:
                    raise ValueError(
                        f"Header spelling {spelling!r} is listed for both "
                        f"{claimed_by!r} and {field_name!r}."
                    )
        self._validator = MappingValidator(required_fields=required_fields)

    def build_mapping(self, headers: Sequence[str]) -> ColumnMapping:
        """
        Resolve canonical field to header position for one dataset.

        Raises :class:`~app.validators.mapping_validator.ColumnMappingError`
        when a required column is absent. A repeated header keeps its
        first position.
        """

        source_headers = tuple(header.strip().strip('"').strip() for header in headers)
        mapping: dict[str, int] = {}
        for position, header in enumerate(source_headers):
            field_name = self._lookup.get(normalize_header(header))
            if field_name is None:
                continue
            if field_name in mapping:
                logger.debug(
                    "Ignoring repeated column %r for field %r (already at position %d)",
                    header, field_name, mapping[field_name],
                )
                continue
            mapping[field_name] = position

        self._validator.validate(mapping=mapping, source_headers=source_headers)

        unmapped = [name for name in CANONICAL_FIELDS if name not in mapping]
        logger.info(
            "Resolved %d/%d dataset columns; unmapped optional fields: %s",
            len(mapping), len(CANONICAL_FIELDS), ", ".join(unmapped) or "none",
        )
        return ColumnMapping(field_to_position=mapping, source_headers=source_headers)
