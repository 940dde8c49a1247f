"""
app/domain/policy_record.py

Domain models used by the reinsurance dataset pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

QUARTERS: tuple[str, ...] = ("Q1", "Q2", "Q3", "Q4")


@dataclass(frozen=True)
class RawRow:
    """
    One source line mapped onto canonical field names.

    Values are the stripped cell strings; absent optional columns are "".
    """

    line_number: int
    values: Mapping[str, str]

    def get(self, field_name: str) -> str:
        return self.values.get(field_name, "")


@dataclass(frozen=True)
class DimensionValue:
    """
    A textual dimension in its display and grouping forms.
    """

    display: str
    key: str


@dataclass(frozen=True)
class CanonicalRecord:
    """
    Typed, normalized policy record shared by every downstream component.
    """

    uy: DimensionValue
    ext_type: DimensionValue
    broker: DimensionValue | None
    cedant: DimensionValue | None
    insured: DimensionValue | None
    country_name: DimensionValue
    region: DimensionValue
    hub: DimensionValue

    inception_year: int | None
    inception_quarter: str | None
    inception_month: str | None
    com_date: str | None

    max_liability: float
    gross_uw_prem: float
    gross_book_prem: float
    gross_actual_acq: float
    gross_paid_claims: float
    gross_os_loss: float

    def to_dict(self) -> dict[str, object]:
        """Flat JSON-safe view using display values."""

        def _display(value: DimensionValue | None) -> str | None:
            return value.display if value is not None else None

        return {
            "uy": self.uy.display,
            "ext_type": self.ext_type.display,
            "broker": _display(self.broker),
            "cedant": _display(self.cedant),
            "insured": _display(self.insured),
            "country_name": self.country_name.display,
            "region": self.region.display,
            "hub": self.hub.display,
            "inception_year": self.inception_year,
            "inception_quarter": self.inception_quarter,
            "inception_month": self.inception_month,
            "com_date": self.com_date,
            "max_liability": self.max_liability,
            "gross_uw_prem": self.gross_uw_prem,
            "gross_book_prem": self.gross_book_prem,
            "gross_actual_acq": self.gross_actual_acq,
            "gross_paid_claims": self.gross_paid_claims,
            "gross_os_loss": self.gross_os_loss,
        }


@dataclass(frozen=True)
class ResolvedPeriod:
    """
    Canonical (year, quarter) key of a record.
    """

    year: int
    quarter: str

    @property
    def key(self) -> str:
        return f"{self.year}-{self.quarter}"


@dataclass(frozen=True)
class PeriodResolution:
    """
    Independently resolved calendar components of one record.

    Each component is ``None`` when the record's fields cannot produce it.
    """

    year: int | None
    quarter: str | None
    month: int | None

    def key_for(self, granularity: str) -> str | None:
        """
        Return the bucket key at *granularity*, or ``None`` when a needed
        component is unresolved.
        """
        if self.year is None:
            return None
        if granularity == "year":
            return str(self.year)
        if granularity == "quarter":
            return f"{self.year}-{self.quarter}" if self.quarter else None
        if granularity == "month":
            return f"{self.year}-{self.month:02d}" if self.month else None
        raise InvalidPeriodError(f"Unsupported granularity: {granularity!r}")


@dataclass(frozen=True)
class LoadSummary:
    """
    End-of-run dataset load summary.
    """

    rows_read: int
    rows_skipped_short: int
    rows_rejected_missing_uy: int
    records_loaded: int
    uy_counts: dict[str, int] = field(default_factory=dict)


DIMENSION_ATTRIBUTES: dict[str, str] = {
    "uy": "uy",
    "ext_type": "ext_type",
    "broker": "broker",
    "cedant": "cedant",
    "insured": "insured",
    "country": "country_name",
    "region": "region",
    "hub": "hub",
}

GRANULARITIES: tuple[str, ...] = ("year", "quarter", "month")


class UnknownDimensionError(ValueError):
    """
    Raised when a dimension or facet name is not recognised.
    """

    def __init__(self, name: str, allowed: tuple[str, ...] | list[str]) -> None:
        super().__init__(
            f"Unknown dimension {name!r}. Allowed values: {', '.join(sorted(allowed))}."
        )
        self.name = name
        self.allowed = tuple(allowed)


class InvalidPeriodError(ValueError):
    """
    Raised when a granularity or year outside the canonical window is requested.
    """


def dimension_of(record: CanonicalRecord, dimension: str) -> DimensionValue | None:
    """
    Return the record's value for *dimension*; ``None`` for absent identities.
    """

    attribute = DIMENSION_ATTRIBUTES.get(dimension)
    if attribute is None:
        raise UnknownDimensionError(dimension, list(DIMENSION_ATTRIBUTES))
    value: DimensionValue | None = getattr(record, attribute)
    if value is None or not value.key:
        return None
    return value
