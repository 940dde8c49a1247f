"""
app/validators/field_normalizer.py

Coerces one raw row into a :class:`CanonicalRecord`.

Only a missing underwriting-year label rejects a row. Every other problem
is repaired in place: unparsable measures become 0, empty identity fields
become ``None``.
"""

from __future__ import annotations

import logging
import math
import re

from app.domain.policy_record import CanonicalRecord, DimensionValue, RawRow
from kpi.safe_math import safe_number

logger = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")

MEASURE_FIELDS: tuple[str, ...] = (
    "max_liability",
    "gross_uw_prem",
    "gross_book_prem",
    "gross_actual_acq",
    "gross_paid_claims",
    "gross_os_loss",
)


def normalize_key(value: str | None) -> str:
    """
    Grouping/filtering key: trimmed, whitespace-collapsed, lowercased.
    """

    if value is None:
        return ""
    return _WHITESPACE_RUN.sub(" ", str(value).strip()).lower()


def normalize_dimension(value: str | None) -> DimensionValue:
    """
    Build the display/key pair for a mandatory dimension ("" when empty).
    """

    display = "" if value is None else str(value).strip()
    return DimensionValue(display=display, key=normalize_key(display))


def normalize_optional_dimension(value: str | None) -> DimensionValue | None:
    """
    Like :func:`normalize_dimension` but empty input yields ``None``.
    """

    dimension = normalize_dimension(value)
    return dimension if dimension.display else None


class FieldNormalizer:
    """
    Stateless raw-row to canonical-record transform.
    """

    def normalize(self, row: RawRow) -> CanonicalRecord | None:
        """
        Return the canonical record, or ``None`` when the UY label is empty.
        """

        uy = normalize_dimension(row.get("uy"))
        if not uy.display:
            logger.debug("Rejecting line %d: no UY value", row.line_number)
            return None

        measures = {name: self._parse_measure(row.get(name)) for name in MEASURE_FIELDS}

        return CanonicalRecord(
            uy=uy,
            ext_type=normalize_dimension(row.get("ext_type")),
            broker=normalize_optional_dimension(row.get("broker")),
            cedant=normalize_optional_dimension(row.get("cedant")),
            insured=normalize_optional_dimension(row.get("insured")),
            country_name=normalize_dimension(row.get("country_name")),
            region=normalize_dimension(row.get("region")),
            hub=normalize_dimension(row.get("hub")),
            inception_year=self._parse_optional_int(row.get("inception_year")),
            inception_quarter=self._parse_optional_string(row.get("inception_quarter")),
            inception_month=self._parse_optional_string(row.get("inception_month")),
            com_date=self._parse_optional_string(row.get("com_date")),
            **measures,
        )

    @staticmethod
    def _parse_measure(value: str | None) -> float:
        number = safe_number(value)
        return number if number > 0 else 0.0

    @staticmethod
    def _parse_optional_int(value: str | None) -> int | None:
        if value is None or not str(value).strip():
            return None
        number = safe_number(value, default=float("nan"))
        if math.isnan(number):
            return None
        return int(number // 1)

    @staticmethod
    def _parse_optional_string(value: str | None) -> str | None:
        if value is None:
            return None
        stripped = str(value).strip()
        return stripped or None
