"""
app/services/period_resolver.py

Derives a canonical calendar period from unreliable source fields.

Year chain
----------
1. Inception year, when inside the configured window.
2. Leading integer of the UY label, when inside the window.
3. Unresolved.

Quarter chain
-------------
1. Inception quarter written ``Q1``..``Q4`` (any case).
2. Inception quarter written as a bare digit ``1``..``4``.
3. Quarter of the inception month (full name, 3-letter code or 1..12).
4. Quarter of the commitment date's month.
5. Unresolved.

Month chain (monthly view)
--------------------------
1. Inception month.
2. Commitment date's month.
3. Unresolved.

Components resolve independently: a record with a year but no quarter
still belongs to yearly buckets.

Commitment dates
----------------
Tried in order: strict ``YYYY-MM-DD``; numeric ``D/M/Y`` or ``D-M-Y``;
free text via ``dateutil``, year-first when the text starts with a
4-digit year and day-first otherwise. Numeric dates are read day-first
unless the first number cannot be a month (> 12 makes it the day; a
second number > 12 makes it the day instead). ``05/04/2020`` is therefore
5 April 2020.
The source column has no documented convention, so this is a data
quality risk for dates whose first two numbers are both <= 12.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from functools import lru_cache
from typing import Callable

from dateutil import parser as date_parser

from app.domain.policy_record import CanonicalRecord, PeriodResolution, ResolvedPeriod

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_NUMERIC_DATE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{2,4})$")
_QUARTER_LABEL = re.compile(r"^Q([1-4])$")
_QUARTER_DIGIT = re.compile(r"^[1-4]$")
_LEADING_INT = re.compile(r"^\d+")
_YEAR_LEADING = re.compile(r"^\d{4}\D")

# Two distinct defaults reveal components missing from free-text input.
_SENTINEL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))

MONTH_CODES: tuple[str, ...] = (
    "JAN", "FEB", "MAR", "APR", "MAY", "JUN",
    "JUL", "AUG", "SEP", "OCT", "NOV", "DEC",
)

_MONTH_ALIASES: dict[str, int] = {code: index for index, code in enumerate(MONTH_CODES, start=1)}
_MONTH_ALIASES.update(
    {
        "JANUARY": 1,
        "FEBRUARY": 2,
        "MARCH": 3,
        "APRIL": 4,
        "JUNE": 6,
        "JULY": 7,
        "AUGUST": 8,
        "SEPT": 9,
        "SEPTEMBER": 9,
        "OCTOBER": 10,
        "NOVEMBER": 11,
        "DECEMBER": 12,
    }
)


def normalize_month(value: str | None) -> int | None:
    """
    Map a month spelling (``"jan"``, ``"January"``, ``"MAR."``, ``"7"``)
    to its number, or ``None``.
    """

    if value is None:
        return None
    token = value.strip().rstrip(".").upper()
    if not token:
        return None
    if token.isdigit():
        number = int(token)
        return number if 1 <= number <= 12 else None
    return _MONTH_ALIASES.get(token)


def month_to_quarter(month: int) -> str:
    """Jan-Mar → Q1, Apr-Jun → Q2, Jul-Sep → Q3, Oct-Dec → Q4."""
    return f"Q{(month - 1) // 3 + 1}"


def normalize_quarter(value: str | None) -> str | None:
    """
    Accept ``Q1``..``Q4`` (any case) or a bare ``1``..``4``.
    """

    if value is None:
        return None
    token = value.strip().upper()
    match = _QUARTER_LABEL.match(token)
    if match:
        return token
    if _QUARTER_DIGIT.match(token):
        return f"Q{token}"
    return None


def parse_commitment_date(raw: str | None) -> date | None:
    """
    Parse a commitment date string; ``None`` when no rule accepts it.
    """

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None

    if _ISO_DATE.match(text):
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None

    numeric = _NUMERIC_DATE.match(text)
    if numeric:
        first, second, year_text = (int(part) for part in numeric.groups())
        year = 2000 + year_text if year_text < 100 else year_text
        day, month = first, second
        if first <= 12 < second:
            day, month = second, first
        try:
            return date(year, month, day)
        except ValueError:
            return None

    return _parse_free_text(text)


def _parse_free_text(text: str) -> date | None:
    year_first = bool(_YEAR_LEADING.match(text))
    try:
        parsed = [
            date_parser.parse(
                text, dayfirst=not year_first, yearfirst=year_first, default=default
            )
            for default in _SENTINEL_DEFAULTS
        ]
    except (ValueError, OverflowError):
        return None
    first, second = parsed
    if first.year != second.year or first.month != second.month:
        return None
    return first.date()


class PeriodResolver:
    """
    Resolves year, quarter and month for canonical records.

    Parsed commitment dates are memoised per input string; the cache
    belongs to the resolver instance.
    """

    def __init__(
        self,
        *,
        min_year: int = 2019,
        max_year: int = 2021,
        date_cache_size: int = 8192,
    ) -> None:
        if min_year > max_year:
            raise ValueError("min_year must not exceed max_year.")
        self._min_year = min_year
        self._max_year = max_year
        self._parse_date: Callable[[str | None], date | None] = lru_cache(
            maxsize=date_cache_size
        )(parse_commitment_date)

    @property
    def years(self) -> tuple[int, ...]:
        return tuple(range(self._min_year, self._max_year + 1))

    def in_window(self, year: int | None) -> bool:
        return year is not None and self._min_year <= year <= self._max_year

    def parse_date(self, raw: str | None) -> date | None:
        """Cached :func:`parse_commitment_date`."""
        return self._parse_date(raw)

    def date_cache_info(self):
        return self._parse_date.cache_info()  # type: ignore[attr-defined]

    def resolve_year(self, record: CanonicalRecord) -> int | None:
        if self.in_window(record.inception_year):
            return record.inception_year

        match = _LEADING_INT.match(record.uy.display)
        if match:
            uy_year = int(match.group(0))
            if self.in_window(uy_year):
                return uy_year
        return None

    def resolve_quarter(self, record: CanonicalRecord) -> str | None:
        quarter = normalize_quarter(record.inception_quarter)
        if quarter is not None:
            return quarter

        month = self.resolve_month(record)
        if month is not None:
            return month_to_quarter(month)
        return None

    def resolve_month(self, record: CanonicalRecord) -> int | None:
        month = normalize_month(record.inception_month)
        if month is not None:
            return month

        parsed = self.parse_date(record.com_date)
        if parsed is not None:
            return parsed.month
        return None

    def resolve(self, record: CanonicalRecord) -> PeriodResolution:
        """
        Resolve every component independently.
        """

        return PeriodResolution(
            year=self.resolve_year(record),
            quarter=self.resolve_quarter(record),
            month=self.resolve_month(record),
        )

    def resolve_period(self, record: CanonicalRecord) -> ResolvedPeriod | None:
        """
        Return the (year, quarter) key, or ``None`` when either part is
        unresolved.
        """

        year = self.resolve_year(record)
        if year is None:
            return None
        quarter = self.resolve_quarter(record)
        if quarter is None:
            return None
        return ResolvedPeriod(year=year, quarter=quarter)
