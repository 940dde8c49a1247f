"""
tests/test_period_resolver.py

Pytest unit tests for PeriodResolver and commitment-date parsing.

Coverage
--------
- ISO, day-first numeric, swapped numeric and free-text dates
- Invalid calendar dates and garbage
- Year chain (inception year, UY fallback, window)
- Quarter chain (label, digit, month, commitment date)
- Independent component resolution
- Per-resolver date cache
"""

from __future__ import annotations

from datetime import date

import pytest

from app.domain.policy_record import InvalidPeriodError, PeriodResolution, ResolvedPeriod
from app.services.period_resolver import (
    PeriodResolver,
    month_to_quarter,
    normalize_month,
    normalize_quarter,
    parse_commitment_date,
)
from tests.factories import make_record


# ---------------------------------------------------------------------------
# Commitment dates
# ---------------------------------------------------------------------------


class TestParseCommitmentDate:
    def test_day_first_by_default(self) -> None:
        assert parse_commitment_date("05/04/2020") == date(2020, 4, 5)

    def test_first_number_above_twelve_is_the_day(self) -> None:
        assert parse_commitment_date("13/04/2020") == date(2020, 4, 13)

    def test_second_number_above_twelve_swaps_to_month_first(self) -> None:
        assert parse_commitment_date("04/13/2020") == date(2020, 4, 13)

    def test_dash_separator_and_two_digit_year(self) -> None:
        assert parse_commitment_date("01-02-21") == date(2021, 2, 1)

    def test_iso(self) -> None:
        assert parse_commitment_date("2020-08-15") == date(2020, 8, 15)

    def test_free_text(self) -> None:
        assert parse_commitment_date("15 Aug 2020") == date(2020, 8, 15)
        assert parse_commitment_date("01 Jan 2020") == date(2020, 1, 1)

    @pytest.mark.parametrize("raw", ["2020/08/05", "2020-8-5", "2020.08.05"])
    def test_year_leading_free_text_is_year_month_day(self, raw: str) -> None:
        assert parse_commitment_date(raw) == date(2020, 8, 5)

    @pytest.mark.parametrize(
        "raw",
        [None, "", "   ", "31/02/2020", "2020-13-01", "not a date", "2020", "45/45/2020"],
    )
    def test_unparsable(self, raw: str | None) -> None:
        assert parse_commitment_date(raw) is None


# ---------------------------------------------------------------------------
# Month / quarter helpers
# ---------------------------------------------------------------------------


class TestMonthAndQuarterHelpers:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("Jan", 1), ("january", 1), ("MAR.", 3), ("Sept", 9), ("7", 7), ("13", None), ("", None), (None, None)],
    )
    def test_normalize_month(self, raw: str | None, expected: int | None) -> None:
        assert normalize_month(raw) == expected

    @pytest.mark.parametrize(("month", "quarter"), [(1, "Q1"), (3, "Q1"), (4, "Q2"), (9, "Q3"), (12, "Q4")])
    def test_month_to_quarter(self, month: int, quarter: str) -> None:
        assert month_to_quarter(month) == quarter

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("Q2", "Q2"), ("q3", "Q3"), (" 4 ", "Q4"), ("5", None), ("Q5", None), ("first", None)],
    )
    def test_normalize_quarter(self, raw: str, expected: str | None) -> None:
        assert normalize_quarter(raw) == expected


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class TestPeriodResolver:
    def test_rejects_inverted_window(self) -> None:
        with pytest.raises(ValueError):
            PeriodResolver(min_year=2022, max_year=2020)

    def test_years(self, resolver: PeriodResolver) -> None:
        assert resolver.years == (2019, 2020, 2021)

    def test_inception_year_wins(self, resolver: PeriodResolver) -> None:
        assert resolver.resolve_year(make_record(uy="2019", inception_year=2021)) == 2021

    def test_out_of_window_inception_year_falls_back_to_uy(self, resolver: PeriodResolver) -> None:
        assert resolver.resolve_year(make_record(uy="2020", inception_year=2018)) == 2020

    @pytest.mark.parametrize(("uy", "expected"), [("2021", 2021), ("2020-21", 2020), ("2018", None), ("UY 2020", None)])
    def test_uy_fallback(self, resolver: PeriodResolver, uy: str, expected: int | None) -> None:
        assert resolver.resolve_year(make_record(uy=uy)) == expected

    def test_quarter_chain_order(self, resolver: PeriodResolver) -> None:
        record = make_record(inception_quarter="Q1", inception_month="Aug", com_date="15/11/2020")
        assert resolver.resolve_quarter(record) == "Q1"

        record = make_record(inception_quarter="2")
        assert resolver.resolve_quarter(record) == "Q2"

        record = make_record(inception_month="August", com_date="15/11/2020")
        assert resolver.resolve_quarter(record) == "Q3"

        record = make_record(com_date="15/11/2020")
        assert resolver.resolve_quarter(record) == "Q4"

        assert resolver.resolve_quarter(make_record()) is None

    def test_year_leading_commitment_date_quarter(self, resolver: PeriodResolver) -> None:
        record = make_record(com_date="2020/08/05")

        assert resolver.resolve_quarter(record) == "Q3"
        assert resolver.resolve(record).key_for("month") == "2020-08"

    def test_scenario_dates(self, resolver: PeriodResolver) -> None:
        may = make_record(inception_month="May")
        august = make_record(com_date="15 Aug 2020")

        assert resolver.resolve_period(may) == ResolvedPeriod(year=2020, quarter="Q2")
        assert resolver.resolve_period(august) == ResolvedPeriod(year=2020, quarter="Q3")
        assert resolver.resolve_period(august).key == "2020-Q3"  # type: ignore[union-attr]

    def test_year_without_quarter(self, resolver: PeriodResolver) -> None:
        record = make_record(uy="2020")

        resolution = resolver.resolve(record)
        assert resolution == PeriodResolution(year=2020, quarter=None, month=None)
        assert resolution.key_for("year") == "2020"
        assert resolution.key_for("quarter") is None
        assert resolution.key_for("month") is None
        assert resolver.resolve_period(record) is None

    def test_quarter_without_month(self, resolver: PeriodResolver) -> None:
        resolution = resolver.resolve(make_record(inception_quarter="Q3"))

        assert resolution.key_for("quarter") == "2020-Q3"
        assert resolution.key_for("month") is None

    def test_month_key(self, resolver: PeriodResolver) -> None:
        resolution = resolver.resolve(make_record(com_date="05/04/2020"))
        assert resolution.key_for("month") == "2020-04"

    def test_unknown_granularity(self, resolver: PeriodResolver) -> None:
        with pytest.raises(InvalidPeriodError):
            resolver.resolve(make_record()).key_for("week")

    def test_dates_are_cached_per_string(self, resolver: PeriodResolver) -> None:
        for _ in range(3):
            resolver.parse_date("15 Aug 2020")

        info = resolver.date_cache_info()
        assert info.misses == 1
        assert info.hits == 2

    def test_caches_are_per_instance(self, resolver: PeriodResolver) -> None:
        other = PeriodResolver()
        resolver.parse_date("01/01/2020")

        assert other.date_cache_info().currsize == 0
