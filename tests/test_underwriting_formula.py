"""
tests/test_underwriting_formula.py

Pytest unit tests for numeric coercion and the underwriting ratio formula.

Coverage
--------
- safe_number on separators, garbage and non-finite input
- safe_divide / safe_ratio_pct guards
- BaseKPIFormula.evaluate output checks
- UnderwritingKPIFormula normal and zero-premium cases
"""

from __future__ import annotations

import math

import pytest

from kpi.base import BaseKPIFormula
from kpi.safe_math import safe_divide, safe_number, safe_ratio_pct
from kpi.underwriting import UnderwritingKPIFormula


# ---------------------------------------------------------------------------
# safe_number
# ---------------------------------------------------------------------------


class TestSafeNumber:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("1,234.50", 1234.5),
            ("  42 ", 42.0),
            ("1 000", 1000.0),
            (7, 7.0),
            (2.5, 2.5),
            ("-3", -3.0),
        ],
    )
    def test_parses_numbers(self, raw: object, expected: float) -> None:
        assert safe_number(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [None, "", "abc", "nan", "inf", "-Infinity", float("nan"), True])
    def test_garbage_yields_default(self, raw: object) -> None:
        assert safe_number(raw) == 0.0

    def test_custom_default(self) -> None:
        assert math.isnan(safe_number("n/a", default=float("nan")))


# ---------------------------------------------------------------------------
# Guarded division
# ---------------------------------------------------------------------------


class TestSafeDivide:
    def test_zero_denominator(self) -> None:
        assert safe_divide(10.0, 0.0) == 0.0

    def test_non_finite_operands(self) -> None:
        assert safe_divide(float("inf"), 2.0) == 0.0
        assert safe_divide(1.0, float("nan")) == 0.0

    def test_normal_division(self) -> None:
        assert safe_divide(3.0, 4.0) == pytest.approx(0.75)

    def test_ratio_pct_non_positive_denominator(self) -> None:
        assert safe_ratio_pct(5.0, 0.0) == 0.0
        assert safe_ratio_pct(5.0, -1.0) == 0.0

    def test_ratio_pct(self) -> None:
        assert safe_ratio_pct(150.0, 1000.0) == pytest.approx(15.0)


# ---------------------------------------------------------------------------
# UnderwritingKPIFormula
# ---------------------------------------------------------------------------


@pytest.fixture()
def formula() -> UnderwritingKPIFormula:
    return UnderwritingKPIFormula()


class TestUnderwritingKPIFormula:
    def test_derived_measures(self, formula: UnderwritingKPIFormula) -> None:
        result = formula.calculate(
            {
                "policy_count": 2,
                "premium": 1000.0,
                "acquisition": 200.0,
                "paid_claims": 100.0,
                "os_loss": 50.0,
                "max_liability": 500.0,
            }
        )
        assert result["incurred_claims"] == pytest.approx(150.0)
        assert result["technical_result"] == pytest.approx(650.0)
        assert result["loss_ratio_pct"] == pytest.approx(15.0)
        assert result["acquisition_pct"] == pytest.approx(20.0)
        assert result["combined_ratio_pct"] == pytest.approx(35.0)
        assert result["avg_max_liability"] == pytest.approx(250.0)

    def test_zero_premium_guards_every_ratio(self, formula: UnderwritingKPIFormula) -> None:
        result = formula.calculate({"premium": 0, "paid_claims": 10, "acquisition": 5})
        assert result["loss_ratio_pct"] == 0.0
        assert result["acquisition_pct"] == 0.0
        assert result["combined_ratio_pct"] == 0.0
        assert result["technical_result"] == pytest.approx(-15.0)

    def test_empty_inputs(self, formula: UnderwritingKPIFormula) -> None:
        result = formula.calculate({})
        assert all(math.isfinite(value) for value in result.values())
        assert result["avg_max_liability"] == 0.0

    def test_evaluate_returns_declared_metrics(self, formula: UnderwritingKPIFormula) -> None:
        result = formula.evaluate({"premium": 10.0})
        assert set(result) == set(UnderwritingKPIFormula.output_keys)


class _BrokenFormula(BaseKPIFormula):
    output_keys = ("ratio", "other")

    def calculate(self, inputs):  # type: ignore[no-untyped-def]
        return {"ratio": float("inf")} if inputs.get("partial") else {"ratio": float("nan"), "other": 1.0}


class TestBaseKPIFormula:
    def test_missing_metric_rejected(self) -> None:
        with pytest.raises(ValueError, match="other"):
            _BrokenFormula().evaluate({"partial": True})

    def test_non_finite_metric_rejected(self) -> None:
        with pytest.raises(ValueError, match="ratio"):
            _BrokenFormula().evaluate({})
