"""
kpi/underwriting.py

Underwriting KPI formula implementation.

Expected inputs
---------------
policy_count : int
    Number of policies summed into the bucket.
premium : float
    Sum of gross underwritten premium.
acquisition : float
    Sum of gross actual acquisition cost.
paid_claims : float
    Sum of gross paid claims.
os_loss : float
    Sum of gross outstanding loss reserves.
max_liability : float
    Sum of max liability (FC).

Formulas
--------
Incurred Claims    = paid_claims + os_loss
Technical Result   = premium - incurred_claims - acquisition
Loss Ratio %       = incurred_claims / premium * 100
Acquisition %      = acquisition / premium * 100
Combined Ratio %   = loss_ratio_pct + acquisition_pct
Avg Max Liability  = max_liability / policy_count

Ratios are always derived from the summed measures, never averaged from
per-record ratios. A zero premium yields 0 for every percentage.
"""

from __future__ import annotations

from typing import Any, Mapping

from kpi.base import BaseKPIFormula
from kpi.safe_math import safe_divide, safe_number, safe_ratio_pct


class UnderwritingKPIFormula(BaseKPIFormula):
    """
    Deterministic underwriting ratio calculations.

    All arithmetic is self-contained.  No I/O, no logging, no side effects.
    """

    input_keys = ("policy_count", "premium", "acquisition", "paid_claims", "os_loss", "max_liability")
    output_keys = (
        "incurred_claims",
        "technical_result",
        "loss_ratio_pct",
        "acquisition_pct",
        "combined_ratio_pct",
        "avg_max_liability",
    )

    def calculate(self, inputs: Mapping[str, Any]) -> dict[str, float]:
        """
        Compute incurred claims, technical result and the ratio family.

        Returns
        -------
        dict
            Keys: ``incurred_claims``, ``technical_result``,
            ``loss_ratio_pct``, ``acquisition_pct``, ``combined_ratio_pct``,
            ``avg_max_liability``.
        """
        premium = safe_number(inputs.get("premium"))
        acquisition = safe_number(inputs.get("acquisition"))
        paid_claims = safe_number(inputs.get("paid_claims"))
        os_loss = safe_number(inputs.get("os_loss"))
        max_liability = safe_number(inputs.get("max_liability"))
        policy_count = int(safe_number(inputs.get("policy_count")))

        incurred_claims = _incurred_claims(paid_claims, os_loss)
        loss_ratio_pct = safe_ratio_pct(incurred_claims, premium)
        acquisition_pct = safe_ratio_pct(acquisition, premium)

        return {
            "incurred_claims": incurred_claims,
            "technical_result": _technical_result(premium, incurred_claims, acquisition),
            "loss_ratio_pct": loss_ratio_pct,
            "acquisition_pct": acquisition_pct,
            "combined_ratio_pct": loss_ratio_pct + acquisition_pct,
            "avg_max_liability": safe_divide(max_liability, policy_count),
        }


# ---------------------------------------------------------------------------
# Pure formula functions
# ---------------------------------------------------------------------------


def _incurred_claims(paid_claims: float, os_loss: float) -> float:
    """Incurred = paid claims + outstanding loss."""
    return paid_claims + os_loss


def _technical_result(premium: float, incurred_claims: float, acquisition: float) -> float:
    """Technical result = premium - incurred claims - acquisition cost."""
    return premium - incurred_claims - acquisition
