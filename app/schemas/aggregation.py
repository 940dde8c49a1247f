"""
app/schemas/aggregation.py

Response schemas for period and dimension aggregation endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AggregateBucketResponse(BaseModel):
    """
    Summed measures and derived ratios for one group.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    policy_count: int = Field(..., ge=0)
    premium: float
    acquisition: float
    paid_claims: float
    os_loss: float
    max_liability: float
    incurred_claims: float
    technical_result: float
    loss_ratio_pct: float
    acquisition_pct: float
    combined_ratio_pct: float
    avg_max_liability: float


class PeriodAggregationResponse(BaseModel):
    granularity: str
    years: list[int]
    buckets: list[AggregateBucketResponse]
    total: AggregateBucketResponse
    unresolved_count: int = Field(0, ge=0)


class DimensionRowResponse(AggregateBucketResponse):
    premium_share_pct: float
    members: dict[str, list[str]] = Field(default_factory=dict)


class DimensionAggregationResponse(BaseModel):
    """
    Ranked groups; ``total`` covers every group, not only the rows shown.
    """

    dimension: str
    rows: list[DimensionRowResponse]
    total: AggregateBucketResponse
    group_count: int = Field(..., ge=0)
    excluded_count: int = Field(0, ge=0)
