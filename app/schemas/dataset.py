"""
app/schemas/dataset.py

Response schemas for dataset, dimension and filter endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime


class PolicyRecordResponse(BaseModel):
    """
    One canonical record in display form.
    """

    model_config = ConfigDict(frozen=True)

    uy: str
    ext_type: str
    broker: str | None = None
    cedant: str | None = None
    insured: str | None = None
    country_name: str
    region: str
    hub: str
    inception_year: int | None = None
    inception_quarter: str | None = None
    inception_month: str | None = None
    com_date: str | None = None
    max_liability: float = Field(..., ge=0)
    gross_uw_prem: float = Field(..., ge=0)
    gross_book_prem: float = Field(..., ge=0)
    gross_actual_acq: float = Field(..., ge=0)
    gross_paid_claims: float = Field(..., ge=0)
    gross_os_loss: float = Field(..., ge=0)


class FilteredDataResponse(BaseModel):
    """
    Matching records (capped) with the uncapped match count.
    """

    records: list[PolicyRecordResponse] = Field(default_factory=list)
    total: int = Field(..., ge=0)
    returned: int = Field(..., ge=0)
    loaded_at: datetime


class DimensionsResponse(BaseModel):
    values: dict[str, list[str]]
    years: list[int]
    loaded_at: datetime


class FilterOptionsResponse(BaseModel):
    """
    Values still selectable per facet given the current selections.
    """

    options: dict[str, list[str]]
    match_count: int = Field(..., ge=0)
