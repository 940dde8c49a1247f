"""
app/api/routers/aggregation_router.py

Period and dimension aggregation endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_dashboard_service, get_facet_selections
from app.api.routers.errors import SERVICE_ERRORS, to_http_error
from app.schemas.aggregation import (
    AggregateBucketResponse,
    DimensionAggregationResponse,
    DimensionRowResponse,
    PeriodAggregationResponse,
)
from app.services.aggregation_service import SORT_BY_PREMIUM, AggregateBucket
from app.services.dashboard_service import DashboardService

router = APIRouter(prefix="/api", tags=["aggregation"])


def _bucket_response(bucket: AggregateBucket) -> AggregateBucketResponse:
    return AggregateBucketResponse(**bucket.to_dict())


@router.get("/summary", response_model=AggregateBucketResponse)
def get_summary(
    selections: dict[str, list[str]] = Depends(get_facet_selections),
    service: DashboardService = Depends(get_dashboard_service),
) -> AggregateBucketResponse:
    try:
        bucket = service.summary(selections)
    except SERVICE_ERRORS as exc:
        raise to_http_error(exc) from exc
    return _bucket_response(bucket)


@router.get("/periods/{granularity}", response_model=PeriodAggregationResponse)
def get_period_aggregation(
    granularity: str,
    year: int | None = Query(default=None, description="Restrict the grid to one year"),
    selections: dict[str, list[str]] = Depends(get_facet_selections),
    service: DashboardService = Depends(get_dashboard_service),
) -> PeriodAggregationResponse:
    """
    One bucket per year, quarter or month of the grid, empty periods included.
    """

    try:
        result = service.period_aggregation(granularity, year=year, selections=selections)
    except SERVICE_ERRORS as exc:
        raise to_http_error(exc) from exc

    return PeriodAggregationResponse(
        granularity=result.granularity,
        years=list(result.years),
        buckets=[_bucket_response(bucket) for bucket in result.buckets],
        total=_bucket_response(result.total),
        unresolved_count=result.unresolved_count,
    )


@router.get("/breakdown/{dimension}", response_model=DimensionAggregationResponse)
def get_dimension_aggregation(
    dimension: str,
    top_n: int | None = Query(default=None, ge=0, description="Keep only the first N groups"),
    sort_by: str = Query(default=SORT_BY_PREMIUM, description="'premium' or 'key'"),
    members: list[str] = Query(default=[], description="Dimensions listed per group"),
    selections: dict[str, list[str]] = Depends(get_facet_selections),
    service: DashboardService = Depends(get_dashboard_service),
) -> DimensionAggregationResponse:
    """
    Groups ranked by premium; ``total`` covers every matching group.
    """

    try:
        result = service.dimension_aggregation(
            dimension,
            selections=selections,
            top_n=top_n,
            sort_by=sort_by,
            member_dimensions=members,
        )
    except SERVICE_ERRORS as exc:
        raise to_http_error(exc) from exc

    return DimensionAggregationResponse(
        dimension=result.dimension,
        rows=[
            DimensionRowResponse(
                **row.bucket.to_dict(),
                premium_share_pct=row.premium_share_pct,
                members=row.members,
            )
            for row in result.rows
        ],
        total=_bucket_response(result.total),
        group_count=result.group_count,
        excluded_count=result.excluded_count,
    )
