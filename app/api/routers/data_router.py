"""
app/api/routers/data_router.py

Dataset, dimension and filter-option endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_dashboard_service, get_facet_selections
from app.api.routers.errors import SERVICE_ERRORS, to_http_error
from app.schemas.dataset import (
    DimensionsResponse,
    FilteredDataResponse,
    FilterOptionsResponse,
    PolicyRecordResponse,
)
from app.services.dashboard_service import DashboardService

router = APIRouter(prefix="/api", tags=["data"])


@router.get("/data", response_model=FilteredDataResponse)
def get_data(
    limit: int | None = Query(default=None, ge=0, description="Maximum records returned"),
    force_reload: bool = Query(default=False, description="Reparse the dataset before answering"),
    selections: dict[str, list[str]] = Depends(get_facet_selections),
    service: DashboardService = Depends(get_dashboard_service),
) -> FilteredDataResponse:
    """
    Records matching the facet selections, in source order.
    """

    try:
        result = service.filtered_data(selections, limit=limit, force_reload=force_reload)
    except SERVICE_ERRORS as exc:
        raise to_http_error(exc) from exc

    return FilteredDataResponse(
        records=[PolicyRecordResponse(**record.to_dict()) for record in result.records],
        total=result.total,
        returned=result.returned,
        loaded_at=result.loaded_at,
    )


@router.get("/dimensions", response_model=DimensionsResponse)
def get_dimensions(
    service: DashboardService = Depends(get_dashboard_service),
) -> DimensionsResponse:
    try:
        view = service.dimensions()
    except SERVICE_ERRORS as exc:
        raise to_http_error(exc) from exc
    return DimensionsResponse(values=view.values, years=view.years, loaded_at=view.loaded_at)


@router.get("/filter-options", response_model=FilterOptionsResponse)
def get_filter_options(
    selections: dict[str, list[str]] = Depends(get_facet_selections),
    service: DashboardService = Depends(get_dashboard_service),
) -> FilterOptionsResponse:
    """
    Facet values still available under the current selections.
    """

    try:
        options = service.filter_options(selections)
    except SERVICE_ERRORS as exc:
        raise to_http_error(exc) from exc
    return FilterOptionsResponse(options=options.options, match_count=options.match_count)
