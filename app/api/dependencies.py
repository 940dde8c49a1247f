"""
app/api/dependencies.py

Shared FastAPI dependencies: the dashboard service and facet selections.
"""

from __future__ import annotations

import threading

from fastapi import Request

from app.services.dashboard_service import DashboardService, build_dashboard_service
from app.services.filter_index import FACETS

_SERVICE_LOCK = threading.Lock()


def get_dashboard_service(request: Request) -> DashboardService:
    """
    Return the service stored on ``app.state``, wiring the file-backed one
    on first use.
    """

    state = request.app.state
    service = getattr(state, "dashboard_service", None)
    if service is not None:
        return service
    with _SERVICE_LOCK:
        service = getattr(state, "dashboard_service", None)
        if service is None:
            service = build_dashboard_service()
            state.dashboard_service = service
    return service


def get_facet_selections(request: Request) -> dict[str, list[str]]:
    """
    Collect repeated ``?<facet>=value`` query parameters.

    Blank values are dropped; facets without values are omitted.
    """

    selections: dict[str, list[str]] = {}
    for facet in FACETS:
        values = [value for value in request.query_params.getlist(facet) if value.strip()]
        if values:
            selections[facet] = values
    return selections
