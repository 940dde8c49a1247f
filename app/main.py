from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from app.config import get_log_level
from app.logging_utils import configure_logging
from app.services.dashboard_service import DashboardService, build_dashboard_service
from app.services.dataset_cache import DatasetLoadError

logger = logging.getLogger(__name__)


def _warm_dataset(application: FastAPI) -> None:
    """
    Build the service if needed and load the dataset once.

    A missing or unreadable dataset is logged; requests report it as 503.
    """

    service: DashboardService | None = getattr(application.state, "dashboard_service", None)
    if service is None:
        service = build_dashboard_service()
        application.state.dashboard_service = service
    try:
        snapshot = service.load()
    except DatasetLoadError as exc:
        logger.error("Dataset warm-up failed: %s", exc)
        return
    logger.info(
        "Dataset warmed: %d records loaded at %s",
        len(snapshot.records),
        snapshot.loaded_at.isoformat(),
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Warm the dataset cache on boot."""
    _warm_dataset(application)
    yield


def create_app(service: DashboardService | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    ``service`` replaces the file-backed dashboard service (tests inject
    one over an in-memory cache).
    """

    configure_logging(get_log_level())

    application = FastAPI(
        title="Reinsurance Insights API",
        version="1.0.0",
        lifespan=_lifespan,
    )
    if service is not None:
        application.state.dashboard_service = service

    from app.api.routers import aggregation_router, data_router, health_router

    application.include_router(health_router)
    application.include_router(data_router)
    application.include_router(aggregation_router)

    return application


app = create_app()
