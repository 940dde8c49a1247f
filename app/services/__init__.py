"""
app/services package marker.
"""

from app.services.aggregation_service import (
    AggregateBucket,
    AggregationService,
    DimensionAggregation,
    DimensionRow,
    PeriodAggregation,
)
from app.services.dashboard_service import DashboardService, build_dashboard_service
from app.services.dataset_cache import DatasetCache, DatasetLoadError, DatasetSnapshot
from app.services.dataset_loader import PolicyDatasetLoader
from app.services.filter_index import FACETS, FilterIndexService
from app.services.period_resolver import PeriodResolver

__all__ = [
    "AggregateBucket",
    "AggregationService",
    "DimensionAggregation",
    "DimensionRow",
    "PeriodAggregation",
    "DashboardService",
    "build_dashboard_service",
    "DatasetCache",
    "DatasetLoadError",
    "DatasetSnapshot",
    "PolicyDatasetLoader",
    "FACETS",
    "FilterIndexService",
    "PeriodResolver",
]
