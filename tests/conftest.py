"""
tests/conftest.py

Shared fixtures over the in-memory sample dataset.
"""

from __future__ import annotations

import pytest

from app.domain.policy_record import CanonicalRecord
from app.services.aggregation_service import AggregationService
from app.services.dashboard_service import DashboardService
from app.services.dataset_cache import DatasetCache
from app.services.dataset_loader import PolicyDatasetLoader
from app.services.period_resolver import PeriodResolver
from tests.factories import FIXED_NOW, SAMPLE_CSV, FakeSource


@pytest.fixture()
def resolver() -> PeriodResolver:
    return PeriodResolver(min_year=2019, max_year=2021)


@pytest.fixture()
def aggregation(resolver: PeriodResolver) -> AggregationService:
    return AggregationService(resolver)


@pytest.fixture()
def sample_source() -> FakeSource:
    return FakeSource(SAMPLE_CSV)


@pytest.fixture()
def sample_cache(sample_source: FakeSource) -> DatasetCache:
    return DatasetCache(
        loader=PolicyDatasetLoader(),
        stat_provider=sample_source.stat,
        reader=sample_source.read,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture()
def sample_records(sample_cache: DatasetCache) -> list[CanonicalRecord]:
    return list(sample_cache.get().records)


@pytest.fixture()
def dashboard(sample_cache: DatasetCache, resolver: PeriodResolver) -> DashboardService:
    return DashboardService(cache=sample_cache, resolver=resolver, default_limit=3, max_limit=4)
