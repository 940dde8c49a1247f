"""
app/services/dashboard_service.py

Request-level operations over the cached dataset.

Each operation takes a fresh snapshot from the cache, applies the facet
selections through the filter indexes, then delegates to the aggregation
engine. Indexes are rebuilt only when the snapshot changes.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Sequence

from app.config import DatasetSettings, get_dataset_settings
from app.domain.policy_record import DIMENSION_ATTRIBUTES, CanonicalRecord, InvalidPeriodError
from app.services.aggregation_service import (
    SORT_BY_PREMIUM,
    AggregateBucket,
    AggregationService,
    DimensionAggregation,
    PeriodAggregation,
)
from app.services.dataset_cache import DatasetCache, DatasetSnapshot, build_file_cache
from app.services.dataset_loader import PolicyDatasetLoader
from app.services.filter_index import FilterIndexes, FilterIndexService
from app.services.period_resolver import PeriodResolver

logger = logging.getLogger(__name__)

Selections = Mapping[str, Sequence[str]]


@dataclass(frozen=True)
class FilteredData:
    records: list[CanonicalRecord]
    total: int
    returned: int
    loaded_at: datetime


@dataclass(frozen=True)
class DimensionsView:
    values: dict[str, list[str]]
    years: list[int]
    loaded_at: datetime


@dataclass(frozen=True)
class FilterOptions:
    options: dict[str, list[str]]
    match_count: int


class DashboardService:
    """
    Facade used by the HTTP routers and the CLI.
    """

    def __init__(
        self,
        *,
        cache: DatasetCache,
        resolver: PeriodResolver,
        aggregation: AggregationService | None = None,
        filters: FilterIndexService | None = None,
        default_limit: int = 2000,
        max_limit: int = 100_000,
    ) -> None:
        self._cache = cache
        self._resolver = resolver
        self._aggregation = aggregation or AggregationService(resolver)
        self._filters = filters or FilterIndexService(resolver)
        self._default_limit = max(1, default_limit)
        self._max_limit = max(1, max_limit)
        self._indexed: tuple[DatasetSnapshot, FilterIndexes] | None = None
        self._index_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load(self, *, force_reload: bool = False) -> DatasetSnapshot:
        """
        Return the current snapshot, reparsing the source first when
        *force_reload* is set.
        """

        if force_reload:
            self._cache.invalidate()
        return self._cache.get()

    def _indexes_for(self, snapshot: DatasetSnapshot) -> FilterIndexes:
        indexed = self._indexed
        if indexed is not None and indexed[0] is snapshot:
            return indexed[1]
        with self._index_lock:
            indexed = self._indexed
            if indexed is not None and indexed[0] is snapshot:
                return indexed[1]
            indexes = self._filters.build_indexes(snapshot.records)
            self._indexed = (snapshot, indexes)
        return indexes

    def _select(
        self,
        selections: Selections | None,
        *,
        force_reload: bool = False,
    ) -> tuple[DatasetSnapshot, list[CanonicalRecord]]:
        snapshot = self.load(force_reload=force_reload)
        if not selections:
            return snapshot, list(snapshot.records)
        result = self._filters.apply_filters(
            snapshot.records, self._indexes_for(snapshot), selections
        )
        return snapshot, result.records

    # ------------------------------------------------------------------
    # Request operations
    # ------------------------------------------------------------------

    def dimensions(self) -> DimensionsView:
        """
        Sorted distinct display values per dimension over the full dataset.
        """

        snapshot = self.load()
        distinct: dict[str, set[str]] = {name: set() for name in DIMENSION_ATTRIBUTES}
        for record in snapshot.records:
            for name, attribute in DIMENSION_ATTRIBUTES.items():
                value = getattr(record, attribute)
                if value is not None and value.display:
                    distinct[name].add(value.display)
        return DimensionsView(
            values={name: sorted(values) for name, values in distinct.items()},
            years=list(self._resolver.years),
            loaded_at=snapshot.loaded_at,
        )

    def filtered_data(
        self,
        selections: Selections | None = None,
        *,
        limit: int | None = None,
        force_reload: bool = False,
    ) -> FilteredData:
        """
        Matching records in source order, capped at *limit*; ``total`` is
        the match count before the cap.
        """

        snapshot, records = self._select(selections, force_reload=force_reload)
        cap = self._default_limit if limit is None else min(max(0, limit), self._max_limit)
        capped = records[:cap]
        return FilteredData(
            records=capped,
            total=len(records),
            returned=len(capped),
            loaded_at=snapshot.loaded_at,
        )

    def summary(self, selections: Selections | None = None) -> AggregateBucket:
        """Single overall bucket for the selected records."""
        _, records = self._select(selections)
        return self._aggregation.summarize(records)

    def period_aggregation(
        self,
        granularity: str,
        *,
        year: int | None = None,
        selections: Selections | None = None,
    ) -> PeriodAggregation:
        if year is not None and not self._resolver.in_window(year):
            raise InvalidPeriodError(
                f"Year {year} is outside the supported window "
                f"{self._resolver.years[0]}-{self._resolver.years[-1]}."
            )
        _, records = self._select(selections)
        return self._aggregation.aggregate_by_period(
            records,
            granularity,
            years=[year] if year is not None else None,
        )

    def dimension_aggregation(
        self,
        dimension: str,
        *,
        selections: Selections | None = None,
        top_n: int | None = None,
        sort_by: str = SORT_BY_PREMIUM,
        member_dimensions: Sequence[str] = (),
    ) -> DimensionAggregation:
        _, records = self._select(selections)
        return self._aggregation.aggregate_by_dimension(
            records,
            dimension,
            top_n=top_n,
            sort_by=sort_by,
            member_dimensions=member_dimensions,
        )

    def filter_options(self, selections: Selections | None = None) -> FilterOptions:
        """
        Options still available given *selections*, plus the match count.
        """

        _, records = self._select(selections)
        return FilterOptions(
            options=self._filters.available_options(records),
            match_count=len(records),
        )


def build_dashboard_service(settings: DatasetSettings | None = None) -> DashboardService:
    """
    Wire the file-backed cache, resolver and engines from settings.
    """

    settings = settings or get_dataset_settings()
    resolver = PeriodResolver(min_year=settings.min_year, max_year=settings.max_year)
    loader = PolicyDatasetLoader(log_details=settings.log_load_details)
    return DashboardService(
        cache=build_file_cache(settings, loader),
        resolver=resolver,
        default_limit=settings.default_limit,
        max_limit=settings.max_limit,
    )
