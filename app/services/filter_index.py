"""
app/services/filter_index.py

Inverted indexes and multi-facet filtering over canonical records.

Semantics
---------
* Within a facet, selected values are OR'd.
* Across facets, the per-facet results are AND'd.
* A facet with no selections imposes no constraint.

Selections are compared by normalized key, so ``"ABC Re"`` and
``" abc  re"`` select the same records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from app.domain.policy_record import (
    DIMENSION_ATTRIBUTES,
    CanonicalRecord,
    UnknownDimensionError,
    dimension_of,
)
from app.services.period_resolver import PeriodResolver
from app.validators.field_normalizer import normalize_key

logger = logging.getLogger(__name__)

YEAR_FACET = "year"
FACETS: tuple[str, ...] = (*DIMENSION_ATTRIBUTES.keys(), YEAR_FACET)


@dataclass(frozen=True)
class FilterIndexes:
    """
    Per-facet ``key -> ascending record positions`` plus the display form
    first seen for each key.
    """

    positions: dict[str, dict[str, tuple[int, ...]]]
    displays: dict[str, dict[str, str]]
    record_count: int

    def lookup(self, facet: str, key: str) -> tuple[int, ...]:
        return self.positions[facet].get(key, ())


@dataclass(frozen=True)
class FilterResult:
    """
    Positions (ascending) and records passing every active facet.
    """

    positions: tuple[int, ...]
    records: list[CanonicalRecord]

    @property
    def count(self) -> int:
        return len(self.positions)


def validate_selections(selections: Mapping[str, Sequence[str]]) -> None:
    for facet in selections:
        if facet not in FACETS:
            raise UnknownDimensionError(facet, list(FACETS))


class FilterIndexService:
    """
    Builds indexes and applies selections.

    The year facet uses the resolver's year, so it matches the yearly
    view rather than the raw UY label.
    """

    def __init__(self, resolver: PeriodResolver) -> None:
        self._resolver = resolver

    def facet_value(self, record: CanonicalRecord, facet: str) -> tuple[str, str] | None:
        """
        Return ``(key, display)`` of *record* for *facet*, or ``None``.
        """

        if facet == YEAR_FACET:
            year = self._resolver.resolve_year(record)
            return (str(year), str(year)) if year is not None else None
        value = dimension_of(record, facet)
        return (value.key, value.display) if value is not None else None

    def build_indexes(self, records: Sequence[CanonicalRecord]) -> FilterIndexes:
        """
        One inverted index per facet.
        """

        positions: dict[str, dict[str, list[int]]] = {facet: {} for facet in FACETS}
        displays: dict[str, dict[str, str]] = {facet: {} for facet in FACETS}

        for position, record in enumerate(records):
            for facet in FACETS:
                value = self.facet_value(record, facet)
                if value is None:
                    continue
                key, display = value
                positions[facet].setdefault(key, []).append(position)
                displays[facet].setdefault(key, display)

        logger.debug(
            "Built filter indexes over %d records: %s",
            len(records),
            {facet: len(index) for facet, index in positions.items()},
        )
        return FilterIndexes(
            positions={
                facet: {key: tuple(values) for key, values in index.items()}
                for facet, index in positions.items()
            },
            displays=displays,
            record_count=len(records),
        )

    def matching_positions(
        self,
        indexes: FilterIndexes,
        selections: Mapping[str, Sequence[str]],
    ) -> tuple[int, ...]:
        """
        Union within each facet, intersection across facets.
        """

        validate_selections(selections)
        pool: set[int] | None = None
        for facet, values in selections.items():
            keys = {normalize_key(value) for value in values if normalize_key(value)}
            if not keys:
                continue
            facet_positions: set[int] = set()
            for key in keys:
                facet_positions.update(indexes.lookup(facet, key))
            pool = facet_positions if pool is None else pool & facet_positions
            if not pool:
                break

        if pool is None:
            return tuple(range(indexes.record_count))
        return tuple(sorted(pool))

    def apply_filters(
        self,
        records: Sequence[CanonicalRecord],
        indexes: FilterIndexes,
        selections: Mapping[str, Sequence[str]],
    ) -> FilterResult:
        """
        Return the records matching *selections*, in source order.
        """

        positions = self.matching_positions(indexes, selections)
        return FilterResult(positions=positions, records=[records[i] for i in positions])

    def available_options(
        self,
        records: Iterable[CanonicalRecord],
    ) -> dict[str, list[str]]:
        """
        Distinct display values per facet over *records* (the currently
        filtered pool), sorted; years sort numerically.
        """

        seen: dict[str, dict[str, str]] = {facet: {} for facet in FACETS}
        for record in records:
            for facet in FACETS:
                value = self.facet_value(record, facet)
                if value is not None:
                    key, display = value
                    seen[facet].setdefault(key, display)

        options = {facet: sorted(values.values()) for facet, values in seen.items()}
        options[YEAR_FACET] = sorted(seen[YEAR_FACET].values(), key=int)
        return options
