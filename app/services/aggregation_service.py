"""
app/services/aggregation_service.py

Grouping and ratio engine over canonical policy records.

Every bucket sums four base measures (premium, acquisition, paid claims,
outstanding loss) plus max liability, then derives incurred claims,
technical result and the ratio family from those sums via
:class:`~kpi.underwriting.UnderwritingKPIFormula`. Ratios are never
averaged across records or buckets.

Grand totals are built by summing the base measures of the group buckets
and re-deriving the ratios, so a total always equals the sum of the rows
it summarises.

Entry points
------------
aggregate              – arbitrary key function
aggregate_by_period    – complete year / quarter / month grid
aggregate_by_dimension – country, broker, cedant, ... ranked by premium
summarize              – one bucket over all records
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Callable, Iterable, Optional, Sequence

from app.domain.policy_record import (
    DIMENSION_ATTRIBUTES,
    GRANULARITIES,
    QUARTERS,
    CanonicalRecord,
    InvalidPeriodError,
    UnknownDimensionError,
    dimension_of,
)
from app.services.period_resolver import MONTH_CODES, PeriodResolver
from kpi.base import BaseKPIFormula
from kpi.safe_math import safe_ratio_pct
from kpi.underwriting import UnderwritingKPIFormula

logger = logging.getLogger(__name__)

KeyFunction = Callable[[CanonicalRecord], Optional[str]]

SORT_BY_PREMIUM = "premium"
SORT_BY_KEY = "key"
_SORT_MODES = (SORT_BY_PREMIUM, SORT_BY_KEY)


# ---------------------------------------------------------------------------
# Result containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AggregateBucket:
    """
    Summed and derived measures for one group.

    Every numeric field is a finite number.
    """

    key: str
    label: str
    policy_count: int
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

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class PeriodAggregation:
    """
    One bucket per period of the requested grid plus the grand total.
    """

    granularity: str
    years: tuple[int, ...]
    buckets: list[AggregateBucket]
    total: AggregateBucket
    unresolved_count: int = 0


@dataclass(frozen=True)
class DimensionRow:
    """
    One ranked dimension group.
    """

    bucket: AggregateBucket
    premium_share_pct: float
    members: dict[str, list[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class DimensionAggregation:
    """
    Ranked groups (possibly truncated) and a total over every group.
    """

    dimension: str
    rows: list[DimensionRow]
    total: AggregateBucket
    group_count: int
    excluded_count: int = 0


# ---------------------------------------------------------------------------
# Internal accumulator
# ---------------------------------------------------------------------------


@dataclass
class _Accumulator:
    label: str
    policy_count: int = 0
    premium: float = 0.0
    acquisition: float = 0.0
    paid_claims: float = 0.0
    os_loss: float = 0.0
    max_liability: float = 0.0

    def add(self, record: CanonicalRecord) -> None:
        self.policy_count += 1
        self.premium += record.gross_uw_prem
        self.acquisition += record.gross_actual_acq
        self.paid_claims += record.gross_paid_claims
        self.os_loss += record.gross_os_loss
        self.max_liability += record.max_liability

    def merge(self, bucket: AggregateBucket) -> None:
        self.policy_count += bucket.policy_count
        self.premium += bucket.premium
        self.acquisition += bucket.acquisition
        self.paid_claims += bucket.paid_claims
        self.os_loss += bucket.os_loss
        self.max_liability += bucket.max_liability

    def to_bucket(self, key: str, formula: BaseKPIFormula) -> AggregateBucket:
        derived = formula.evaluate(
            {
                "policy_count": self.policy_count,
                "premium": self.premium,
                "acquisition": self.acquisition,
                "paid_claims": self.paid_claims,
                "os_loss": self.os_loss,
                "max_liability": self.max_liability,
            }
        )
        return AggregateBucket(
            key=key,
            label=self.label,
            policy_count=self.policy_count,
            premium=self.premium,
            acquisition=self.acquisition,
            paid_claims=self.paid_claims,
            os_loss=self.os_loss,
            max_liability=self.max_liability,
            incurred_claims=derived["incurred_claims"],
            technical_result=derived["technical_result"],
            loss_ratio_pct=derived["loss_ratio_pct"],
            acquisition_pct=derived["acquisition_pct"],
            combined_ratio_pct=derived["combined_ratio_pct"],
            avg_max_liability=derived["avg_max_liability"],
        )


# ---------------------------------------------------------------------------
# Period key helpers
# ---------------------------------------------------------------------------


def period_grid(granularity: str, years: Sequence[int]) -> list[tuple[str, str]]:
    """
    Return ``(key, label)`` for every period of *years* in calendar order.
    """

    grid: list[tuple[str, str]] = []
    for year in years:
        if granularity == "year":
            grid.append((str(year), str(year)))
        elif granularity == "quarter":
            grid.extend((f"{year}-{quarter}", f"{quarter} {year}") for quarter in QUARTERS)
        elif granularity == "month":
            grid.extend(
                (f"{year}-{month:02d}", f"{MONTH_CODES[month - 1].title()} {year}")
                for month in range(1, 13)
            )
        else:
            raise InvalidPeriodError(
                f"Unsupported granularity {granularity!r}. Allowed values: {', '.join(GRANULARITIES)}."
            )
    return grid


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class AggregationService:
    """
    Stateless grouping engine.

    Parameters
    ----------
    resolver:
        Period resolver used by :meth:`aggregate_by_period`.
    formula:
        Ratio formula; defaults to :class:`UnderwritingKPIFormula`.
    """

    def __init__(
        self,
        resolver: PeriodResolver,
        *,
        formula: BaseKPIFormula | None = None,
    ) -> None:
        self._resolver = resolver
        self._formula = formula or UnderwritingKPIFormula()

    # ------------------------------------------------------------------
    # Generic grouping
    # ------------------------------------------------------------------

    def aggregate(
        self,
        records: Iterable[CanonicalRecord],
        key_fn: KeyFunction,
        *,
        label_fn: KeyFunction | None = None,
    ) -> dict[str, AggregateBucket]:
        """
        Partition *records* by ``key_fn`` and build one bucket per key.

        Records whose key is ``None`` are left out. The bucket label is the
        ``label_fn`` value of the first record seen for the key (the key
        itself when no ``label_fn`` is given). Buckets are returned in
        first-seen order.
        """

        accumulators: dict[str, _Accumulator] = {}
        for record in records:
            key = key_fn(record)
            if key is None:
                continue
            accumulator = accumulators.get(key)
            if accumulator is None:
                label = label_fn(record) if label_fn is not None else None
                accumulator = _Accumulator(label=label or key)
                accumulators[key] = accumulator
            accumulator.add(record)

        return {
            key: accumulator.to_bucket(key, self._formula)
            for key, accumulator in accumulators.items()
        }

    def summarize(
        self,
        records: Iterable[CanonicalRecord],
        *,
        key: str = "total",
        label: str = "Total",
    ) -> AggregateBucket:
        """
        One bucket over every record (an empty input yields all zeros).
        """

        accumulator = _Accumulator(label=label)
        for record in records:
            accumulator.add(record)
        return accumulator.to_bucket(key, self._formula)

    def total_of(
        self,
        buckets: Iterable[AggregateBucket],
        *,
        key: str = "total",
        label: str = "Total",
    ) -> AggregateBucket:
        """
        Grand total whose base measures are the sums of *buckets*.
        """

        accumulator = _Accumulator(label=label)
        for bucket in buckets:
            accumulator.merge(bucket)
        return accumulator.to_bucket(key, self._formula)

    # ------------------------------------------------------------------
    # Period grouping
    # ------------------------------------------------------------------

    def aggregate_by_period(
        self,
        records: Iterable[CanonicalRecord],
        granularity: str,
        *,
        years: Sequence[int] | None = None,
    ) -> PeriodAggregation:
        """
        Bucket records on the complete calendar grid of *years*.

        Periods without records still appear with zero measures. Records
        whose period cannot be resolved at *granularity*, or whose year is
        outside *years*, are left out of this call only.
        """

        window = tuple(self._resolver.years)
        requested = tuple(sorted(set(years))) if years else window
        outside = [year for year in requested if year not in window]
        if outside:
            raise InvalidPeriodError(
                f"Years {outside} are outside the supported window "
                f"{window[0]}-{window[-1]}."
            )

        grid = period_grid(granularity, requested)
        requested_set = set(requested)
        unresolved = 0

        def _period_key(record: CanonicalRecord) -> str | None:
            nonlocal unresolved
            resolution = self._resolver.resolve(record)
            key = resolution.key_for(granularity)
            if key is None:
                unresolved += 1
                return None
            if resolution.year not in requested_set:
                return None
            return key

        grouped = self.aggregate(records, _period_key)
        buckets = [
            _relabel(grouped[key], label) if key in grouped else self.total_of((), key=key, label=label)
            for key, label in grid
        ]
        total = self.total_of(buckets)

        logger.debug(
            "aggregate_by_period granularity=%s years=%s → %d buckets, %d policies, %d unresolved",
            granularity, requested, len(buckets), total.policy_count, unresolved,
        )
        return PeriodAggregation(
            granularity=granularity,
            years=requested,
            buckets=buckets,
            total=total,
            unresolved_count=unresolved,
        )

    # ------------------------------------------------------------------
    # Dimension grouping
    # ------------------------------------------------------------------

    def aggregate_by_dimension(
        self,
        records: Sequence[CanonicalRecord],
        dimension: str,
        *,
        top_n: int | None = None,
        sort_by: str = SORT_BY_PREMIUM,
        member_dimensions: Sequence[str] = (),
    ) -> DimensionAggregation:
        """
        Group by the normalized key of *dimension* and rank the groups.

        Grouping is case-insensitive; the label is the first display form
        seen. Records without a value for *dimension* are excluded. The
        total covers every group even when ``top_n`` truncates the rows,
        and each row's ``premium_share_pct`` is relative to that total.

        ``member_dimensions`` lists other dimensions whose distinct display
        values are collected per group.
        """

        if dimension not in DIMENSION_ATTRIBUTES:
            raise UnknownDimensionError(dimension, list(DIMENSION_ATTRIBUTES))
        for member in member_dimensions:
            if member not in DIMENSION_ATTRIBUTES:
                raise UnknownDimensionError(member, list(DIMENSION_ATTRIBUTES))
        if sort_by not in _SORT_MODES:
            raise ValueError(f"Unsupported sort_by {sort_by!r}. Allowed values: {', '.join(_SORT_MODES)}.")

        def _key(record: CanonicalRecord) -> str | None:
            value = dimension_of(record, dimension)
            return value.key if value is not None else None

        def _label(record: CanonicalRecord) -> str | None:
            value = dimension_of(record, dimension)
            return value.display if value is not None else None

        grouped = self.aggregate(records, _key, label_fn=_label)
        total = self.total_of(grouped.values())
        excluded = len(records) - total.policy_count

        if sort_by == SORT_BY_KEY:
            ordered = sorted(grouped.values(), key=lambda bucket: bucket.key)
        else:
            ordered = sorted(grouped.values(), key=lambda bucket: (-bucket.premium, bucket.label.lower()))
        if top_n is not None:
            ordered = ordered[: max(0, top_n)]

        members = (
            _collect_members(records, dimension, member_dimensions, {bucket.key for bucket in ordered})
            if member_dimensions
            else {}
        )
        rows = [
            DimensionRow(
                bucket=bucket,
                premium_share_pct=safe_ratio_pct(bucket.premium, total.premium),
                members=members.get(bucket.key, {}),
            )
            for bucket in ordered
        ]

        logger.debug(
            "aggregate_by_dimension dimension=%s groups=%d returned=%d excluded=%d",
            dimension, len(grouped), len(rows), excluded,
        )
        return DimensionAggregation(
            dimension=dimension,
            rows=rows,
            total=total,
            group_count=len(grouped),
            excluded_count=excluded,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _relabel(bucket: AggregateBucket, label: str) -> AggregateBucket:
    return AggregateBucket(**{**asdict(bucket), "label": label})


def _collect_members(
    records: Iterable[CanonicalRecord],
    dimension: str,
    member_dimensions: Sequence[str],
    keys: set[str],
) -> dict[str, dict[str, list[str]]]:
    seen: dict[str, dict[str, dict[str, str]]] = {}
    for record in records:
        value = dimension_of(record, dimension)
        if value is None or value.key not in keys:
            continue
        per_group = seen.setdefault(value.key, {name: {} for name in member_dimensions})
        for name in member_dimensions:
            member = dimension_of(record, name)
            if member is not None:
                per_group[name].setdefault(member.key, member.display)
    return {
        key: {name: sorted(values.values()) for name, values in per_group.items()}
        for key, per_group in seen.items()
    }
