"""
Load the policy dataset from CLI and print a JSON summary.
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace

from app.config import get_dataset_settings, get_log_level
from app.logging_utils import configure_logging
from app.services.aggregation_service import SORT_BY_KEY
from app.services.dashboard_service import build_dashboard_service
from app.services.dataset_cache import DatasetLoadError

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Summarize the reinsurance policy dataset.")
    parser.add_argument(
        "--csv",
        dest="csv_path",
        default=None,
        help="Dataset path; defaults to DATASET_CSV_PATH.",
    )
    parser.add_argument(
        "--granularity",
        choices=("year", "quarter", "month"),
        default="year",
        help="Period grid printed under 'periods'.",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=10,
        help="Number of countries listed by premium.",
    )
    args = parser.parse_args()

    configure_logging(get_log_level())
    settings = get_dataset_settings()
    if args.csv_path:
        settings = replace(settings, csv_path=args.csv_path)

    service = build_dashboard_service(settings)
    try:
        snapshot = service.load()
    except DatasetLoadError as exc:
        logger.error("%s", exc)
        return 1

    periods = service.period_aggregation(args.granularity)
    by_uy = service.dimension_aggregation("uy", sort_by=SORT_BY_KEY)
    by_country = service.dimension_aggregation("country", top_n=args.top)

    payload = {
        "loaded_at": snapshot.loaded_at.isoformat(),
        "load": {
            "rows_read": snapshot.summary.rows_read,
            "rows_skipped_short": snapshot.summary.rows_skipped_short,
            "rows_rejected_missing_uy": snapshot.summary.rows_rejected_missing_uy,
            "records_loaded": snapshot.summary.records_loaded,
            "uy_counts": snapshot.summary.uy_counts,
        },
        "total": service.summary().to_dict(),
        "periods": {
            "granularity": periods.granularity,
            "unresolved_count": periods.unresolved_count,
            "buckets": [bucket.to_dict() for bucket in periods.buckets],
        },
        "by_uy": [row.bucket.to_dict() for row in by_uy.rows],
        "top_countries": [
            {**row.bucket.to_dict(), "premium_share_pct": row.premium_share_pct}
            for row in by_country.rows
        ],
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
