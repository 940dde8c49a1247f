"""
app/services/dataset_loader.py

Text-to-records pipeline: header mapping, row parsing and normalization.
"""

from __future__ import annotations

import logging
from collections import Counter

from app.domain.policy_record import CanonicalRecord, LoadSummary
from app.logging_utils import log_event
from app.mappers.column_mapper import ColumnMapper
from app.parsing.row_parser import RowParser, split_text
from app.validators.field_normalizer import FieldNormalizer

logger = logging.getLogger(__name__)


class PolicyDatasetLoader:
    """
    Turns the full dataset text into canonical records.

    Structural row problems are counted and skipped; only an unusable
    header row raises (:class:`~app.validators.mapping_validator.ColumnMappingError`).
    """

    def __init__(
        self,
        *,
        mapper: ColumnMapper | None = None,
        normalizer: FieldNormalizer | None = None,
        log_details: bool = True,
    ) -> None:
        self._mapper = mapper or ColumnMapper()
        self._normalizer = normalizer or FieldNormalizer()
        self._log_details = log_details

    def load_text(self, text: str) -> tuple[list[CanonicalRecord], LoadSummary]:
        split = split_text(text)
        mapping = self._mapper.build_mapping(split.headers)
        parser = RowParser(mapping)

        records: list[CanonicalRecord] = []
        skipped_short = 0
        rejected_missing_uy = 0
        for row in parser.iter_rows(split.lines):
            if row is None:
                skipped_short += 1
                continue
            record = self._normalizer.normalize(row)
            if record is None:
                rejected_missing_uy += 1
                continue
            records.append(record)

        uy_counts = Counter(record.uy.display for record in records)
        summary = LoadSummary(
            rows_read=len(split.lines),
            rows_skipped_short=skipped_short,
            rows_rejected_missing_uy=rejected_missing_uy,
            records_loaded=len(records),
            uy_counts=dict(sorted(uy_counts.items())),
        )

        if self._log_details:
            logger.info(
                "Dataset parsed: %d lines read, %d short rows skipped, "
                "%d rows without UY rejected, %d records kept",
                summary.rows_read,
                summary.rows_skipped_short,
                summary.rows_rejected_missing_uy,
                summary.records_loaded,
            )
            log_event(logger, logging.INFO, "dataset_uy_counts", uy_counts=summary.uy_counts)
        return records, summary
