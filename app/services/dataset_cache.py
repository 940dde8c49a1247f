"""
app/services/dataset_cache.py

Process-local snapshot of the canonical record set with freshness checks.

A snapshot is reused while the source's version token (the file's
modification time) is unchanged. A reload parses the whole source and
publishes the new snapshot with one attribute assignment, so concurrent
readers see either the old or the new snapshot, never a mixture.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Protocol

from app.config import DatasetSettings
from app.domain.policy_record import CanonicalRecord, LoadSummary
from app.logging_utils import log_event
from app.validators.mapping_validator import ColumnMappingError

logger = logging.getLogger(__name__)

StatProvider = Callable[[], object]
SourceReader = Callable[[], str]
Clock = Callable[[], datetime]


class DatasetLoadError(RuntimeError):
    """
    Raised when the dataset source cannot be read or parsed.
    """


class TextLoader(Protocol):
    def load_text(self, text: str) -> tuple[list[CanonicalRecord], LoadSummary]:
        ...


@dataclass(frozen=True)
class DatasetSnapshot:
    """
    Immutable canonical record set plus its provenance.
    """

    records: tuple[CanonicalRecord, ...]
    source_version: object
    loaded_at: datetime
    summary: LoadSummary


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DatasetCache:
    """
    Holds the current :class:`DatasetSnapshot`.

    Parameters
    ----------
    loader:
        Converts source text into records (``load_text``).
    stat_provider:
        Returns the source's current version token; raises ``OSError`` when
        the source cannot be inspected.
    reader:
        Returns the full source text; raises ``OSError`` on I/O failure.
    clock:
        Timestamp source for ``loaded_at``.
    """

    def __init__(
        self,
        loader: TextLoader,
        stat_provider: StatProvider,
        reader: SourceReader,
        clock: Clock = _utc_now,
    ) -> None:
        self._loader = loader
        self._stat_provider = stat_provider
        self._reader = reader
        self._clock = clock
        self._snapshot: DatasetSnapshot | None = None
        # Invalidations requested vs. invalidations covered by the snapshot.
        self._requested = 0
        self._covered = 0
        self._lock = threading.Lock()
        self._invalidate_lock = threading.Lock()

    @property
    def snapshot(self) -> DatasetSnapshot | None:
        """The last published snapshot, without a freshness check."""
        return self._snapshot

    def invalidate(self) -> None:
        """
        Force a reparse on the next :meth:`get`. A request made while a
        reload is running is not satisfied by that reload.
        """

        with self._invalidate_lock:
            self._requested += 1

    def _is_fresh(self, current: DatasetSnapshot | None, version: object) -> bool:
        return (
            current is not None
            and self._covered == self._requested
            and current.source_version == version
        )

    def get(self) -> DatasetSnapshot:
        """
        Return a snapshot that is fresh with respect to the source version.
        """

        current = self._snapshot
        try:
            version = self._stat_provider()
        except OSError as exc:
            if current is not None:
                logger.warning(
                    "Dataset freshness check failed (%s); serving snapshot loaded at %s",
                    exc,
                    current.loaded_at.isoformat(),
                )
                return current
            raise DatasetLoadError(f"Dataset source is unavailable: {exc}") from exc

        if self._is_fresh(current, version):
            logger.debug("Dataset cache hit (version=%s)", version)
            return current

        with self._lock:
            current = self._snapshot
            if self._is_fresh(current, version):
                return current
            requested = self._requested
            snapshot = self._reload(version)
            self._snapshot = snapshot
            self._covered = requested
        return snapshot

    def _reload(self, version: object) -> DatasetSnapshot:
        try:
            text = self._reader()
        except (OSError, UnicodeDecodeError) as exc:
            raise DatasetLoadError(f"Dataset source could not be read: {exc}") from exc

        try:
            records, summary = self._loader.load_text(text)
        except ColumnMappingError as exc:
            raise DatasetLoadError(f"Dataset header is unusable: {exc}") from exc

        snapshot = DatasetSnapshot(
            records=tuple(records),
            source_version=version,
            loaded_at=self._clock(),
            summary=summary,
        )
        log_event(
            logger,
            logging.INFO,
            "dataset_reloaded",
            records=summary.records_loaded,
            rows_read=summary.rows_read,
            source_version=version,
            loaded_at=snapshot.loaded_at.isoformat(),
        )
        return snapshot


# ---------------------------------------------------------------------------
# File-backed providers
# ---------------------------------------------------------------------------


def file_stat_provider(path: Path) -> StatProvider:
    """
    Version token = modification time in nanoseconds.
    """

    def _stat() -> int:
        return path.stat().st_mtime_ns

    return _stat


def file_reader(path: Path, encoding: str) -> SourceReader:
    def _read() -> str:
        return path.read_text(encoding=encoding)

    return _read


def build_file_cache(settings: DatasetSettings, loader: TextLoader) -> DatasetCache:
    """
    Cache over the dataset file configured in *settings*.
    """

    path = settings.resolve_csv_path()
    logger.info("Dataset source resolved to %s", path)
    return DatasetCache(
        loader=loader,
        stat_provider=file_stat_provider(path),
        reader=file_reader(path, settings.encoding),
    )
