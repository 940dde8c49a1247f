"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_DATASET_FILENAME = "Dataset_2019_2021_clean_for_code.csv"
ENV_FILENAMES = (".env", ".env.local")
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    """
    Return ``(key, value)`` for a ``KEY=VALUE`` line; ``None`` for blanks,
    comments and malformed lines. Surrounding quotes are removed.
    """

    line = raw_line.strip()
    if not line or line.startswith("#"):
        return None
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
        return None
    return key, value.strip().strip("\"'")


def load_env_files(root: Path = PROJECT_ROOT) -> None:
    """
    Export pairs from ``.env`` then ``.env.local`` under *root*.

    Variables already present in the process environment keep their value.
    """

    for env_path in (root / name for name in ENV_FILENAMES):
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            pair = _parse_env_line(raw_line)
            if pair is not None:
                os.environ.setdefault(*pair)


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def _read_env(name: str) -> str | None:
    """
    Stripped environment value, or ``None`` when unset or blank.
    """

    _load_env_once()
    value = os.getenv(name, "").strip()
    return value or None


def _get_bool_env(name: str, default: bool) -> bool:
    value = _read_env(name)
    return default if value is None else value.lower() in _TRUE_VALUES


def _get_int_env(name: str, default: int) -> int:
    value = _read_env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    value = _read_env(name)
    return default if value is None else value


@dataclass(frozen=True)
class DatasetSettings:
    """
    Runtime settings for the policy dataset pipeline.
    """

    csv_path: str = DEFAULT_DATASET_FILENAME
    encoding: str = "utf-8-sig"
    default_limit: int = 2000
    max_limit: int = 100_000
    min_year: int = 2019
    max_year: int = 2021
    log_load_details: bool = True

    @property
    def years(self) -> tuple[int, ...]:
        return tuple(range(self.min_year, self.max_year + 1))

    def candidate_paths(self, cwd: Path | None = None) -> list[Path]:
        """
        Return the locations tried, in order, when resolving the dataset.

        An absolute ``csv_path`` is used as-is. A relative one is looked up
        in the working directory, its parent and grandparent, then the
        ``src`` and ``frontend`` sub-directories.
        """

        path = Path(self.csv_path)
        if path.is_absolute():
            return [path]
        base = cwd or Path.cwd()
        return [
            base / path,
            base.parent / path,
            base.parent.parent / path,
            base / "src" / path,
            base / "frontend" / path,
        ]

    def resolve_csv_path(self, cwd: Path | None = None) -> Path:
        """
        Return the first existing candidate, or the first candidate when
        none exists so the load error names a concrete path.
        """

        candidates = self.candidate_paths(cwd)
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        return candidates[0]


@lru_cache(maxsize=1)
def get_dataset_settings() -> DatasetSettings:
    """
    Return cached dataset settings from environment variables.
    """

    min_year = _get_int_env("DATASET_MIN_YEAR", 2019)
    return DatasetSettings(
        csv_path=_get_str_env("DATASET_CSV_PATH", DEFAULT_DATASET_FILENAME),
        encoding=_get_str_env("DATASET_ENCODING", "utf-8-sig"),
        default_limit=max(1, _get_int_env("DATASET_DEFAULT_LIMIT", 2000)),
        max_limit=max(1, _get_int_env("DATASET_MAX_LIMIT", 100_000)),
        min_year=min_year,
        max_year=max(min_year, _get_int_env("DATASET_MAX_YEAR", 2021)),
        log_load_details=_get_bool_env("DATASET_LOG_LOAD_DETAILS", True),
    )


def get_log_level() -> str:
    """
    Return the configured root log level name.
    """

    return _get_str_env("LOG_LEVEL", "INFO").upper()
