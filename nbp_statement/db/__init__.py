"""Rate cache implementations."""

from __future__ import annotations

from pathlib import Path
from typing import Final

__all__ = ["DEFAULT_CACHE_DB_PATH", "default_cache_path"]

# Historical rates never change, so one cache per user profile is shared by
# every run.
DEFAULT_CACHE_DB_PATH: Final[Path] = Path.home() / ".nbp_statement" / "rates.db"


def default_cache_path() -> Path:
    """Return the absolute path of the per-user SQLite rate cache."""

    return DEFAULT_CACHE_DB_PATH.expanduser().resolve()
