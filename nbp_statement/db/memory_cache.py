"""Process-local rate cache."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterator

from nbp_statement.db.base_cache import RateCache
from nbp_statement.utils.logger import get_logger

LOGGER = get_logger(__name__)


class InMemoryRateCache(RateCache):
    """Dictionary-backed cache that lives as long as the process."""

    def __init__(self) -> None:
        self._rates: dict[str, Decimal] = {}

    def get(self, key: str) -> Decimal | None:
        return self._rates.get(key)

    def set(self, key: str, rate: Decimal) -> None:
        existing = self._rates.get(key)
        if existing is None:
            self._rates[key] = rate
            return
        if existing != rate:
            LOGGER.warning(
                "Ignoring conflicting rate for %s: cached %s, new %s", key, existing, rate
            )

    def keys(self) -> list[str]:
        return sorted(self._rates)

    def __contains__(self, key: object) -> bool:
        return key in self._rates

    def __len__(self) -> int:
        return len(self._rates)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())


__all__ = ["InMemoryRateCache"]
