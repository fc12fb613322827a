"""Rate cache interface used by the rate fetcher."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal


class RateCache(ABC):
    """Key/value store mapping ISO lookup dates to exchange rates.

    Rates are historical facts: once a key holds a value, writing a different
    value for it is ignored.
    """

    @abstractmethod
    def get(self, key: str) -> Decimal | None:
        """Return the cached rate for ``key`` or ``None``."""

    @abstractmethod
    def set(self, key: str, rate: Decimal) -> None:
        """Store ``rate`` under ``key`` unless the key already holds a value."""

    def close(self) -> None:  # pragma: no cover - optional cleanup hook
        """Caches may override to release connections/resources."""

    def __enter__(self) -> "RateCache":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["RateCache"]
