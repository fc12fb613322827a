"""Abstractions for pluggable exchange-rate sources."""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol


class RateSource(Protocol):
    """Contract for fetching a single daily reference rate.

    Implementations return the mid rate for ``lookup_key`` (``YYYY-MM-DD``),
    raise :class:`~nbp_statement.exceptions.RateNotPublished` when the source
    has no quote for that day and
    :class:`~nbp_statement.exceptions.TransportError` for anything else.
    """

    def get_mid(self, lookup_key: str) -> Decimal:
        ...  # pragma: no cover - protocol definition


__all__ = ["RateSource"]
