"""Cached rate lookup with fallback to earlier business days."""

from __future__ import annotations

import asyncio
from decimal import Decimal

from nbp_statement.db.base_cache import RateCache
from nbp_statement.exceptions import RateNotPublished, RateUnavailable, TransportError
from nbp_statement.ingestion.strategy import RateSource
from nbp_statement.utils.dates import format_lookup_key, previous_business_day
from nbp_statement.utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 10


class RateFetcher:
    """Resolve the rate for a lookup date through a cache and a rate source.

    When the source has nothing for a day, the previous business day is
    tried, up to ``max_attempts`` source calls in total. A rate found on a
    fallback day is cached under the date that was originally requested.
    """

    def __init__(
        self,
        source: RateSource,
        cache: RateCache,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        self.source = source
        self.cache = cache
        self.max_attempts = max_attempts

    async def resolve(self, lookup_key: str) -> Decimal:
        """Return the rate for ``lookup_key`` or raise why there is none."""

        cached = self.cache.get(lookup_key)
        if cached is not None:
            LOGGER.debug("Cache hit for %s: %s", lookup_key, cached)
            return cached

        candidate = lookup_key
        for attempt in range(1, self.max_attempts + 1):
            rate = self.cache.get(candidate) if candidate != lookup_key else None
            if rate is None:
                try:
                    rate = await asyncio.to_thread(self.source.get_mid, candidate)
                except RateNotPublished:
                    try:
                        fallback = format_lookup_key(previous_business_day(candidate))
                    except OverflowError:
                        LOGGER.debug("No business day before %s to fall back to", candidate)
                        raise RateUnavailable(lookup_key, attempt) from None
                    LOGGER.debug(
                        "No rate for %s (attempt %s/%s), trying %s",
                        candidate,
                        attempt,
                        self.max_attempts,
                        fallback,
                    )
                    candidate = fallback
                    continue
            self.cache.set(lookup_key, rate)
            return rate
        raise RateUnavailable(lookup_key, self.max_attempts)

    async def fetch_rate(self, lookup_key: str) -> Decimal | None:
        """Like :meth:`resolve` but logs failures and returns ``None``."""

        try:
            return await self.resolve(lookup_key)
        except RateUnavailable as exc:
            LOGGER.warning("%s", exc)
        except TransportError as exc:
            LOGGER.error("Failed to fetch exchange rate for %s: %s", lookup_key, exc)
        return None


__all__ = ["RateFetcher", "DEFAULT_MAX_ATTEMPTS"]
