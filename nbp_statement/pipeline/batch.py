"""Drive the enricher over a whole statement in throttled groups."""

from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Awaitable, Callable, Iterator, Sequence, TypeVar

from nbp_statement.ingestion.models import AggregateResult, EnrichedRow, StatementRow
from nbp_statement.pipeline.enricher import EntryEnricher
from nbp_statement.utils.dates import statement_sort_key
from nbp_statement.utils.logger import get_logger

LOGGER = get_logger(__name__)

T = TypeVar("T")

DEFAULT_CHUNK_SIZE = 50
DEFAULT_CHUNK_DELAY = 0.1


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of ``items`` holding at most ``size`` entries."""

    if size <= 0:
        raise ValueError("size must be positive")
    for start in range(0, len(items), size):
        yield items[start : start + size]


class BatchProcessor:
    """Enrich every interest row of a statement and total the profit.

    Interest rows are sent to the enricher ``chunk_size`` at a time; all
    rows of a group run concurrently and the next group starts
    ``chunk_delay`` seconds after the previous one finished.
    """

    def __init__(
        self,
        enricher: EntryEnricher,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_delay: float = DEFAULT_CHUNK_DELAY,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if chunk_delay < 0:
            raise ValueError("chunk_delay must not be negative")
        self.enricher = enricher
        self.chunk_size = chunk_size
        self.chunk_delay = chunk_delay
        self._sleep = sleep

    async def process(self, rows: Sequence[StatementRow]) -> AggregateResult:
        merged: list[EnrichedRow] = [EnrichedRow(row) for row in rows]
        interest_positions = [index for index, row in enumerate(rows) if row.is_gross_interest]
        LOGGER.info(
            "Processing %s rows (%s gross interest entries)", len(rows), len(interest_positions)
        )

        groups = list(chunked(interest_positions, self.chunk_size))
        for number, group in enumerate(groups, start=1):
            if number > 1 and self.chunk_delay:
                await self._sleep(self.chunk_delay)
            LOGGER.info("Enriching chunk %s/%s (%s rows)", number, len(groups), len(group))
            enriched = await asyncio.gather(*(self.enricher.enrich(rows[i]) for i in group))
            for index, entry in zip(group, enriched):
                merged[index] = entry

        # ``sorted`` is stable, so same-day rows keep their statement order.
        ordered = sorted(merged, key=lambda entry: statement_sort_key(entry.row.completed_date))
        total = sum(
            (entry.profit for entry in ordered if entry.profit is not None), Decimal("0")
        )
        result = AggregateResult(rows=ordered, total_profit=total)
        LOGGER.info(
            "Enriched %s of %s interest rows; total profit %s",
            result.enriched_count,
            len(interest_positions),
            total,
        )
        return result

    def run(self, rows: Sequence[StatementRow]) -> AggregateResult:
        """Synchronous wrapper around :meth:`process`."""

        return asyncio.run(self.process(rows))


__all__ = ["BatchProcessor", "chunked", "DEFAULT_CHUNK_SIZE", "DEFAULT_CHUNK_DELAY"]
