"""Public interface for the nbp_statement package."""

from __future__ import annotations

import asyncio
from datetime import date
from decimal import Decimal
from importlib import metadata as importlib_metadata
from pathlib import Path
from typing import Sequence

from nbp_statement.config import PipelineConfig
from nbp_statement.db.base_cache import RateCache
from nbp_statement.db.memory_cache import InMemoryRateCache
from nbp_statement.db.sqlite_cache import SQLiteRateCache
from nbp_statement.exceptions import (
    CSVFormatError,
    FileReadError,
    NbpStatementError,
    ParseError,
    RateUnavailable,
    TransportError,
)
from nbp_statement.ingestion.models import AggregateResult, EnrichedRow, StatementRow
from nbp_statement.ingestion.nbp_requests import NBPRatesClient
from nbp_statement.ingestion.rate_fetcher import RateFetcher
from nbp_statement.ingestion.statement_csv import EnrichedCSVExporter, StatementCSVParser
from nbp_statement.ingestion.strategy import RateSource
from nbp_statement.pipeline.batch import BatchProcessor
from nbp_statement.pipeline.enricher import EntryEnricher
from nbp_statement.utils.dates import format_lookup_key, parse_lookup_key

__all__ = [
    "__version__",
    "NbpStatement",
    "PipelineConfig",
    "StatementRow",
    "EnrichedRow",
    "AggregateResult",
    "InMemoryRateCache",
    "SQLiteRateCache",
    "NbpStatementError",
    "ParseError",
    "RateUnavailable",
    "TransportError",
    "FileReadError",
    "CSVFormatError",
]

try:
    __version__ = importlib_metadata.version("nbp-statement")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.1.0"


class NbpStatement:
    """Package facade wiring config, rate cache, rate source and pipeline."""

    __slots__ = (
        "config",
        "cache",
        "source",
        "fetcher",
        "processor",
        "_owns_cache",
        "_owns_source",
    )

    __version__ = __version__

    def __init__(
        self,
        config: PipelineConfig | None = None,
        *,
        cache: RateCache | None = None,
        cache_path: str | Path | None = None,
        source: RateSource | None = None,
    ) -> None:
        """Build the pipeline.

        ``cache`` takes precedence over ``cache_path``; with neither the
        rates only live in memory for this instance. Without ``source`` an
        :class:`NBPRatesClient` is created from ``config``. A cache or source
        passed in is left open by :meth:`close`.
        """

        self.config = config or PipelineConfig()
        self._owns_cache = cache is None
        if cache is not None:
            self.cache = cache
        elif cache_path is not None:
            self.cache = SQLiteRateCache(cache_path, prefix=self.config.cache_prefix)
        else:
            self.cache = InMemoryRateCache()
        self._owns_source = source is None
        self.source: RateSource = source or NBPRatesClient(
            base_url=self.config.api_url,
            table=self.config.table,
            currency=self.config.currency,
            timeout=self.config.timeout,
        )
        self.fetcher = RateFetcher(
            self.source, self.cache, max_attempts=self.config.max_attempts
        )
        self.processor = BatchProcessor(
            EntryEnricher(self.fetcher),
            chunk_size=self.config.chunk_size,
            chunk_delay=self.config.chunk_delay,
        )

    def process_rows(self, rows: Sequence[StatementRow]) -> AggregateResult:
        """Enrich already-parsed rows."""

        return self.processor.run(rows)

    def process_file(self, csv_path: str | Path) -> AggregateResult:
        """Parse a statement CSV and enrich it.

        Raises :class:`FileReadError` or :class:`CSVFormatError` when the file
        itself cannot be used; per-row problems never abort the run.
        """

        return self.process_rows(StatementCSVParser().parse(csv_path))

    @staticmethod
    def export(result: AggregateResult, csv_path: str | Path) -> Path:
        return EnrichedCSVExporter().write(result, csv_path)

    def rate(self, lookup_date: date | str) -> Decimal | None:
        """Return the rate NBP published for ``lookup_date`` (or the closest earlier day)."""

        key = format_lookup_key(parse_lookup_key(lookup_date))
        return asyncio.run(self.fetcher.fetch_rate(key))

    def close(self) -> None:
        if self._owns_cache:
            self.cache.close()
        if self._owns_source and isinstance(self.source, NBPRatesClient):
            self.source.close()

    def __enter__(self) -> "NbpStatement":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
