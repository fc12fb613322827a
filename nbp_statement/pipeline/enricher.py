"""Attach NBP rate and PLN profit to gross interest rows."""

from __future__ import annotations

from decimal import Decimal

from nbp_statement.exceptions import ParseError
from nbp_statement.ingestion.models import EnrichedRow, StatementRow
from nbp_statement.ingestion.rate_fetcher import RateFetcher
from nbp_statement.utils.dates import format_lookup_key, parse_statement_date, previous_business_day
from nbp_statement.utils.logger import get_logger
from nbp_statement.utils.money import parse_amount

LOGGER = get_logger(__name__)


class EntryEnricher:
    """Convert the money-in amount of an interest row into PLN.

    The rate used is the NBP mid rate of the business day before the
    completed date. Rows that are not interest, have no money-in amount, or
    for which no rate can be found come back unenriched.
    """

    def __init__(self, fetcher: RateFetcher) -> None:
        self.fetcher = fetcher

    async def enrich(self, row: StatementRow) -> EnrichedRow:
        if not row.is_gross_interest or not row.money_in:
            return EnrichedRow(row)

        try:
            completed = parse_statement_date(row.completed_date)
            lookup_date = previous_business_day(completed)
        except (ParseError, OverflowError) as exc:
            LOGGER.warning("Skipping interest row with bad date %r: %s", row.completed_date, exc)
            return EnrichedRow(row)

        rate = await self.fetcher.fetch_rate(format_lookup_key(lookup_date))
        if rate is None:
            return EnrichedRow(row)

        try:
            amount = parse_amount(row.money_in)
        except ParseError as exc:
            LOGGER.warning("%s on %s; counting zero profit", exc, row.completed_date)
            amount = Decimal("0")
        return EnrichedRow(
            row,
            lookup_date=lookup_date,
            exchange_rate=rate,
            profit=amount * rate,
        )


__all__ = ["EntryEnricher"]
