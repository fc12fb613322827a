"""Data models shared across ingestion and pipeline modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Mapping

GROSS_INTEREST_MARKER = "Gross interest"

STATEMENT_COLUMNS = (
    "Completed Date",
    "Product name",
    "Description",
    "Interest rate (p.a.)",
    "Money out",
    "Money in",
    "Balance",
)


@dataclass(frozen=True, slots=True)
class StatementRow:
    """A single transaction row as it appears in the bank statement CSV."""

    completed_date: str
    product_name: str = ""
    description: str = ""
    interest_rate: str = ""
    money_out: str = ""
    money_in: str = ""
    balance: str = ""

    @classmethod
    def from_mapping(cls, row: Mapping[str, str | None]) -> "StatementRow":
        """Build a row from a ``csv.DictReader`` mapping keyed by statement columns."""

        values = [(row.get(column) or "").strip() for column in STATEMENT_COLUMNS]
        return cls(*values)

    @property
    def is_gross_interest(self) -> bool:
        return GROSS_INTEREST_MARKER in self.description

    def get(self, column: str) -> str:
        """Return the raw value for a statement column name."""

        try:
            index = STATEMENT_COLUMNS.index(column)
        except ValueError:
            raise KeyError(column) from None
        return (
            self.completed_date,
            self.product_name,
            self.description,
            self.interest_rate,
            self.money_out,
            self.money_in,
            self.balance,
        )[index]


@dataclass(frozen=True, slots=True)
class EnrichedRow:
    """A statement row plus the NBP rate and PLN profit, when available."""

    row: StatementRow
    lookup_date: date | None = None
    exchange_rate: Decimal | None = None
    profit: Decimal | None = None

    def __post_init__(self) -> None:
        present = [
            value is not None for value in (self.lookup_date, self.exchange_rate, self.profit)
        ]
        if any(present) and not all(present):
            raise ValueError("lookup_date, exchange_rate and profit must be set together")

    @property
    def is_enriched(self) -> bool:
        return self.profit is not None

    @property
    def lookup_key(self) -> str | None:
        return self.lookup_date.isoformat() if self.lookup_date is not None else None


@dataclass(slots=True)
class AggregateResult:
    """Chronologically ordered rows and the sum of their PLN profit."""

    rows: list[EnrichedRow] = field(default_factory=list)
    total_profit: Decimal = Decimal("0")

    @property
    def enriched_count(self) -> int:
        return sum(1 for row in self.rows if row.is_enriched)


__all__ = [
    "GROSS_INTEREST_MARKER",
    "STATEMENT_COLUMNS",
    "StatementRow",
    "EnrichedRow",
    "AggregateResult",
]
