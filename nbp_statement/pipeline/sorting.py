"""Column sorting for enriched statement tables."""

from __future__ import annotations

from typing import Any, Callable, Iterable

from nbp_statement.ingestion.models import STATEMENT_COLUMNS, EnrichedRow
from nbp_statement.utils.dates import statement_sort_key
from nbp_statement.utils.money import parse_amount_safe

DATE_COLUMN = "Completed Date"
AMOUNT_COLUMNS = frozenset({"Money in", "Money out", "Balance"})


def _key_for(field: str) -> Callable[[EnrichedRow], Any]:
    if field not in STATEMENT_COLUMNS:
        raise ValueError(f"Cannot sort by unknown column {field!r}")
    if field == DATE_COLUMN:
        return lambda entry: statement_sort_key(entry.row.completed_date)
    if field in AMOUNT_COLUMNS:
        return lambda entry: parse_amount_safe(entry.row.get(field))
    return lambda entry: entry.row.get(field)


def sort_rows(
    rows: Iterable[EnrichedRow],
    field: str = DATE_COLUMN,
    *,
    descending: bool = False,
) -> list[EnrichedRow]:
    """Return ``rows`` ordered by a statement column.

    Dates sort chronologically, amounts numerically (unparseable amounts as
    zero) and any other column as plain text.
    """

    return sorted(rows, key=_key_for(field), reverse=descending)


__all__ = ["sort_rows", "DATE_COLUMN", "AMOUNT_COLUMNS"]
