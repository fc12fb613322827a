"""Date helpers for statement dates and NBP lookup keys."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Tuple

from nbp_statement.exceptions import ParseError

MONTHS: dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

# Saturday and Sunday in ``date.weekday()`` numbering.
WEEKEND_DAYS = frozenset({5, 6})


def parse_statement_date(text: str) -> date:
    """Parse a statement date such as ``"15 Jan 2024"``."""

    parts = text.split() if isinstance(text, str) else []
    if len(parts) != 3:
        raise ParseError(f"Expected 'D Mon YYYY', got {text!r}")
    day_raw, month_raw, year_raw = parts
    month = MONTHS.get(month_raw.lower())
    if month is None:
        raise ParseError(f"Unknown month abbreviation {month_raw!r} in {text!r}")
    if not day_raw.isdigit() or not (year_raw.isdigit() and len(year_raw) == 4):
        raise ParseError(f"Malformed day or year in {text!r}")
    try:
        return date(int(year_raw), month, int(day_raw))
    except ValueError as exc:
        raise ParseError(f"Invalid calendar date {text!r}: {exc}") from exc


def format_lookup_key(value: date) -> str:
    """Render ``value`` as the ``YYYY-MM-DD`` key used for rate lookups."""

    return value.isoformat()


def parse_lookup_key(value: str | date) -> date:
    """Parse a lookup key in ISO format to :class:`date`."""

    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise ParseError(f"Malformed lookup key {value!r}") from exc


def previous_business_day(value: str | date) -> date:
    """Return the closest weekday strictly before ``value``.

    Only weekends are skipped; public holidays are left to the rate source,
    which answers 404 for them. Raises :class:`OverflowError` when there is
    no earlier weekday in the :class:`date` range.
    """

    current = parse_lookup_key(value) - timedelta(days=1)
    while current.weekday() in WEEKEND_DAYS:
        current -= timedelta(days=1)
    return current


def compare_statement_dates(first: str, second: str) -> int:
    """Compare two statement dates chronologically, returning -1, 0 or 1."""

    left = parse_statement_date(first)
    right = parse_statement_date(second)
    return (left > right) - (left < right)


def statement_sort_key(text: str) -> Tuple[int, date]:
    """Sort key that orders valid dates chronologically and puts bad ones last."""

    try:
        return (0, parse_statement_date(text))
    except ParseError:
        return (1, date.max)


__all__ = [
    "MONTHS",
    "parse_statement_date",
    "format_lookup_key",
    "parse_lookup_key",
    "previous_business_day",
    "compare_statement_dates",
    "statement_sort_key",
]
