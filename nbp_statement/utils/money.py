"""Helpers for the currency-formatted amounts found in statements."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from nbp_statement.exceptions import ParseError

RATE_QUANT = Decimal("0.0001")
AMOUNT_QUANT = Decimal("0.01")


def parse_amount(text: str) -> Decimal:
    """Convert ``"€1,234.56"`` style text into a :class:`Decimal`.

    The currency symbol, whitespace and thousands separators are dropped.
    """

    if not isinstance(text, str) or not text.strip():
        raise ParseError("Amount is empty")
    cleaned = re.sub(r"[^0-9.\-]", "", text)
    if cleaned in {"", "-", ".", "-."}:
        raise ParseError(f"No amount found in {text!r}")
    try:
        return Decimal(cleaned)
    except InvalidOperation as exc:
        raise ParseError(f"Malformed amount {text!r}") from exc


def parse_amount_safe(text: str | None) -> Decimal:
    """Like :func:`parse_amount` but returns ``Decimal("0")`` on bad input."""

    if text is None:
        return Decimal("0")
    try:
        return parse_amount(text)
    except ParseError:
        return Decimal("0")


def format_rate(rate: Decimal | None) -> str:
    return "" if rate is None else f"{rate.quantize(RATE_QUANT, rounding=ROUND_HALF_UP)}"


def format_amount(amount: Decimal | None) -> str:
    return "" if amount is None else f"{amount.quantize(AMOUNT_QUANT, rounding=ROUND_HALF_UP)}"


__all__ = ["parse_amount", "parse_amount_safe", "format_rate", "format_amount"]
