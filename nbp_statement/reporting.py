"""Tabular views of an enriched statement."""

from __future__ import annotations

from decimal import Decimal

import pandas as pd

from nbp_statement.ingestion.models import AggregateResult
from nbp_statement.ingestion.statement_csv import EXPORT_HEADER
from nbp_statement.utils.money import format_amount, format_rate


def _as_float(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


def to_frame(result: AggregateResult) -> pd.DataFrame:
    """Return the enriched rows as a DataFrame using the export column names.

    ``Exchange Rate`` and ``Profit PLN`` are floats (NaN when absent);
    statement columns keep their original text.
    """

    records = [
        {
            "Date": entry.row.completed_date,
            "Product": entry.row.product_name,
            "Description": entry.row.description,
            "Interest Rate": entry.row.interest_rate,
            "Money Out": entry.row.money_out,
            "Money In": entry.row.money_in,
            "Balance": entry.row.balance,
            "NBP Date": entry.lookup_key,
            "Exchange Rate": _as_float(entry.exchange_rate),
            "Profit PLN": _as_float(entry.profit),
        }
        for entry in result.rows
    ]
    frame = pd.DataFrame.from_records(records, columns=list(EXPORT_HEADER))
    frame["Exchange Rate"] = pd.to_numeric(frame["Exchange Rate"])
    frame["Profit PLN"] = pd.to_numeric(frame["Profit PLN"])
    return frame


def render_table(result: AggregateResult) -> str:
    """Render the statement for a terminal, with a total profit footer."""

    display = pd.DataFrame.from_records(
        [
            {
                "Date": entry.row.completed_date,
                "Product": entry.row.product_name,
                "Description": entry.row.description,
                "Money In": entry.row.money_in,
                "Balance": entry.row.balance,
                "NBP Date": entry.lookup_key or "-",
                "Exchange Rate": format_rate(entry.exchange_rate) or "-",
                "Profit PLN": f"{format_amount(entry.profit)} PLN" if entry.profit is not None else "-",
            }
            for entry in result.rows
        ],
        columns=[
            "Date",
            "Product",
            "Description",
            "Money In",
            "Balance",
            "NBP Date",
            "Exchange Rate",
            "Profit PLN",
        ],
    )
    body = display.to_string(index=False) if not display.empty else "(no rows)"
    return f"{body}\nTotal Profit: {format_amount(result.total_profit)} PLN"


__all__ = ["to_frame", "render_table"]
