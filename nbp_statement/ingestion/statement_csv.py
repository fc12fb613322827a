"""CSV helpers for reading statements and writing the enriched table."""

from __future__ import annotations

import csv
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Iterable

from nbp_statement.exceptions import CSVFormatError, FileReadError, ParseError
from nbp_statement.ingestion.models import (
    STATEMENT_COLUMNS,
    AggregateResult,
    EnrichedRow,
    StatementRow,
)
from nbp_statement.utils.dates import parse_lookup_key
from nbp_statement.utils.logger import get_logger
from nbp_statement.utils.money import format_amount, format_rate, parse_amount

LOGGER = get_logger(__name__)

EXPORT_HEADER = (
    "Date",
    "Product",
    "Description",
    "Interest Rate",
    "Money Out",
    "Money In",
    "Balance",
    "NBP Date",
    "Exchange Rate",
    "Profit PLN",
)
TOTAL_LABEL = "Total Profit:"


class StatementCSVParser:
    """Parse a bank statement CSV into :class:`StatementRow` objects."""

    def __init__(self, *, encoding: str = "utf-8-sig") -> None:
        self.encoding = encoding

    def parse(self, csv_path: str | Path) -> list[StatementRow]:
        path = Path(csv_path)
        try:
            with path.open("r", newline="", encoding=self.encoding) as handle:
                reader = csv.DictReader(handle)
                self._validate_header(reader.fieldnames)
                rows: list[StatementRow] = []
                for record in reader:
                    cleaned = {
                        key.strip(): value
                        for key, value in record.items()
                        if isinstance(key, str) and isinstance(value, str)
                    }
                    if not any(value.strip() for value in cleaned.values()):
                        continue
                    rows.append(StatementRow.from_mapping(cleaned))
        except (OSError, UnicodeDecodeError) as exc:
            raise FileReadError(f"Error reading file {path}: {exc}") from exc
        except csv.Error as exc:
            raise CSVFormatError(f"CSV parsing error in {path}: {exc}") from exc
        LOGGER.info("Parsed %s statement rows from %s", len(rows), path)
        return rows

    @staticmethod
    def _validate_header(fieldnames: Iterable[str] | None) -> None:
        if not fieldnames:
            raise CSVFormatError("CSV file does not contain a header row")
        normalized = {field.strip() for field in fieldnames if field}
        missing = [column for column in STATEMENT_COLUMNS if column not in normalized]
        if missing:
            raise CSVFormatError(f"CSV header is missing columns: {', '.join(missing)}")


class EnrichedCSVExporter:
    """Write an :class:`AggregateResult` as the enriched statement CSV."""

    def write(self, result: AggregateResult, csv_path: str | Path) -> Path:
        path = Path(csv_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            writer.writerow(EXPORT_HEADER)
            for entry in result.rows:
                writer.writerow(self._row_values(entry))
            total_row = [""] * len(EXPORT_HEADER)
            total_row[-2] = TOTAL_LABEL
            total_row[-1] = format_amount(result.total_profit)
            writer.writerow(total_row)
        LOGGER.info("Exported %s rows to %s", len(result.rows), path)
        return path

    @staticmethod
    def _row_values(entry: EnrichedRow) -> list[str]:
        row = entry.row
        return [
            row.completed_date,
            row.product_name,
            row.description,
            row.interest_rate,
            row.money_out,
            row.money_in,
            row.balance,
            entry.lookup_key or "",
            format_rate(entry.exchange_rate),
            format_amount(entry.profit),
        ]


class EnrichedCSVParser:
    """Read a file produced by :class:`EnrichedCSVExporter` back in.

    Rates and profits come back at the precision they were written with.
    """

    def parse(self, csv_path: str | Path) -> AggregateResult:
        path = Path(csv_path)
        result = AggregateResult()
        try:
            with path.open("r", newline="", encoding="utf-8-sig") as handle:
                reader = csv.DictReader(handle)
                if not reader.fieldnames or tuple(reader.fieldnames) != EXPORT_HEADER:
                    raise CSVFormatError("Unexpected enriched CSV header format")
                for line_number, record in enumerate(reader, start=2):
                    if record["Exchange Rate"] == TOTAL_LABEL:
                        result.total_profit = self._decimal(record["Profit PLN"]) or Decimal("0")
                        continue
                    try:
                        result.rows.append(self._entry(record))
                    except ValueError as exc:
                        raise CSVFormatError(f"Invalid row {line_number} in {path}: {exc}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise FileReadError(f"Error reading file {path}: {exc}") from exc
        except csv.Error as exc:
            raise CSVFormatError(f"CSV parsing error in {path}: {exc}") from exc
        return result

    def _entry(self, record: dict[str, str | None]) -> EnrichedRow:
        row = StatementRow(
            completed_date=record["Date"],
            product_name=record["Product"],
            description=record["Description"],
            interest_rate=record["Interest Rate"],
            money_out=record["Money Out"],
            money_in=record["Money In"],
            balance=record["Balance"],
        )
        lookup: date | None = parse_lookup_key(record["NBP Date"]) if record["NBP Date"] else None
        return EnrichedRow(
            row,
            lookup_date=lookup,
            exchange_rate=self._decimal(record["Exchange Rate"]),
            profit=self._decimal(record["Profit PLN"]),
        )

    @staticmethod
    def _decimal(value: str) -> Decimal | None:
        if not value:
            return None
        try:
            return parse_amount(value)
        except ParseError as exc:
            raise CSVFormatError(str(exc)) from exc


__all__ = [
    "EXPORT_HEADER",
    "TOTAL_LABEL",
    "StatementCSVParser",
    "EnrichedCSVExporter",
    "EnrichedCSVParser",
]
