"""CLI for converting gross interest in a EUR statement to PLN at NBP rates."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from nbp_statement import NbpStatement
from nbp_statement.config import PipelineConfig
from nbp_statement.db import DEFAULT_CACHE_DB_PATH
from nbp_statement.exceptions import CSVFormatError, FileReadError
from nbp_statement.ingestion.models import STATEMENT_COLUMNS
from nbp_statement.pipeline.sorting import sort_rows
from nbp_statement.reporting import render_table
from nbp_statement.utils.logger import get_logger, set_verbosity

LOGGER = get_logger(__name__)

__all__ = ["parse_args", "main"]

DEFAULT_OUTPUT_NAME = "eur-statement-with-pln.csv"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    defaults = PipelineConfig()
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("input", help="Statement CSV exported from the bank")
    parser.add_argument(
        "--output",
        dest="output",
        help=f"Where to write the enriched CSV (default: {DEFAULT_OUTPUT_NAME} next to the input)",
    )
    parser.add_argument(
        "--cache-db",
        dest="cache_db",
        default=str(DEFAULT_CACHE_DB_PATH),
        help="SQLite file used to remember fetched rates",
    )
    parser.add_argument(
        "--no-cache",
        dest="use_cache",
        action="store_false",
        default=True,
        help="Keep fetched rates in memory only",
    )
    parser.add_argument("--chunk-size", type=int, default=defaults.chunk_size)
    parser.add_argument(
        "--delay",
        type=float,
        default=defaults.chunk_delay,
        help="Seconds to wait between chunks of rate requests",
    )
    parser.add_argument("--max-attempts", type=int, default=defaults.max_attempts)
    parser.add_argument(
        "--sort-by",
        dest="sort_by",
        choices=STATEMENT_COLUMNS,
        default="Completed Date",
        help="Column used to order the exported rows",
    )
    parser.add_argument("--descending", action="store_true", help="Reverse the sort order")
    parser.add_argument("--show", action="store_true", help="Print the enriched table")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every rate lookup")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    set_verbosity(args.verbose)
    try:
        config = PipelineConfig(
            chunk_size=args.chunk_size,
            chunk_delay=args.delay,
            max_attempts=args.max_attempts,
        )
    except ValueError as exc:
        LOGGER.error("Invalid option: %s", exc)
        return 2

    input_path = Path(args.input)
    output_path = Path(args.output) if args.output else input_path.with_name(DEFAULT_OUTPUT_NAME)
    cache_path = args.cache_db if args.use_cache else None

    with NbpStatement(config, cache_path=cache_path) as converter:
        try:
            result = converter.process_file(input_path)
        except (FileReadError, CSVFormatError) as exc:
            LOGGER.error("%s", exc)
            return 1
        result.rows = sort_rows(result.rows, args.sort_by, descending=args.descending)
        converter.export(result, output_path)

    if args.show:
        print(render_table(result))
    LOGGER.info("Total profit: %s PLN", result.total_profit)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
