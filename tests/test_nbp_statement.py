"""Tests for the public package facade and the CLI."""

from __future__ import annotations

import csv
from decimal import Decimal
from pathlib import Path

import pytest

from nbp_statement import (
    InMemoryRateCache,
    NbpStatement,
    PipelineConfig,
    SQLiteRateCache,
    __version__,
)
from nbp_statement.exceptions import CSVFormatError, FileReadError, RateNotPublished
from nbp_statement.ingestion.nbp_requests import NBPRatesClient
from nbp_statement.scripts import convert_statement

STATEMENT = (
    "Completed Date,Product name,Description,Interest rate (p.a.),Money out,Money in,Balance\n"
    '15 Jan 2024,Savings,Gross interest for Jan,3.50%,,€100.00,"€10,100.00"\n'
    '3 Jan 2024,Savings,Deposit,,,"€10,000.00","€10,000.00"\n'
)


@pytest.fixture
def statement_file(tmp_path: Path) -> Path:
    path = tmp_path / "statement.csv"
    path.write_text(STATEMENT, encoding="utf-8")
    return path


def test_version_is_exposed() -> None:
    assert NbpStatement.__version__ == __version__


def test_defaults_use_memory_cache_and_nbp_client() -> None:
    with NbpStatement() as converter:
        assert isinstance(converter.cache, InMemoryRateCache)
        assert isinstance(converter.source, NBPRatesClient)
        assert converter.processor.chunk_size == 50
        assert converter.fetcher.max_attempts == 10


def test_cache_path_selects_sqlite_cache(tmp_path: Path, make_source) -> None:
    with NbpStatement(cache_path=tmp_path / "rates.db", source=make_source()) as converter:
        assert isinstance(converter.cache, SQLiteRateCache)


def test_config_rejects_invalid_values() -> None:
    with pytest.raises(ValueError):
        PipelineConfig(chunk_size=0)
    with pytest.raises(ValueError):
        PipelineConfig(chunk_delay=-0.5)
    with pytest.raises(ValueError):
        PipelineConfig(max_attempts=0)


def test_process_file_end_to_end(statement_file: Path, make_source, tmp_path: Path) -> None:
    source = make_source({"2024-01-12": "4.35"})
    with NbpStatement(PipelineConfig(chunk_delay=0), source=source) as converter:
        result = converter.process_file(statement_file)
        output = converter.export(result, tmp_path / "out.csv")

    assert [entry.row.completed_date for entry in result.rows] == ["3 Jan 2024", "15 Jan 2024"]
    assert result.rows[1].profit == Decimal("435.00")
    assert result.total_profit == Decimal("435.00")
    with output.open(newline="", encoding="utf-8") as handle:
        last = list(csv.reader(handle))[-1]
    assert last[-2:] == ["Total Profit:", "435.00"]


def test_process_file_surfaces_file_errors(tmp_path: Path, make_source) -> None:
    bad = tmp_path / "bad.csv"
    bad.write_text("just,a,header\n", encoding="utf-8")
    with NbpStatement(source=make_source()) as converter:
        with pytest.raises(FileReadError):
            converter.process_file(tmp_path / "missing.csv")
        with pytest.raises(CSVFormatError):
            converter.process_file(bad)


def test_rate_helper_uses_fallback(make_source) -> None:
    source = make_source({"2024-01-05": "4.36"})
    with NbpStatement(source=source) as converter:
        assert converter.rate("2024-01-06") == Decimal("4.36")
        assert converter.cache.get("2024-01-06") == Decimal("4.36")


def test_cli_writes_export(monkeypatch, statement_file: Path, tmp_path: Path, capsys) -> None:
    def _fake_get_mid(self, lookup_key: str) -> Decimal:
        if lookup_key != "2024-01-12":
            raise RateNotPublished(lookup_key)
        return Decimal("4.35")

    monkeypatch.setattr(NBPRatesClient, "get_mid", _fake_get_mid)
    output = tmp_path / "export.csv"

    exit_code = convert_statement.main(
        [
            str(statement_file),
            "--output",
            str(output),
            "--cache-db",
            str(tmp_path / "rates.db"),
            "--delay",
            "0",
            "--sort-by",
            "Completed Date",
            "--descending",
            "--show",
        ]
    )

    assert exit_code == 0
    with output.open(newline="", encoding="utf-8") as handle:
        rows = list(csv.reader(handle))
    assert rows[1][0] == "15 Jan 2024"
    assert rows[1][-1] == "435.00"
    assert rows[-1][-1] == "435.00"
    assert "Total Profit: 435.00 PLN" in capsys.readouterr().out
    with SQLiteRateCache(tmp_path / "rates.db") as cache:
        assert cache.get("2024-01-12") == Decimal("4.35")


def test_cli_reports_missing_file(tmp_path: Path) -> None:
    exit_code = convert_statement.main([str(tmp_path / "missing.csv"), "--no-cache"])

    assert exit_code == 1


def test_cli_rejects_bad_options(statement_file: Path) -> None:
    assert convert_statement.main([str(statement_file), "--chunk-size", "0", "--no-cache"]) == 2


class _TrackingCache(InMemoryRateCache):
    def __init__(self) -> None:
        super().__init__()
        self.closed = False

    def close(self) -> None:
        self.closed = True


def test_close_leaves_caller_cache_open(make_source) -> None:
    shared = _TrackingCache()
    with NbpStatement(cache=shared, source=make_source()):
        pass
    assert not shared.closed
