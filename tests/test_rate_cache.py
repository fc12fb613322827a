import tempfile
import unittest
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError

from nbp_statement.db import DEFAULT_CACHE_DB_PATH, default_cache_path
from nbp_statement.db.memory_cache import InMemoryRateCache
from nbp_statement.db.sqlite_cache import SQLiteRateCache


class InMemoryRateCacheTests(unittest.TestCase):
    def test_get_and_set(self) -> None:
        cache = InMemoryRateCache()
        self.assertIsNone(cache.get("2024-01-12"))

        cache.set("2024-01-12", Decimal("4.35"))

        self.assertEqual(cache.get("2024-01-12"), Decimal("4.35"))
        self.assertIn("2024-01-12", cache)
        self.assertEqual(len(cache), 1)

    def test_conflicting_write_is_ignored(self) -> None:
        cache = InMemoryRateCache()
        cache.set("2024-01-12", Decimal("4.35"))

        with self.assertLogs("nbp_statement.db.memory_cache", level="WARNING"):
            cache.set("2024-01-12", Decimal("9.99"))
        cache.set("2024-01-12", Decimal("4.35"))

        self.assertEqual(cache.get("2024-01-12"), Decimal("4.35"))
        self.assertEqual(cache.keys(), ["2024-01-12"])


class SQLiteRateCacheTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = Path(self.temp_dir.name) / "nested" / "rates.db"

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_rates_survive_reopen(self) -> None:
        with SQLiteRateCache(self.db_path) as cache:
            self.assertTrue(cache.persistent)
            cache.set("2024-01-12", Decimal("4.3500"))

        with SQLiteRateCache(self.db_path) as reopened:
            self.assertEqual(reopened.get("2024-01-12"), Decimal("4.3500"))
            self.assertEqual(reopened.keys(), ["2024-01-12"])
            self.assertIsNone(reopened.get("2024-01-11"))

    def test_conflicting_write_keeps_stored_value(self) -> None:
        with SQLiteRateCache(self.db_path) as cache:
            cache.set("2024-01-12", Decimal("4.35"))
        with SQLiteRateCache(self.db_path) as cache:
            cache.set("2024-01-12", Decimal("5.00"))
            self.assertEqual(cache.get("2024-01-12"), Decimal("4.35"))
            self.assertEqual(cache.keys(), ["2024-01-12"])

    def test_keys_use_prefix_in_storage(self) -> None:
        with SQLiteRateCache(self.db_path, prefix="eur_") as cache:
            cache.set("2024-02-01", Decimal("4.31"))
        with SQLiteRateCache(self.db_path, prefix="other_") as cache:
            self.assertIsNone(cache.get("2024-02-01"))
            self.assertEqual(cache.keys(), [])


def test_sqlite_cache_degrades_to_memory_on_write_failure(monkeypatch, tmp_path) -> None:
    cache = SQLiteRateCache(tmp_path / "rates.db")

    class _BrokenSession:
        def __enter__(self):
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

        def __exit__(self, *exc):
            return False

    monkeypatch.setattr(cache, "_SessionFactory", lambda: _BrokenSession())

    cache.set("2024-01-12", Decimal("4.35"))

    assert not cache.persistent
    assert cache.get("2024-01-12") == Decimal("4.35")
    cache.set("2024-01-15", Decimal("4.36"))
    assert cache.keys() == ["2024-01-12", "2024-01-15"]


def test_sqlite_cache_degrades_when_database_cannot_open(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")

    cache = SQLiteRateCache(blocker / "rates.db")
    cache.set("2024-01-12", Decimal("4.35"))

    assert not cache.persistent
    assert cache.get("2024-01-12") == Decimal("4.35")


def test_default_cache_path_is_absolute() -> None:
    assert default_cache_path().is_absolute()
    assert default_cache_path().name == DEFAULT_CACHE_DB_PATH.name


@pytest.mark.parametrize("rate", ["4.3500", "0.0301"])
def test_sqlite_cache_preserves_decimal_text(tmp_path: Path, rate: str) -> None:
    with SQLiteRateCache(tmp_path / "rates.db") as cache:
        cache.set("2024-01-12", Decimal(rate))
    with SQLiteRateCache(tmp_path / "rates.db") as cache:
        assert str(cache.get("2024-01-12")) == rate
