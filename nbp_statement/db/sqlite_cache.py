"""SQLite-backed rate cache (via SQLAlchemy) that survives between runs."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import Column, DateTime, String, create_engine, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from nbp_statement.db import DEFAULT_CACHE_DB_PATH
from nbp_statement.db.base_cache import RateCache
from nbp_statement.db.memory_cache import InMemoryRateCache
from nbp_statement.utils.logger import get_logger

if TYPE_CHECKING:  # pragma: no cover - type checker helper
    from sqlalchemy.engine import Engine

LOGGER = get_logger(__name__)


class Base(DeclarativeBase):
    pass


class _CachedRate(Base):
    __tablename__ = "rate_cache"

    cache_key = Column(String, primary_key=True)
    rate = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=text("CURRENT_TIMESTAMP"))


class SQLiteRateCache(RateCache):
    """Write-through cache: memory first, SQLite for persistence.

    Keys are stored as ``<prefix><ISO date>`` and rates as decimal strings.
    Any database failure switches the instance to memory-only mode for the
    rest of its life; lookups keep working from memory.
    """

    def __init__(
        self,
        db_path: str | Path = DEFAULT_CACHE_DB_PATH,
        *,
        prefix: str = "nbp_rate_",
    ) -> None:
        self.db_path = Path(db_path).expanduser().resolve()
        self.prefix = prefix
        self._memory = InMemoryRateCache()
        self.engine: Engine | None = None
        self._SessionFactory: sessionmaker[Session] | None = None
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                future=True,
                connect_args={"check_same_thread": False},
            )
            Base.metadata.create_all(self.engine)
            self._SessionFactory = sessionmaker(
                bind=self.engine, expire_on_commit=False, future=True
            )
        except (OSError, SQLAlchemyError) as exc:
            self._degrade("open", exc)
        else:
            LOGGER.info("Using SQLite rate cache at %s", self.db_path)

    @property
    def persistent(self) -> bool:
        """True while the SQLite store is still in use."""

        return self._SessionFactory is not None

    def _storage_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _degrade(self, action: str, exc: Exception) -> None:
        LOGGER.warning(
            "Rate cache %s failed for %s (%s); continuing with in-memory cache only",
            action,
            self.db_path,
            exc,
        )
        self._SessionFactory = None
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None

    def get(self, key: str) -> Decimal | None:
        cached = self._memory.get(key)
        if cached is not None or self._SessionFactory is None:
            return cached
        try:
            with self._SessionFactory() as session:
                stored = session.execute(
                    select(_CachedRate.rate).where(_CachedRate.cache_key == self._storage_key(key))
                ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            self._degrade("read", exc)
            return None
        if stored is None:
            return None
        try:
            rate = Decimal(stored)
        except InvalidOperation:
            LOGGER.warning("Discarding malformed cached rate %r for %s", stored, key)
            return None
        self._memory.set(key, rate)
        return rate

    def set(self, key: str, rate: Decimal) -> None:
        existing = self.get(key)
        if existing is not None:
            # Delegates the conflict warning without touching the database.
            self._memory.set(key, rate)
            return
        self._memory.set(key, rate)
        if self._SessionFactory is None:
            return
        try:
            with self._SessionFactory() as session:
                session.add(_CachedRate(cache_key=self._storage_key(key), rate=str(rate)))
                session.commit()
        except IntegrityError:
            LOGGER.debug("Rate for %s was persisted concurrently; keeping stored value", key)
        except SQLAlchemyError as exc:
            self._degrade("write", exc)

    def keys(self) -> list[str]:
        """Return every lookup key known to the cache."""

        keys = set(self._memory.keys())
        if self._SessionFactory is not None:
            try:
                with self._SessionFactory() as session:
                    stored = session.execute(select(_CachedRate.cache_key)).scalars().all()
            except SQLAlchemyError as exc:
                self._degrade("read", exc)
            else:
                keys.update(
                    value[len(self.prefix) :] for value in stored if value.startswith(self.prefix)
                )
        return sorted(keys)

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()


__all__ = ["SQLiteRateCache"]
