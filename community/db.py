"""
Engine, sessions and the declarative base.

``db`` is a process-wide DatabaseManager. The API initializes it on startup
and hands one session per request to route handlers through ``get_db``;
the CLI uses ``db.session()`` directly.

    from community.db import db

    db.initialize()
    with db.session() as session:
        issue = session.get(Issue, 1)
"""

import math
import time
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, Optional

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from .config import Settings, get_settings


class Base(DeclarativeBase):
    pass


def _null_safe(fn):
    def apply(value):
        return None if value is None else fn(value)

    return apply


def _clamped_asin(value):
    # Rounding can push the haversine term a hair past 1.0
    if value is None:
        return None
    return math.asin(max(-1.0, min(1.0, value)))


# Functions the geo search emits. PostgreSQL has them built in.
SQLITE_MATH_FUNCTIONS = {
    "radians": _null_safe(math.radians),
    "sin": _null_safe(math.sin),
    "cos": _null_safe(math.cos),
    "sqrt": _null_safe(math.sqrt),
    "asin": _clamped_asin,
}


def configure_sqlite(engine: Engine) -> None:
    """Turn on foreign key enforcement and register the geo search functions."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
        for name, fn in SQLITE_MATH_FUNCTIONS.items():
            dbapi_connection.create_function(name, 1, fn, deterministic=True)


def _engine_options(url: str, settings: Settings) -> dict[str, Any]:
    if url.startswith("sqlite"):
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {
        "poolclass": QueuePool,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
    }


class DatabaseManager:
    """
    Owns the engine and session factory.

    Constructing it always returns the same instance. ``initialize`` is
    idempotent until ``reset`` disposes the engine.
    """

    _instance: Optional["DatabaseManager"] = None

    def __new__(cls) -> "DatabaseManager":
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._initialized = False
            instance.engine = None
            instance.SessionLocal = None
            cls._instance = instance
        return cls._instance

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self, database_url: str | None = None) -> None:
        """Build the engine from ``database_url`` or ``DATABASE_URL``."""
        if self._initialized:
            return

        settings = get_settings()
        url = database_url or settings.database_url

        self.engine = create_engine(url, echo=settings.debug, **_engine_options(url, settings))
        if url.startswith("sqlite"):
            configure_sqlite(self.engine)

        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
        )
        self._initialized = True

    def create_all_tables(self) -> None:
        self._require_initialized()
        from . import models  # noqa: F401  registers tables on Base.metadata

        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Yield a session that commits on success and rolls back on any error."""
        self._require_initialized()
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def health_check(self) -> dict:
        """Run ``SELECT 1`` and report ``healthy``, ``latency_ms`` and ``error``."""
        if not self._initialized:
            return {"healthy": False, "latency_ms": 0, "error": "Database not initialized"}

        started = time.perf_counter()
        error = None
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as exc:
            error = str(exc)
        latency_ms = round((time.perf_counter() - started) * 1000, 2)
        return {"healthy": error is None, "latency_ms": latency_ms, "error": error}

    def reset(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.SessionLocal = None
        self._initialized = False

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("DatabaseManager not initialized. Call initialize() first.")


db = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request, committed when the handler returns."""
    with db.session() as session:
        yield session


__all__ = ["Base", "DatabaseManager", "configure_sqlite", "db", "get_db"]
