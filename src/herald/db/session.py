"""Async database session management."""

from __future__ import annotations

from collections.abc import AsyncIterator
from functools import lru_cache
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from herald.config import get_settings


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINTs nest inside a real transaction.

    The sqlite3 driver defers BEGIN until the first DML statement, which breaks
    ``Session.begin_nested()``.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """Create the process-wide engine on first use."""
    settings = get_settings().database
    options: dict[str, Any] = {"echo": settings.echo, "pool_pre_ping": True}
    # SQLite uses a static/singleton pool that rejects sizing arguments
    if settings.url.startswith("sqlite"):
        engine = create_async_engine(settings.url, **options)
        enable_sqlite_savepoints(engine)
        return engine

    options.update(
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_recycle=300,
    )
    return create_async_engine(settings.url, **options)


@lru_cache(maxsize=1)
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: yields an async DB session.

    Everything an operation flushes is committed together, or rolled back
    together when the operation raises.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
