"""
Shared test fixtures.

Uses an in-memory SQLite database, created from the ORM metadata for each
test.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from herald.app import create_app
from herald.config import Settings, get_settings
from herald.core.templates.restore import RestoreService
from herald.core.templates.store import TemplateStore
from herald.core.validation.pipeline import build_pipeline
from herald.core.versions.log import VersionLog
from herald.db.session import enable_sqlite_savepoints, get_db_session
from herald.models import Base, OutgoingIntent
from tests.factories import create_test_intent


# Test Settings Override

def get_test_settings() -> Settings:
    return Settings(
        env="test",
        database={"url": "sqlite+aiosqlite:///:memory:"},  # type: ignore[arg-type]
        auth={"master_api_key": "test_admin_key"},  # type: ignore[arg-type]
        logging={"level": "DEBUG", "format": "console"},  # type: ignore[arg-type]
    )


# Database Fixtures

@pytest.fixture
async def test_engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    enable_sqlite_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def versions(db_session: AsyncSession) -> VersionLog:
    return VersionLog(db_session)


@pytest.fixture
def store(db_session: AsyncSession, versions: VersionLog) -> TemplateStore:
    return TemplateStore(db_session, build_pipeline(db_session), versions)


@pytest.fixture
def restorer(store: TemplateStore) -> RestoreService:
    return RestoreService(store)


@pytest.fixture
async def intent(db_session: AsyncSession) -> OutgoingIntent:
    entry = create_test_intent(intent_id=7)
    db_session.add(entry)
    await db_session.flush()
    return entry


# App + Client Fixtures

@pytest.fixture
async def app(test_engine: AsyncEngine) -> FastAPI:
    application = create_app()
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_db() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_db
    application.dependency_overrides[get_settings] = get_test_settings
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Headers with master key authentication."""
    return {"Authorization": "Bearer test_admin_key"}
