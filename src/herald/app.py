"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from herald import __version__
from herald.api.middleware import RequestContextMiddleware
from herald.api.router import api_router
from herald.common.errors import register_error_handlers
from herald.common.logging import configure_logging
from herald.config import get_settings
from herald.db.session import get_engine, get_session_factory
from herald.models import Base


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging(settings.logging.level, settings.logging.format)

    log = structlog.stdlib.get_logger()
    await log.ainfo(
        "herald.startup",
        version=__version__,
        env=settings.env,
        database=settings.database.url.split("@")[-1],
    )

    engine = get_engine()
    if settings.database.create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await log.ainfo("herald.tables.ready")

    app.state.settings = settings
    app.state.db_session_factory = get_session_factory()

    yield

    await engine.dispose()
    await log.ainfo("herald.shutdown")


def create_app() -> FastAPI:
    """Application factory: called by Uvicorn."""
    settings = get_settings()

    app = FastAPI(
        title="Herald",
        description="Versioned message templates for outgoing intents.",
        version=__version__,
        docs_url="/docs" if settings.env == "development" else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)
    app.include_router(api_router)

    return app
