"""
FastAPI dependency injection.

Central place for all shared dependencies used across routes.
"""

from __future__ import annotations

import secrets
from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from herald.common.errors import AuthenticationError
from herald.config import Settings, get_settings
from herald.core.templates.restore import RestoreService
from herald.core.templates.store import TemplateStore
from herald.core.validation.pipeline import build_pipeline
from herald.core.versions.log import VersionLog
from herald.db.session import get_db_session

# Type aliases for cleaner signatures
DBSession = Annotated[AsyncSession, Depends(get_db_session)]
AppSettings = Annotated[Settings, Depends(get_settings)]


async def require_api_key(
    settings: AppSettings,
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """
    Authenticate a request via the master API key.

    Accepts:
        - Authorization: Bearer <key>
    """
    if not authorization:
        raise AuthenticationError("Missing Authorization header")

    # Extract the key from "Bearer <key>"
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Invalid Authorization header format. Expected: Bearer <key>")

    raw_key = parts[1].strip()
    expected = settings.auth.master_api_key
    if not expected or not secrets.compare_digest(raw_key.encode(), expected.encode()):
        raise AuthenticationError("Invalid API key")
    return raw_key


def get_template_store(db: DBSession, settings: AppSettings) -> TemplateStore:
    pipeline = build_pipeline(
        db,
        settings.validation,
        name_max_length=settings.templates.name_max_length,
    )
    return TemplateStore(db, pipeline, VersionLog(db))


def get_restore_service(
    store: Annotated[TemplateStore, Depends(get_template_store)],
) -> RestoreService:
    return RestoreService(store)


# Annotated types for route signatures
ApiKey = Annotated[str, Depends(require_api_key)]
Store = Annotated[TemplateStore, Depends(get_template_store)]
Restorer = Annotated[RestoreService, Depends(get_restore_service)]
