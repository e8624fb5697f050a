"""Append-only version log for message templates."""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from herald.core.templates.types import VersionSnapshot
from herald.models.template_version import TemplateVersion

logger = structlog.stdlib.get_logger()


class VersionLog:
    """Stores one snapshot per accepted write. Entries are never edited or removed."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def append(self, subject_id: int, properties: dict[str, Any]) -> VersionSnapshot:
        """Record a snapshot; the database assigns the next version id."""
        entry = TemplateVersion(subject_id=subject_id, properties=dict(properties))
        self.db.add(entry)
        await self.db.flush()
        await logger.adebug("version.appended", subject_id=subject_id, version_id=entry.id)
        return VersionSnapshot.from_row(entry)

    async def find(self, subject_id: int, version_id: int) -> VersionSnapshot | None:
        """Exact lookup on both the subject and the version id."""
        result = await self.db.execute(
            select(TemplateVersion).where(
                TemplateVersion.subject_id == subject_id,
                TemplateVersion.id == version_id,
            )
        )
        row = result.scalar_one_or_none()
        return VersionSnapshot.from_row(row) if row is not None else None

    async def latest(self, subject_id: int) -> VersionSnapshot | None:
        result = await self.db.execute(
            select(TemplateVersion)
            .where(TemplateVersion.subject_id == subject_id)
            .order_by(TemplateVersion.id.desc())
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return VersionSnapshot.from_row(row) if row is not None else None

    async def history(self, subject_id: int) -> list[VersionSnapshot]:
        """All snapshots of a subject, newest first."""
        result = await self.db.execute(
            select(TemplateVersion)
            .where(TemplateVersion.subject_id == subject_id)
            .order_by(TemplateVersion.id.desc())
        )
        return [VersionSnapshot.from_row(row) for row in result.scalars().all()]

    async def count(self, subject_id: int) -> int:
        result = await self.db.execute(
            select(func.count(TemplateVersion.id)).where(
                TemplateVersion.subject_id == subject_id
            )
        )
        return result.scalar_one()
