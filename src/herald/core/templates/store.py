"""Current-state store for message templates."""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from herald.common.errors import NotFoundError, ValidationFailedError
from herald.core.templates.types import Template
from herald.core.validation.pipeline import ValidationPipeline
from herald.core.versions.log import VersionLog
from herald.models.message_template import MessageTemplate
from herald.models.outgoing_intent import OutgoingIntent

logger = structlog.stdlib.get_logger()


class TemplateStore:
    """
    Owns the message_templates table.

    Every write goes validate → persist → snapshot. The row and its snapshot
    are written inside one savepoint, so a failed append leaves no row
    behind even when the caller keeps using the session.
    """

    def __init__(
        self,
        db: AsyncSession,
        pipeline: ValidationPipeline,
        versions: VersionLog | None = None,
    ) -> None:
        self.db = db
        self.pipeline = pipeline
        self.versions = versions or VersionLog(db)

    async def create(self, intent_id: int, fields: dict[str, Any]) -> Template:
        if await self.db.get(OutgoingIntent, intent_id) is None:
            raise NotFoundError(f"Outgoing intent not found: {intent_id}")

        candidate = Template(intent_id=intent_id, name="").merge(fields)
        return await self.commit(candidate)

    async def update(
        self,
        template_id: int,
        fields: dict[str, Any],
        intent_id: int | None = None,
    ) -> Template | None:
        """Apply ``fields`` to an existing template.

        A missing template is not an error: the call does nothing and returns
        ``None``.
        """
        row = await self._load(template_id, intent_id)
        if row is None:
            await logger.adebug(
                "template.update_skipped", template_id=template_id, intent_id=intent_id
            )
            return None

        candidate = Template.from_row(row).merge(fields)
        return await self.commit(candidate)

    async def commit(self, candidate: Template) -> Template:
        """Validate ``candidate`` and make it the current state, recording a snapshot."""
        failure = await self.pipeline.evaluate(candidate)
        if failure is not None:
            raise ValidationFailedError(failure.field, failure.message)

        if candidate.id is None:
            row = MessageTemplate(outgoing_intent_id=candidate.intent_id)
        else:
            row = await self._load(candidate.id)
            if row is None:
                raise NotFoundError(f"Message template not found: {candidate.id}")

        # Row write and snapshot succeed or roll back together
        async with self.db.begin_nested():
            if candidate.id is None:
                self.db.add(row)
            row.name = candidate.name
            row.conditions = candidate.conditions
            row.message_markup = candidate.message_markup
            await self.db.flush()

            snapshot = await self.versions.append(row.id, candidate.versioned_properties())

        await logger.ainfo(
            "template.saved",
            template_id=row.id,
            intent_id=row.outgoing_intent_id,
            version_id=snapshot.id,
        )
        return Template.from_row(row, latest_version=snapshot)

    async def fetch(self, template_id: int) -> Template:
        """Current template with its most recent snapshot attached."""
        row = await self._load(template_id)
        if row is None:
            raise NotFoundError(f"Message template not found: {template_id}")
        latest = await self.versions.latest(template_id)
        return Template.from_row(row, latest_version=latest)

    async def delete(self, template_id: int, intent_id: int | None = None) -> None:
        """Remove the current row if present. Its snapshots are kept."""
        row = await self._load(template_id, intent_id)
        if row is None:
            return
        await self.db.delete(row)
        await self.db.flush()
        await logger.ainfo("template.deleted", template_id=template_id)

    async def list(self, intent_id: int, page: int = 1, page_size: int = 50) -> list[Template]:
        result = await self.db.execute(
            select(MessageTemplate)
            .where(MessageTemplate.outgoing_intent_id == intent_id)
            .order_by(MessageTemplate.id.asc())
            .offset((max(page, 1) - 1) * page_size)
            .limit(page_size)
        )
        return [Template.from_row(row) for row in result.scalars().all()]

    async def count(self, intent_id: int) -> int:
        result = await self.db.execute(
            select(func.count(MessageTemplate.id)).where(
                MessageTemplate.outgoing_intent_id == intent_id
            )
        )
        return result.scalar_one()

    async def _load(
        self, template_id: int, intent_id: int | None = None
    ) -> MessageTemplate | None:
        query = select(MessageTemplate).where(MessageTemplate.id == template_id)
        if intent_id is not None:
            query = query.where(MessageTemplate.outgoing_intent_id == intent_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()
