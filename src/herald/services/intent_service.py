"""Outgoing intent CRUD service."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from herald.common.errors import NotFoundError, ValidationFailedError
from herald.models.outgoing_intent import OutgoingIntent
from herald.schemas.intents import (
    CreateIntentRequest,
    IntentInfo,
    IntentListResponse,
)


class IntentService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_intent(self, req: CreateIntentRequest) -> IntentInfo:
        existing = await self.db.execute(
            select(OutgoingIntent.id).where(OutgoingIntent.name == req.name)
        )
        if existing.scalar_one_or_none() is not None:
            raise ValidationFailedError("name", "Outgoing intent name is already in use.")

        intent = OutgoingIntent(name=req.name)
        self.db.add(intent)
        await self.db.flush()
        return self._to_info(intent)

    async def list_intents(self, offset: int = 0, limit: int = 50) -> IntentListResponse:
        count_result = await self.db.execute(select(func.count(OutgoingIntent.id)))
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(OutgoingIntent).order_by(OutgoingIntent.id.asc()).offset(offset).limit(limit)
        )
        return IntentListResponse(
            intents=[self._to_info(i) for i in result.scalars().all()],
            total=total,
        )

    async def get_intent(self, intent_id: int) -> IntentInfo:
        intent = await self.db.get(OutgoingIntent, intent_id)
        if intent is None:
            raise NotFoundError(f"Outgoing intent not found: {intent_id}")
        return self._to_info(intent)

    @staticmethod
    def _to_info(intent: OutgoingIntent) -> IntentInfo:
        return IntentInfo(
            id=intent.id,
            name=intent.name,
            created_at=intent.created_at,
            updated_at=intent.updated_at,
        )
