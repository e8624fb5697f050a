"""Outgoing intent schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class CreateIntentRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class IntentInfo(BaseModel):
    id: int
    name: str
    created_at: datetime
    updated_at: datetime


class IntentListResponse(BaseModel):
    intents: list[IntentInfo]
    total: int
