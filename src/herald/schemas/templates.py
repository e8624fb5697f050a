"""Message template schemas.

Name length and presence are deliberately not constrained here: the
validation pipeline reports them with its own field/message pair.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from herald.core.templates.types import Template, VersionSnapshot


class CreateTemplateRequest(BaseModel):
    name: str = ""
    conditions: str | None = ""
    message_markup: str = ""


class UpdateTemplateRequest(BaseModel):
    name: str | None = None
    conditions: str | None = None
    message_markup: str | None = None


class VersionInfo(BaseModel):
    id: int
    subject_id: int
    properties: dict[str, Any]
    created_at: datetime

    @classmethod
    def from_snapshot(cls, snapshot: VersionSnapshot) -> VersionInfo:
        return cls(
            id=snapshot.id,
            subject_id=snapshot.subject_id,
            properties=snapshot.properties,
            created_at=snapshot.created_at,
        )


class TemplateInfo(BaseModel):
    id: int
    outgoing_intent_id: int
    name: str
    conditions: str
    message_markup: str
    created_at: datetime
    updated_at: datetime
    latest_version: VersionInfo | None = None

    @classmethod
    def from_template(cls, t: Template) -> TemplateInfo:
        return cls(
            id=t.id,
            outgoing_intent_id=t.intent_id,
            name=t.name,
            conditions=t.conditions,
            message_markup=t.message_markup,
            created_at=t.created_at,
            updated_at=t.updated_at,
            latest_version=VersionInfo.from_snapshot(t.latest_version)
            if t.latest_version
            else None,
        )


class TemplateListResponse(BaseModel):
    templates: list[TemplateInfo]
    total: int
    page: int
    page_size: int


class VersionListResponse(BaseModel):
    versions: list[VersionInfo]
    total: int
