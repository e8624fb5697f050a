"""Immutable value types handed out by the template store."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from herald.models.message_template import MessageTemplate
from herald.models.template_version import TemplateVersion

# Fields captured in every snapshot and overwritten on restore
VERSIONED_FIELDS: tuple[str, ...] = ("conditions", "message_markup")

# Fields a caller may set on create/update
EDITABLE_FIELDS: tuple[str, ...] = ("name", *VERSIONED_FIELDS)


@dataclass(frozen=True)
class VersionSnapshot:
    id: int
    subject_id: int
    properties: dict[str, Any]
    created_at: datetime

    @classmethod
    def from_row(cls, row: TemplateVersion) -> VersionSnapshot:
        return cls(
            id=row.id,
            subject_id=row.subject_id,
            properties=dict(row.properties),
            created_at=row.created_at,
        )


@dataclass(frozen=True)
class Template:
    """A message template as seen by callers.

    ``id`` is ``None`` only for a candidate that has not been persisted yet.
    ``latest_version`` is populated by reads that want audit metadata.
    """

    intent_id: int
    name: str
    conditions: str = ""
    message_markup: str = ""
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    latest_version: VersionSnapshot | None = None

    @classmethod
    def from_row(
        cls, row: MessageTemplate, latest_version: VersionSnapshot | None = None
    ) -> Template:
        return cls(
            id=row.id,
            intent_id=row.outgoing_intent_id,
            name=row.name,
            conditions=row.conditions,
            message_markup=row.message_markup,
            created_at=row.created_at,
            updated_at=row.updated_at,
            latest_version=latest_version,
        )

    def merge(self, fields: dict[str, Any]) -> Template:
        """Return a copy with the editable fields in ``fields`` applied.

        ``None`` is stored as empty text.
        """
        changes = {
            k: "" if v is None else v for k, v in fields.items() if k in EDITABLE_FIELDS
        }
        return dataclasses.replace(self, **changes)

    def with_snapshot(self, snapshot: VersionSnapshot) -> Template:
        """Return a copy whose versioned fields come from ``snapshot``."""
        changes = {
            k: snapshot.properties.get(k) or "" for k in VERSIONED_FIELDS
        }
        return dataclasses.replace(self, **changes)

    def versioned_properties(self) -> dict[str, str]:
        return {k: getattr(self, k) for k in VERSIONED_FIELDS}
