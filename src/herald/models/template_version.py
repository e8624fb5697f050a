from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from herald.models.base import Base, utcnow


class TemplateVersion(Base):
    """Append-only template history. No UPDATE or DELETE operations should ever be performed.

    ``subject_id`` deliberately has no foreign key: snapshots of a deleted
    template stay addressable.
    """

    __tablename__ = "template_versions"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subject_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    properties: Mapped[dict] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"), nullable=False
    )  # {"conditions": "...", "message_markup": "..."}
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
