"""Current state of each message template."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from herald.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin


class MessageTemplate(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "message_templates"
    # Ids are never reused, so orphaned history cannot attach to a new template
    __table_args__ = {"sqlite_autoincrement": True}

    outgoing_intent_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("outgoing_intents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Length is enforced by the validation pipeline, not the column type
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    conditions: Mapped[str] = mapped_column(Text, nullable=False, default="")
    message_markup: Mapped[str] = mapped_column(Text, nullable=False, default="")
