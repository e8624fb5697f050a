"""Outgoing intent: the parent aggregate message templates belong to."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from herald.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin


class OutgoingIntent(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "outgoing_intents"

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
