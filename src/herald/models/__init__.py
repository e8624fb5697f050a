"""SQLAlchemy models: import all models here so metadata.create_all can discover them."""

from herald.models.base import Base
from herald.models.message_template import MessageTemplate
from herald.models.outgoing_intent import OutgoingIntent
from herald.models.template_version import TemplateVersion

__all__ = [
    "Base",
    "OutgoingIntent",
    "MessageTemplate",
    "TemplateVersion",
]
