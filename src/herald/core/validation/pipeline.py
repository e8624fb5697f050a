"""
Template validation pipeline.

Runs every candidate template through a fixed, ordered list of rules before
it may be written. Evaluation stops at the first failing rule.

Order:
  1. Name length     (≤ 255 by default)
  2. Name required
  3. Name unique     (ignoring the candidate's own row)
  4. Conditions      (pluggable validator)
  5. Message markup  (pluggable validator)

Rules later in the list may assume the earlier ones passed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from herald.config import ValidationSettings
from herald.core.templates.types import Template
from herald.core.validation.conditions import ConditionsRule
from herald.core.validation.markup import MarkupRule
from herald.models.message_template import MessageTemplate

logger = structlog.stdlib.get_logger()


@dataclass(frozen=True)
class RuleFailure:
    field: str
    message: str


class TextValidator(Protocol):
    """Contract for grammar validators such as ConditionsRule and MarkupRule."""

    def passes(self, text: str | None) -> bool: ...

    def message(self) -> str: ...


class TemplateRule(ABC):
    """A single check over a candidate template."""

    field: str

    @abstractmethod
    async def passes(self, candidate: Template) -> bool: ...

    @abstractmethod
    def message(self) -> str: ...


class NameLengthRule(TemplateRule):
    field = "name"

    def __init__(self, max_length: int = 255) -> None:
        self.max_length = max_length

    async def passes(self, candidate: Template) -> bool:
        return len((candidate.name or "").encode("utf-8")) <= self.max_length

    def message(self) -> str:
        return f"The maximum length for message template name is {self.max_length}."


class NameRequiredRule(TemplateRule):
    field = "name"

    async def passes(self, candidate: Template) -> bool:
        return bool(candidate.name)

    def message(self) -> str:
        return "Message template name field is required."


class NameUniqueRule(TemplateRule):
    field = "name"

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def passes(self, candidate: Template) -> bool:
        query = select(func.count(MessageTemplate.id)).where(
            MessageTemplate.name == candidate.name
        )
        if candidate.id is not None:
            query = query.where(MessageTemplate.id != candidate.id)
        result = await self.db.execute(query)
        return result.scalar_one() == 0

    def message(self) -> str:
        return "Message template name is already in use."


class TextFieldRule(TemplateRule):
    """Adapts a grammar validator to one text field of the candidate."""

    def __init__(self, field: str, validator: TextValidator) -> None:
        self.field = field
        self.validator = validator

    async def passes(self, candidate: Template) -> bool:
        return self.validator.passes(getattr(candidate, self.field))

    def message(self) -> str:
        return self.validator.message()


class ValidationPipeline:
    def __init__(self, rules: Sequence[TemplateRule]) -> None:
        self.rules = list(rules)

    async def evaluate(self, candidate: Template) -> RuleFailure | None:
        """Return the first failure, or ``None`` when every rule passes."""
        for rule in self.rules:
            if not await rule.passes(candidate):
                failure = RuleFailure(field=rule.field, message=rule.message())
                await logger.ainfo(
                    "template.validation_failed",
                    template_id=candidate.id,
                    rule=type(rule).__name__,
                    field=failure.field,
                )
                return failure
        return None


def build_pipeline(
    db: AsyncSession,
    settings: ValidationSettings | None = None,
    name_max_length: int = 255,
) -> ValidationPipeline:
    """The standard rule chain used for every template write."""
    settings = settings or ValidationSettings()
    return ValidationPipeline(
        [
            NameLengthRule(name_max_length),
            NameRequiredRule(),
            NameUniqueRule(db),
            TextFieldRule("conditions", ConditionsRule(settings.condition_operations)),
            TextFieldRule("message_markup", MarkupRule(settings.markup_root_element)),
        ]
    )
