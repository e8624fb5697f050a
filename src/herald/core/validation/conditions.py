"""
Default validator for the conditions language.

Conditions are YAML. Accepted shapes:

    always                      # bare keyword, also "never"

    conditions:
      - condition:
          operation: eq
          attributes:
            attribute1: user.name
          parameters:
            value: Ada

Empty text means "no conditions" and is always accepted. Conditions are only
checked for shape here; evaluation happens at message-selection time.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import yaml

KEYWORDS = frozenset({"always", "never"})


class ConditionsRule:
    """Validates conditions text. After a failed ``passes`` call, ``message`` explains why."""

    def __init__(self, operations: Iterable[str]) -> None:
        self.operations = frozenset(operations)
        self._message = "The conditions are invalid."

    def message(self) -> str:
        return self._message

    def passes(self, text: str | None) -> bool:
        if text is None or not text.strip():
            return True

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            return self._fail(f"Conditions must be valid YAML: {_first_line(e)}")

        if isinstance(data, str) and data.strip().lower() in KEYWORDS:
            return True

        if not isinstance(data, dict) or "conditions" not in data:
            return self._fail("Conditions must be a mapping with a 'conditions' list.")

        items = data["conditions"]
        if not isinstance(items, list) or not items:
            return self._fail("The 'conditions' entry must be a non-empty list.")

        for position, item in enumerate(items, start=1):
            error = self._check_condition(item)
            if error:
                return self._fail(f"Invalid condition found - condition {position} {error}.")

        return True

    def _check_condition(self, item: Any) -> str | None:
        if not isinstance(item, dict) or not isinstance(item.get("condition"), dict):
            return "must contain a 'condition' mapping"

        condition = item["condition"]
        operation = condition.get("operation")
        if not operation:
            return "has no operation"
        if operation not in self.operations:
            return f"has unknown operation '{operation}'"

        attributes = condition.get("attributes")
        if not isinstance(attributes, dict) or not attributes:
            return "must declare at least one attribute"

        parameters = condition.get("parameters")
        if parameters is not None and not isinstance(parameters, dict):
            return "has parameters that are not a mapping"

        return None

    def _fail(self, message: str) -> bool:
        self._message = message
        return False


def _first_line(error: Exception) -> str:
    lines = str(error).strip().splitlines()
    return lines[0] if lines else type(error).__name__
