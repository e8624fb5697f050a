"""Default validator for message markup: Jinja2 variables embedded in XML."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import jinja2
from jinja2.sandbox import SandboxedEnvironment

# Sandboxed Jinja2 environment: parsing only, nothing is rendered here
_ENV = SandboxedEnvironment(
    undefined=jinja2.StrictUndefined,
    autoescape=False,
)


class MarkupRule:
    """Validates markup text. After a failed ``passes`` call, ``message`` explains why.

    The Jinja2 source must parse, and the literal text around the Jinja2
    expressions must be well-formed XML. With ``root_element`` set the markup
    must be exactly one element of that tag.
    """

    def __init__(self, root_element: str | None = None) -> None:
        self.root_element = root_element
        self._message = "The message markup is invalid."

    def message(self) -> str:
        return self._message

    def passes(self, text: str | None) -> bool:
        if text is None or not text.strip():
            return self._fail("Message markup is required.")

        try:
            _ENV.parse(text)
        except jinja2.TemplateSyntaxError as e:
            detail = (e.message or "").rstrip(".")
            return self._fail(f"Invalid template syntax on line {e.lineno}: {detail}.")

        literal = _literal_text(text)
        try:
            wrapper = ET.fromstring(f"<markup>{literal}</markup>")
        except ET.ParseError as e:
            return self._fail(f"Message markup is not well-formed XML: {e}.")

        if self.root_element is not None:
            children = list(wrapper)
            stray_text = (wrapper.text or "").strip() or any(
                (child.tail or "").strip() for child in children
            )
            if len(children) != 1 or children[0].tag != self.root_element or stray_text:
                return self._fail(
                    f"Message markup must be a single <{self.root_element}> element."
                )

        return True

    def _fail(self, message: str) -> bool:
        self._message = message
        return False


def _literal_text(source: str) -> str:
    """Strip Jinja2 blocks, variables and comments, keeping only the literal data."""
    return "".join(value for _, token, value in _ENV.lex(source) if token == "data")
