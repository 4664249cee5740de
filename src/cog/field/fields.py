"""
Content fields.

A field holds one value of a content type (a page body, a publish date...)
and knows which form type edits it. Rich text is stored as markup and
rendered to sanitised HTML when the field is converted to a string.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

import bleach
import markdown
from markupsafe import Markup

if TYPE_CHECKING:
    from cog.forms.wrapper import FormWrapper

logger = logging.getLogger(__name__)


class Field:
    """Base content field."""

    field_type = "field"
    form_type = "text"

    def __init__(self, name: str = "", label: str | None = None):
        self._name = name
        self._label = label
        self._value: Any = None
        self._options: dict[str, Any] = {}

    def get_name(self) -> str:
        return self._name

    def set_name(self, name: str) -> Field:
        self._name = name
        return self

    def get_label(self) -> str:
        return self._label or self._name.replace("_", " ").capitalize()

    def set_label(self, label: str) -> Field:
        self._label = label
        return self

    def get_value(self) -> Any:
        return self._value

    def set_value(self, value: Any) -> Field:
        self._value = value
        return self

    def get_field_options(self) -> dict[str, Any]:
        return dict(self._options)

    def set_field_options(self, options: dict[str, Any]) -> Field:
        self._options = dict(options)
        return self

    def get_form_field(self, form: FormWrapper) -> None:
        """Add the form field that edits this field."""
        form.add(self._name, self.form_type, self.get_label(), self._options)

    def __str__(self) -> str:
        return "" if self._value is None else str(self._value)


class Text(Field):
    field_type = "text"


class Integer(Field):
    field_type = "integer"
    form_type = "integer"

    def set_value(self, value: Any) -> Field:
        return super().set_value(None if value in (None, "") else int(value))


class Boolean(Field):
    field_type = "boolean"
    form_type = "checkbox"

    def set_value(self, value: Any) -> Field:
        if isinstance(value, str):
            value = value.strip().lower() in ("1", "true", "yes", "on")
        return super().set_value(bool(value))


class Date(Field):
    field_type = "date"
    form_type = "date"

    def set_value(self, value: Any) -> Field:
        if isinstance(value, datetime):
            value = value.date()
        elif isinstance(value, str):
            value = date.fromisoformat(value) if value else None
        return super().set_value(value)


ALLOWED_TAGS = [
    "p",
    "br",
    "hr",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "strong",
    "em",
    "b",
    "i",
    "a",
    "img",
    "ul",
    "ol",
    "li",
    "code",
    "pre",
    "blockquote",
    "table",
    "thead",
    "tbody",
    "tr",
    "th",
    "td",
]

ALLOWED_ATTRIBUTES = {
    "a": ["href", "title", "rel"],
    "img": ["src", "alt", "title"],
    "code": ["class"],
    "th": ["colspan", "rowspan"],
    "td": ["colspan", "rowspan"],
}

ALLOWED_PROTOCOLS = ["http", "https", "mailto"]


class Richtext(Field):
    """Text written in a rich text markup language (markdown)."""

    field_type = "richtext"
    form_type = "textarea"
    engines = ("markdown",)

    def __init__(self, name: str = "", label: str | None = None):
        super().__init__(name, label)
        self._engine = "markdown"

    def get_engine(self) -> str:
        return self._engine

    def set_engine(self, engine: str) -> Richtext:
        """
        Raises:
            ValueError: If the engine is not recognised
        """
        engine = engine.lower()
        if engine not in self.engines:
            raise ValueError(f"Rich text engine `{engine}` does not exist.")
        self._engine = engine
        return self

    def render_html(self) -> Markup:
        """Render the value to sanitised HTML, safe to output unescaped."""
        html: str = markdown.markdown(
            self._value or "", extensions=["fenced_code", "tables", "sane_lists"]
        )
        cleaned: str = bleach.clean(
            html,
            tags=ALLOWED_TAGS,
            attributes=ALLOWED_ATTRIBUTES,
            protocols=ALLOWED_PROTOCOLS,
            strip=True,
        )
        return Markup(cleaned)

    def __html__(self) -> str:
        return str(self)

    def __str__(self) -> str:
        if self._engine == "markdown":
            return str(self.render_html())
        return super().__str__()
