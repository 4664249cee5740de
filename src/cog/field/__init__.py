"""Content fields."""

from cog.field.factory import ContentType, FieldFactory
from cog.field.fields import Boolean, Date, Field, Integer, Richtext, Text

__all__ = [
    "Boolean",
    "ContentType",
    "Date",
    "Field",
    "FieldFactory",
    "Integer",
    "Richtext",
    "Text",
]
