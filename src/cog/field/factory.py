"""Field factory and the content type protocol."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol, runtime_checkable

from cog.field.fields import Boolean, Date, Field, Integer, Richtext, Text

DEFAULT_FIELD_TYPES: dict[str, type[Field]] = {
    "text": Text,
    "richtext": Richtext,
    "integer": Integer,
    "boolean": Boolean,
    "date": Date,
}


@runtime_checkable
class ContentType(Protocol):
    """A kind of content made up of fields.

    Names must be unique across registered content types.
    """

    name: str
    display_name: str
    description: str

    def set_fields(self, factory: FieldFactory) -> None: ...


class FieldFactory:
    """Builds fields by type name and collects the fields of a content type."""

    def __init__(self, types: dict[str, type[Field]] | None = None):
        self._types = dict(DEFAULT_FIELD_TYPES if types is None else types)
        self._fields: dict[str, Field] = {}

    def register(self, type_name: str, field_class: type[Field]) -> FieldFactory:
        self._types[type_name] = field_class
        return self

    def get_field(self, type_name: str, name: str, label: str | None = None) -> Field:
        """
        Raises:
            ValueError: If the field type is unknown
        """
        if type_name not in self._types:
            raise ValueError(f"Field type `{type_name}` does not exist")
        return self._types[type_name](name, label)

    def add(self, field: Field) -> FieldFactory:
        """
        Raises:
            ValueError: If a field with the same name was already added
        """
        name = field.get_name()
        if name in self._fields:
            raise ValueError(f"Field `{name}` has already been added")
        self._fields[name] = field
        return self

    def build(self, content_type: ContentType) -> dict[str, Field]:
        """The fields of a content type, in declaration order."""
        self.clear()
        content_type.set_fields(self)
        return self.fields

    @property
    def fields(self) -> dict[str, Field]:
        return dict(self._fields)

    def clear(self) -> FieldFactory:
        self._fields = {}
        return self

    def __iter__(self) -> Iterator[Field]:
        return iter(self._fields.values())
