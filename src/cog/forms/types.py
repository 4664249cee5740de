"""
Form fields and core form types.

Forms are plain containers of named fields plus submitted data; rendering is
left to the view. Each core type has default options that are merged under
the options given when the field is added.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# type name -> default options
CORE_TYPES: dict[str, dict[str, Any]] = {
    "text": {},
    "textarea": {},
    "email": {},
    "password": {"always_empty": True},
    "hidden": {},
    "number": {},
    "integer": {},
    "checkbox": {"value": "1"},
    "select": {"choices": {}, "multiple": False},
    "choice": {"choices": {}, "multiple": False, "expanded": False},
    "datalist": {"choices": {}},
    "entity": {"choices": {}, "property": None},
    "date": {},
    "time": {},
    "datetime": {},
}

# Date and time fields render as one text input rather than a group of selects.
TYPE_EXTENSIONS: dict[str, dict[str, Any]] = {
    "date": {"widget": "single_text"},
    "time": {"widget": "single_text"},
}


def default_options(type_name: str) -> dict[str, Any]:
    """
    Default options for a form type, including type extensions.

    Raises:
        ValueError: If the type is not a core type
    """
    if type_name not in CORE_TYPES:
        raise ValueError(f"Form type `{type_name}` does not exist")
    options = dict(CORE_TYPES[type_name])
    options.update(TYPE_EXTENSIONS.get(type_name, {}))
    return options


@dataclass
class FormField:
    """A named form field of a core type."""

    name: str
    type: str = "text"
    options: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.options = {**default_options(self.type), **self.options}

    @property
    def label(self) -> str:
        return self.options.get("label") or self.name.replace("_", " ").capitalize()

    @property
    def widget(self) -> str | None:
        return self.options.get("widget")


class Form:
    """An ordered set of fields and, once bound, the submitted data."""

    def __init__(self, name: str = "form"):
        self.name = name
        self._fields: dict[str, FormField] = {}
        self._data: dict[str, Any] = {}
        self._bound = False

    def add(self, form_field: FormField) -> Form:
        self._fields[form_field.name] = form_field
        return self

    def get(self, name: str) -> FormField | None:
        return self._fields.get(name)

    def all(self) -> dict[str, FormField]:
        return dict(self._fields)

    def bind(self, data: Mapping[str, Any]) -> Form:
        """Bind submitted data. Values for unknown fields are ignored."""
        self._data = {name: data.get(name) for name in self._fields}
        self._bound = True
        return self

    @property
    def is_bound(self) -> bool:
        return self._bound

    @property
    def data(self) -> dict[str, Any]:
        return dict(self._data)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __len__(self) -> int:
        return len(self._fields)
