"""
Form data validation on top of pydantic.

Rules are declared per field with a fluent interface::

    validator = Validator()
    validator.field("email", "E-mail").required().email()
    validator.field("age").optional().type("int").min(18)

    if validator.validate(form_data):
        clean = validator.get_data()
    else:
        messages = validator.get_messages()

Each call to :meth:`Validator.validate` builds a pydantic model from the
declared rules with ``create_model`` and validates the data against it.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from typing import Annotated, Any

from pydantic import AfterValidator, ValidationError, create_model
from pydantic import Field as PydanticField

logger = logging.getLogger(__name__)

_TYPES: dict[str, type] = {
    "str": str,
    "int": int,
    "float": float,
    "decimal": Decimal,
    "bool": bool,
    "date": date,
    "datetime": datetime,
    "time": time,
}

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _check_email(value: str) -> str:
    if not _EMAIL_RE.match(value):
        raise ValueError("must be a valid e-mail address")
    return value


class FieldRules:
    """Validation rules for one field."""

    def __init__(self, validator: Validator, name: str, label: str | None = None):
        self._validator = validator
        self.name = name
        self.label = label or name.replace("_", " ").capitalize()
        self.is_required = True
        self.python_type: type = str
        self.constraints: dict[str, Any] = {}
        self.is_email = False

    def field(self, name: str, label: str | None = None) -> FieldRules:
        """Start declaring rules for another field."""
        return self._validator.field(name, label)

    def required(self) -> FieldRules:
        self.is_required = True
        return self

    def optional(self) -> FieldRules:
        self.is_required = False
        return self

    def type(self, python_type: str | type) -> FieldRules:
        """
        Raises:
            ValueError: For an unknown type name
        """
        if isinstance(python_type, str):
            if python_type not in _TYPES:
                raise ValueError(f"Unknown field type `{python_type}`")
            python_type = _TYPES[python_type]
        self.python_type = python_type
        return self

    def min_length(self, length: int) -> FieldRules:
        self.constraints["min_length"] = length
        return self

    def max_length(self, length: int) -> FieldRules:
        self.constraints["max_length"] = length
        return self

    def min(self, value: Any) -> FieldRules:
        self.constraints["ge"] = value
        return self

    def max(self, value: Any) -> FieldRules:
        self.constraints["le"] = value
        return self

    def pattern(self, regex: str) -> FieldRules:
        self.constraints["pattern"] = regex
        return self

    def email(self) -> FieldRules:
        self.is_email = True
        return self

    def annotation(self) -> Any:
        """The pydantic annotation for this field."""
        metadata: list[Any] = [PydanticField(**self.constraints)]
        if self.is_email:
            metadata.append(AfterValidator(_check_email))
        annotated = Annotated[(self.python_type, *metadata)]  # type: ignore[valid-type]
        return annotated if self.is_required else annotated | None


class Validator:
    """Validates submitted data against declared field rules."""

    def __init__(self) -> None:
        self._fields: dict[str, FieldRules] = {}
        self._data: dict[str, Any] = {}
        self._messages: dict[str, list[str]] = {}

    def field(self, name: str, label: str | None = None) -> FieldRules:
        if name not in self._fields:
            self._fields[name] = FieldRules(self, name, label)
        elif label:
            self._fields[name].label = label
        return self._fields[name]

    @property
    def fields(self) -> dict[str, FieldRules]:
        return dict(self._fields)

    def validate(self, data: Mapping[str, Any]) -> bool:
        """Validate ``data``; clean data and messages are kept for later."""
        self._data = {}
        self._messages = {}

        values: dict[str, Any] = {}
        for name, rules in self._fields.items():
            value = data.get(name)
            if isinstance(value, str):
                value = value.strip()
            if value is None or value == "":
                if rules.is_required:
                    self._messages.setdefault(name, []).append(f"{rules.label} is required.")
                    continue
                value = None
            values[name] = value

        model = create_model(  # type: ignore[call-overload]
            "FormData",
            **{
                name: (rules.annotation(), ... if rules.is_required else None)
                for name, rules in self._fields.items()
                if name in values
            },
        )

        try:
            self._data = model.model_validate(values).model_dump()
        except ValidationError as e:
            for error in e.errors():
                name = str(error["loc"][0]) if error["loc"] else ""
                label = self._fields[name].label if name in self._fields else name
                message = error["msg"].removeprefix("Value error, ")
                self._messages.setdefault(name, []).append(f"{label}: {message}")

        if self._messages:
            self._data = {}
            logger.debug("Validation failed for %s", ", ".join(sorted(self._messages)))
            return False
        return True

    def get_data(self) -> dict[str, Any]:
        return dict(self._data)

    def get_messages(self) -> dict[str, list[str]]:
        return {name: list(msgs) for name, msgs in self._messages.items()}

    def clear(self) -> Validator:
        self._fields = {}
        self._data = {}
        self._messages = {}
        return self
