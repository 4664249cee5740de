"""
Form wrapper.

Keeps a form and its validator in step: every field added to the form gets
a matching rule set on the validator, so a controller only declares a field
once::

    form = self.create_form()
    form.add("title", "text", "Title").val().max_length(120)
    form.add("published", "date", options={"required": False})

    if form.is_valid(from_post=True):
        data = form.get_filtered_data()
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from cog.errors import FormValidationError
from cog.forms.types import Form, FormField
from cog.forms.validation import FieldRules, Validator
from cog.service.container import Container

logger = logging.getLogger(__name__)

# form type -> validator type
_RULE_TYPES = {
    "integer": "int",
    "number": "float",
    "date": "date",
    "time": "time",
    "datetime": "datetime",
}


class FormWrapper:
    """A form plus the validator for its fields."""

    def __init__(self, container: Container, name: str = "form"):
        self._container = container
        self._name = name
        self._form = Form(name)
        self._validator: Validator = container["validator"]
        self._last_field: str | None = None

    def clear(self) -> FormWrapper:
        """Start again with an empty form and a fresh validator."""
        self._form = Form(self._name)
        self._validator = self._container["validator"]
        self._last_field = None
        return self

    def add(
        self,
        child: str | FormField,
        type: str | None = None,
        label: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> FormWrapper:
        """
        Add a field to the form and declare it on the validator.

        Raises:
            TypeError: If ``child`` is neither a name nor a ``FormField``
        """
        extra = dict(options or {})
        if label is not None:
            extra["label"] = label

        if isinstance(child, FormField):
            form_field = child
            if type is not None and type != child.type:
                form_field = FormField(child.name, type, {**child.options, **extra})
            else:
                form_field.options.update(extra)
        elif isinstance(child, str) and child:
            form_field = FormField(child, type or "text", extra)
        else:
            raise TypeError(f"Form child must be a field name or FormField, got {child!r}")

        self._form.add(form_field)
        rules = self._validator.field(form_field.name, form_field.label)
        if form_field.options.get("required") is False:
            rules.optional()
        if form_field.type in _RULE_TYPES:
            rules.type(_RULE_TYPES[form_field.type])
        elif form_field.type == "email":
            rules.email()
        self._last_field = form_field.name
        return self

    def val(self) -> FieldRules:
        """Rules of the most recently added field."""
        if self._last_field is None:
            raise LookupError("No field has been added to the form yet")
        return self._validator.field(self._last_field)

    def field(self, name: str | None = None) -> FormField:
        """
        A field by name, or the last field added when no name is given.

        Raises:
            LookupError: If the form has no fields
            KeyError: If there is no field with that name
        """
        fields = self._form.all()
        if not fields:
            raise LookupError("Form has no fields")
        if name is None:
            return list(fields.values())[-1]
        if name not in fields:
            raise KeyError(f"Field `{name}` does not exist on form `{self._form.name}`")
        return fields[name]

    def set_form(self, form: Form) -> FormWrapper:
        self._form = form
        return self

    def get_form(self) -> Form:
        return self._form

    def set_validator(self, validator: Validator) -> FormWrapper:
        self._validator = validator
        return self

    def get_validator(self) -> Validator:
        return self._validator

    def is_valid(self, from_post: bool = False, data: Mapping[str, Any] | None = None) -> bool:
        """
        Validate submitted data, explicit data, or the bound form data.

        Raises:
            FormValidationError: If the form is unbound and there is nothing to validate
        """
        bound = self._form.is_bound
        if from_post:
            data = self.get_post()
        elif data is None:
            if not bound:
                raise FormValidationError(
                    f"Form `{self._form.name}` has not been submitted and no data was given"
                )
            data = self._form.data
        return self._validator.validate(data)

    def get_data(self) -> dict[str, Any]:
        """Raw bound data; empty when the form is not bound."""
        if not self._form.is_bound:
            return {}
        return self._form.data

    def get_filtered_data(self, data: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Validate and return the clean data (empty when invalid)."""
        self._validator.validate(self.get_data() if data is None else data)
        return self._validator.get_data()

    def handle_request(self) -> FormWrapper:
        """Bind the submitted data if the current request posted this form."""
        if self.is_post():
            self._form.bind(self.get_post())
        return self

    def is_post(self) -> bool:
        return bool(self.get_post())

    def get_post(self) -> dict[str, Any]:
        """Submitted values for this form's fields."""
        request = self._container.get("request")
        if request is None:
            return {}
        post = request.post
        nested = post.get(self._form.name)
        if isinstance(nested, Mapping):
            return dict(nested)
        return {name: post[name] for name in self._form.all() if name in post}

    def get_messages(self) -> dict[str, list[str]]:
        return self._validator.get_messages()
