"""Forms and form validation."""

from cog.forms.types import CORE_TYPES, Form, FormField, default_options
from cog.forms.validation import FieldRules, Validator
from cog.forms.wrapper import FormWrapper

__all__ = [
    "CORE_TYPES",
    "FieldRules",
    "Form",
    "FormField",
    "FormWrapper",
    "Validator",
    "default_options",
]
