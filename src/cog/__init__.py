"""
Cog - a modular application framework.

Wires a service container, module bootstraps, routing, view references and
form validation together on top of FastAPI, Jinja2, pydantic and Typer.
"""

from __future__ import annotations

from ._version import get_version
from .errors import (
    CogError,
    ContextError,
    FormValidationError,
    InvalidReferenceError,
    ReferenceNotParsedError,
    SaltGenerationError,
    ServiceNotFoundError,
    StatusError,
    TaskError,
    UnknownModuleError,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "CogError",
    "ContextError",
    "FormValidationError",
    "InvalidReferenceError",
    "ReferenceNotParsedError",
    "SaltGenerationError",
    "ServiceNotFoundError",
    "StatusError",
    "TaskError",
    "UnknownModuleError",
]
