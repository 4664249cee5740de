"""
Error types for Cog.

Every exception raised by the framework derives from :class:`CogError` so
applications can catch framework failures in one place.
"""

from __future__ import annotations


class CogError(Exception):
    """Base exception for all Cog errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidReferenceError(CogError, ValueError):
    """
    Raised when a reference string cannot be parsed.

    Examples:
    - Vendor or module name missing
    - Empty path or empty method after ``#``
    - Relative reference used outside of any module
    """

    def __init__(self, message: str, reference: str | None = None):
        self.reference = reference
        super().__init__(message)


class ReferenceNotParsedError(CogError, RuntimeError):
    """Raised when a reference parser getter is used before ``parse()``."""

    pass


class ServiceNotFoundError(CogError, KeyError):
    """Raised when an undefined service identifier is requested."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Identifier `{identifier}` is not defined on the service container")

    def __str__(self) -> str:
        return self.message


class UnknownModuleError(CogError, LookupError):
    """Raised when a Cog module cannot be located."""

    def __init__(self, module_name: str):
        self.module_name = module_name
        super().__init__(f"Module `{module_name}` could not be located")


class ContextError(CogError, RuntimeError):
    """Raised when the application context is missing or not yet set."""

    pass


class TaskError(CogError):
    """Raised for invalid console task registrations."""

    pass


class SaltGenerationError(CogError):
    """Raised when no salt generation strategy produced a value."""

    pass


class StatusError(CogError):
    """
    An error that maps directly onto an HTTP status code.

    Raised by framework components that know the right response for a
    failure (e.g. 406 when no view matches the acceptable formats).
    """

    NOT_FOUND = 404
    NOT_ACCEPTABLE = 406
    INTERNAL_SERVER_ERROR = 500

    def __init__(self, message: str, status_code: int = INTERNAL_SERVER_ERROR):
        self.status_code = status_code
        super().__init__(message)


class FormValidationError(CogError):
    """Raised when a form is asked for clean data it does not have."""

    def __init__(self, message: str, messages: dict[str, list[str]] | None = None):
        self.messages = messages or {}
        super().__init__(message)
