"""
Environment configuration for Cog applications.

Three things describe where an application is running:

- the environment name (``COG_ENV``): development, test, staging or
  production
- the context (``COG_CONTEXT``): ``web`` when serving HTTP, ``console``
  when running tasks
- the installation (``COG_INSTALLATION``): an optional free-form name that
  distinguishes several installs of the same environment

Usage:
    from cog.environment import Environment

    env = Environment.from_environ()
    if env.context == CogContext.CONSOLE:
        ...
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from enum import StrEnum

logger = logging.getLogger(__name__)

COG_ENV_VAR = "COG_ENV"
COG_CONTEXT_VAR = "COG_CONTEXT"
COG_INSTALLATION_VAR = "COG_INSTALLATION"


class CogEnv(StrEnum):
    """Runtime environment values."""

    DEVELOPMENT = "development"
    TEST = "test"
    STAGING = "staging"
    PRODUCTION = "production"


class CogContext(StrEnum):
    """How the application was invoked."""

    WEB = "web"
    CONSOLE = "console"


_ENV_ALIASES = {
    "": CogEnv.DEVELOPMENT,
    "dev": CogEnv.DEVELOPMENT,
    "development": CogEnv.DEVELOPMENT,
    "local": CogEnv.DEVELOPMENT,
    "test": CogEnv.TEST,
    "testing": CogEnv.TEST,
    "staging": CogEnv.STAGING,
    "stage": CogEnv.STAGING,
    "prod": CogEnv.PRODUCTION,
    "production": CogEnv.PRODUCTION,
    "live": CogEnv.PRODUCTION,
}


def parse_env(value: str | None) -> CogEnv:
    """Map a user-supplied environment name (or alias) onto :class:`CogEnv`.

    Unknown values fall back to development with a warning.
    """
    key = (value or "").lower().strip()
    if key in _ENV_ALIASES:
        return _ENV_ALIASES[key]

    logger.warning(
        "Unknown %s value '%s'. Valid values: %s. Defaulting to development.",
        COG_ENV_VAR,
        value,
        ", ".join(e.value for e in CogEnv),
    )
    return CogEnv.DEVELOPMENT


def parse_context(value: str | CogContext | None) -> CogContext:
    """Map a context name onto :class:`CogContext`.

    Raises:
        ValueError: If the context is not ``web`` or ``console``
    """
    if isinstance(value, CogContext):
        return value
    key = (value or CogContext.WEB.value).lower().strip()
    try:
        return CogContext(key)
    except ValueError:
        raise ValueError(
            f"Context `{value}` is not valid. Valid contexts: "
            + ", ".join(c.value for c in CogContext)
        ) from None


class Environment:
    """The environment, context and installation an application runs in."""

    def __init__(
        self,
        name: str | CogEnv = CogEnv.DEVELOPMENT,
        context: str | CogContext = CogContext.WEB,
        installation: str | None = None,
    ):
        self._name = parse_env(name)
        self._context = parse_context(context)
        self._installation = installation

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str] | None = None,
        default_context: str | CogContext = CogContext.WEB,
    ) -> Environment:
        """Build an environment from ``COG_*`` variables."""
        environ = os.environ if environ is None else environ
        return cls(
            name=environ.get(COG_ENV_VAR, ""),
            context=environ.get(COG_CONTEXT_VAR) or default_context,
            installation=environ.get(COG_INSTALLATION_VAR) or None,
        )

    @property
    def name(self) -> CogEnv:
        return self._name

    @property
    def context(self) -> CogContext:
        return self._context

    @property
    def installation(self) -> str | None:
        return self._installation

    def get(self) -> CogEnv:
        """Return the environment name."""
        return self._name

    def set(self, name: str | CogEnv) -> None:
        """Change the environment name."""
        self._name = parse_env(name)

    def set_context(self, context: str | CogContext) -> None:
        """Change the context (``web`` or ``console``)."""
        self._context = parse_context(context)

    def is_production(self) -> bool:
        return self._name == CogEnv.PRODUCTION

    def is_development(self) -> bool:
        return self._name == CogEnv.DEVELOPMENT

    def info(self) -> dict[str, str]:
        """Summary for startup logging and the ``env`` console command."""
        return {
            "env": self._name.value,
            "context": self._context.value,
            "installation": self._installation or "",
        }

    def __repr__(self) -> str:
        return (
            f"Environment(name={self._name.value!r}, context={self._context.value!r}, "
            f"installation={self._installation!r})"
        )
