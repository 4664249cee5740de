"""
Application manifest (``cog.toml``).

Example::

    [app]
    name = "shop"

    [templating]
    engines = ["jinja", "tmpl"]
    override_dirs = ["view"]

    [logging]
    level = "INFO"
    log_dir = ".cog/logs"

    [web]
    host = "127.0.0.1"
    port = 8000

Every table is optional; a missing file yields the defaults.
"""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "cog.toml"


@dataclass
class AppConfig:
    """The ``[app]`` table."""

    name: str | None = None


@dataclass
class TemplatingConfig:
    """The ``[templating]`` table."""

    engines: list[str] = field(default_factory=lambda: ["jinja", "tmpl"])
    override_dirs: list[str] = field(default_factory=lambda: ["view"])
    autoescape: bool = True


@dataclass
class LoggingConfig:
    """The ``[logging]`` table."""

    level: str = "INFO"
    log_dir: str = ".cog/logs"
    file: bool = True


@dataclass
class WebConfig:
    """The ``[web]`` table."""

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False


@dataclass
class CogManifest:
    """Parsed ``cog.toml``."""

    app: AppConfig = field(default_factory=AppConfig)
    templating: TemplatingConfig = field(default_factory=TemplatingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    web: WebConfig = field(default_factory=WebConfig)
    extra: dict[str, Any] = field(default_factory=dict)


def _table(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"[{key}] in {MANIFEST_FILENAME} must be a table")
    return value


def parse_manifest(data: dict[str, Any]) -> CogManifest:
    """Build a :class:`CogManifest` from already-decoded TOML data."""
    app = _table(data, "app")
    templating = _table(data, "templating")
    log = _table(data, "logging")
    web = _table(data, "web")

    defaults = TemplatingConfig()

    return CogManifest(
        app=AppConfig(name=app.get("name")),
        templating=TemplatingConfig(
            engines=list(templating.get("engines", defaults.engines)),
            override_dirs=list(templating.get("override_dirs", defaults.override_dirs)),
            autoescape=bool(templating.get("autoescape", True)),
        ),
        logging=LoggingConfig(
            level=str(log.get("level", "INFO")).upper(),
            log_dir=str(log.get("log_dir", ".cog/logs")),
            file=bool(log.get("file", True)),
        ),
        web=WebConfig(
            host=str(web.get("host", "127.0.0.1")),
            port=int(web.get("port", 8000)),
            debug=bool(web.get("debug", False)),
        ),
        extra={
            k: v for k, v in data.items() if k not in {"app", "templating", "logging", "web"}
        },
    )


def load_manifest(base_dir: Path) -> CogManifest:
    """Load ``cog.toml`` from ``base_dir``; defaults when it is absent."""
    manifest_path = base_dir / MANIFEST_FILENAME
    if not manifest_path.is_file():
        logger.debug("No %s in %s, using defaults", MANIFEST_FILENAME, base_dir)
        return CogManifest()

    with manifest_path.open("rb") as f:
        data = tomllib.load(f)

    return parse_manifest(data)
