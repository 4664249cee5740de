"""
Cog logging infrastructure.

Provides:
- Console output for humans (brief, coloured when attached to a TTY)
- A rotating JSONL file under ``.cog/logs/`` with full structured context
- Component loggers and a helper for logging with structured context

Log Format Design:
- Primary file: .cog/logs/cog.log (one JSON object per line)
- Each line carries timestamp, level, component, message and optional
  context, source location and exception details
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

# =============================================================================
# Terminal Colors (respects NO_COLOR)
# =============================================================================

_NO_COLOR = bool(os.environ.get("NO_COLOR")) or not sys.stderr.isatty()


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "" if _NO_COLOR else "\033[0m"
    DIM = "" if _NO_COLOR else "\033[2m"

    DEBUG = "" if _NO_COLOR else "\033[36m"  # Cyan
    INFO = "" if _NO_COLOR else "\033[32m"  # Green
    WARNING = "" if _NO_COLOR else "\033[33m"  # Yellow
    ERROR = "" if _NO_COLOR else "\033[31m"  # Red
    CRITICAL = "" if _NO_COLOR else "\033[35m"  # Magenta

    # Components
    WEB = "" if _NO_COLOR else "\033[34m"  # Blue
    CONSOLE = "" if _NO_COLOR else "\033[36m"  # Cyan
    COG = "" if _NO_COLOR else "\033[35m"  # Magenta


# =============================================================================
# Formatters
# =============================================================================


class JSONLFormatter(logging.Formatter):
    """
    Formats log records as JSON Lines.

    Example output:
    {"timestamp":"2024-01-15T10:30:45.123000Z","level":"INFO","component":"Cog","message":"Loaded 3 modules","context":{"modules":["acme.blog"]}}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC)
            .replace(tzinfo=None)
            .isoformat()
            + "Z",
            "level": record.levelname,
            "component": getattr(record, "component", "Cog"),
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if context:
            entry["context"] = context

        if record.levelno >= logging.WARNING:
            source_info: dict[str, Any] = {}
            if record.pathname:
                source_info["file"] = record.pathname
            if record.lineno:
                source_info["line"] = record.lineno
            if record.funcName and record.funcName != "<module>":
                source_info["function"] = record.funcName
            if source_info:
                entry["source"] = source_info

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.DEBUG,
        logging.INFO: Colors.INFO,
        logging.WARNING: Colors.WARNING,
        logging.ERROR: Colors.ERROR,
        logging.CRITICAL: Colors.CRITICAL,
    }

    def format(self, record: logging.LogRecord) -> str:
        component = getattr(record, "component", "Cog")
        component_color = getattr(record, "component_color", Colors.COG)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        if _NO_COLOR:
            prefix = f"[{timestamp}] [{component}]"
        else:
            prefix = (
                f"{Colors.DIM}{timestamp}{Colors.RESET} "
                f"{component_color}[{component}]{Colors.RESET}"
            )

        # Level only for non-INFO messages
        if record.levelno != logging.INFO:
            level_name = record.levelname
            if not _NO_COLOR:
                level_name = f"{self.LEVEL_COLORS.get(record.levelno, '')}{level_name}{Colors.RESET}"
            prefix = f"{prefix} {level_name}:"

        message = f"{prefix} {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


# =============================================================================
# Logger Setup
# =============================================================================

ROOT_LOGGER_NAME = "cog"

_loggers: dict[str, logging.Logger] = {}


def setup_logging(
    log_dir: Path | str | None = ".cog/logs",
    level: int | str = logging.INFO,
    max_bytes: int = 5 * 1024 * 1024,  # 5MB
    backup_count: int = 3,
    extra_loggers: tuple[str, ...] = (),
) -> Path | None:
    """
    Initialise logging for the ``cog`` logger tree.

    Args:
        log_dir: Directory for the JSONL log; ``None`` disables file output
        level: Minimum log level (name or number)
        max_bytes: Max size per log file before rotation
        backup_count: Number of rotated files to keep
        extra_loggers: Application logger names to route through the same
            handlers (e.g. the top-level package of each module)

    Returns:
        The log directory, or None when file logging is disabled
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handlers: list[logging.Handler] = []

    # stderr keeps log lines out of console command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ConsoleFormatter())
    console_handler.setLevel(level)
    handlers.append(console_handler)

    resolved_dir: Path | None = None
    log_file: Path | None = None
    if log_dir is not None:
        resolved_dir = Path(log_dir)
        resolved_dir.mkdir(parents=True, exist_ok=True)
        log_file = resolved_dir / "cog.log"
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(JSONLFormatter())
        file_handler.setLevel(level)
        handlers.append(file_handler)

    for name in (ROOT_LOGGER_NAME, *extra_loggers):
        target = logging.getLogger(name)
        target.setLevel(level)
        for old in target.handlers:
            old.close()
        target.handlers.clear()
        for handler in handlers:
            target.addHandler(handler)
        target.propagate = False

    logging.getLogger(ROOT_LOGGER_NAME).debug(
        "Cog logging initialised",
        extra={"context": {"log_file": str(log_file) if log_file else None}},
    )
    return resolved_dir


def get_logger(component: str, color: str = Colors.COG) -> logging.Logger:
    """
    Get a logger tagged with a component name.

    Args:
        component: Component name (e.g. "Web", "Console")
        color: ANSI color code for the component tag
    """
    if component in _loggers:
        return _loggers[component]

    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{component.lower().replace(' ', '_')}")

    class ComponentFilter(logging.Filter):
        def filter(self, record: logging.LogRecord) -> bool:
            if not hasattr(record, "component"):
                record.component = component
            if not hasattr(record, "component_color"):
                record.component_color = color
            return True

    logger.addFilter(ComponentFilter())
    _loggers[component] = logger
    return logger


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    context: dict[str, Any] | None = None,
    **kwargs: Any,
) -> None:
    """
    Log a message with structured context data.

    The context ends up under ``"context"`` in the JSONL file.
    """
    extra = {"context": {**(context or {}), **kwargs}} if (context or kwargs) else {}
    logger.log(level, message, extra=extra)


def get_web_logger() -> logging.Logger:
    """Logger for HTTP request handling."""
    return get_logger("Web", Colors.WEB)


def get_console_logger() -> logging.Logger:
    """Logger for console task execution."""
    return get_logger("Console", Colors.CONSOLE)
