"""
Application contexts.

A context is what the application does once it is loaded: the web context
serves HTTP with uvicorn, the console context runs a task from the command
line. The loader picks one from the service container by the environment's
context name (``app.context.web`` or ``app.context.console``).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import typer
from fastapi import FastAPI
from rich.console import Console
from rich.table import Table

from cog.console.tasks import build_typer_app
from cog.http.exception_handlers import register_exception_handlers
from cog.logging import get_console_logger, log_with_context
from cog.manifest import CogManifest
from cog.service.container import Container

logger = logging.getLogger(__name__)


class Context(ABC):
    """Something a loaded application can run as."""

    def __init__(self, container: Container):
        self._services = container

    @abstractmethod
    def run(self, argv: list[str] | None = None) -> Any:
        """Run the application in this context."""


class WebContext(Context):
    """Serves the application's routes over HTTP."""

    def create_app(self) -> FastAPI:
        """Build the FastAPI application with every registered route."""
        manifest: CogManifest = self._services["cfg"]
        app = FastAPI(
            title=self._services["app.loader"].get_app_name(),
            debug=manifest.web.debug,
            openapi_url=None,
        )
        app.state.container = self._services
        register_exception_handlers(app)
        count = self._services["router"].build(app, self._services["controller.resolver"])
        logger.info(
            "Web application ready",
            extra={"context": {"routes": count, **self._services["environment"].info()}},
        )
        return app

    def run(self, argv: list[str] | None = None) -> None:
        import uvicorn

        manifest: CogManifest = self._services["cfg"]
        uvicorn.run(self.create_app(), host=manifest.web.host, port=manifest.web.port)


class ConsoleContext(Context):
    """Runs console tasks and the built-in inspection commands."""

    def __init__(self, container: Container, console: Console | None = None):
        super().__init__(container)
        self._console = console or Console()

    def create_app(self) -> typer.Typer:
        app = typer.Typer(
            name="cog",
            help=f"{self._services['app.loader'].get_app_name()} console",
            no_args_is_help=True,
        )
        services = self._services
        console = self._console

        @app.command(name="routes")
        def routes() -> None:
            """List registered routes."""
            table = Table(title="Routes")
            table.add_column("Name", style="cyan")
            table.add_column("Methods")
            table.add_column("Path", style="green")
            table.add_column("Controller")
            for full_path, route in services["router"].routes():
                table.add_row(route.name, ",".join(route.methods), full_path, route.reference)
            console.print(table)

        @app.command(name="modules")
        def modules() -> None:
            """List loaded modules in load order."""
            for name in services["module.loader"].get_modules():
                console.print(name)

        @app.command(name="env")
        def env() -> None:
            """Show the environment the application runs in."""
            for key, value in services["environment"].info().items():
                console.print(f"[bold]{key}[/bold]: {value}")

        return build_typer_app(services["task.collection"], app)

    def run(self, argv: list[str] | None = None) -> int:
        """Run one console command; returns its exit code."""
        log_with_context(
            get_console_logger(), logging.DEBUG, "Running console command", args=list(argv or [])
        )
        command = typer.main.get_command(self.create_app())
        # Standalone mode reports usage errors itself and always exits
        try:
            command.main(args=list(argv or []), prog_name="cog", standalone_mode=True)
        except SystemExit as e:
            return exit_code(e.code)
        return 0


def exit_code(code: object) -> int:
    """Map a ``SystemExit`` code to a process exit status."""
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1
