"""
Application loader.

An application subclasses :class:`AppLoader` and lists its modules::

    class Loader(AppLoader):
        def register_modules(self):
            return ["acme.core", "acme.blog"]

    Loader("/srv/blog").run()

``run()`` goes through the whole start-up sequence: initialise, load Cog's
own services, pick the context, load the modules, then execute the context.
"""

from __future__ import annotations

import logging
import os
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from fastapi import FastAPI

from cog.application.context import Context, WebContext
from cog.bootstrap.loader import BootstrapLoader
from cog.environment import CogContext
from cog.errors import ContextError
from cog.logging import setup_logging
from cog.manifest import CogManifest, load_manifest
from cog.service.container import Container

logger = logging.getLogger(__name__)


class AppLoader(ABC):
    """Loads a Cog application from its base directory."""

    def __init__(self, base_dir: str | Path, context: str | CogContext | None = None):
        self._base_dir = Path(base_dir)
        self._context_name = context
        self._services: Container | None = None
        self._context: Context | None = None
        self._manifest = CogManifest()

    @abstractmethod
    def register_modules(self) -> list[str]:
        """Names of the modules to load, in load order."""

    def get_base_dir(self) -> Path:
        return self._base_dir

    def get_app_name(self) -> str:
        return self._manifest.app.name or self._base_dir.resolve().name

    @property
    def services(self) -> Container:
        if self._services is None:
            raise ContextError("Service container has not been created; call initialise() first")
        return self._services

    def initialise(self) -> AppLoader:
        """
        Check the base directory, read ``cog.toml`` and set up logging.

        The base directory is put on ``sys.path`` so modules kept inside the
        application can be imported.

        Raises:
            RuntimeError: If the base directory does not exist or is not readable
        """
        if not self._base_dir.is_dir():
            raise RuntimeError(f"Base directory `{self._base_dir}` does not exist")
        if not os.access(self._base_dir, os.R_OK | os.X_OK):
            raise RuntimeError(f"Base directory `{self._base_dir}` is not readable")

        base = str(self._base_dir.resolve())
        if base not in sys.path:
            sys.path.insert(0, base)

        self._manifest = load_manifest(self._base_dir)
        log_config = self._manifest.logging
        setup_logging(
            log_dir=self._base_dir / log_config.log_dir if log_config.file else None,
            level=log_config.level,
            extra_loggers=tuple(dict.fromkeys(m.split(".")[0] for m in self.register_modules())),
        )

        if self._services is None:
            self._services = Container()
        logger.debug("Initialised application %s in %s", self.get_app_name(), self._base_dir)
        return self

    def load_cog(self) -> AppLoader:
        """Register the loader, bootstrap loader, config and Cog's own services."""
        from cog.application.bootstrap.services import Services

        container = self.services
        container["app.loader"] = Container.share(lambda c: self)
        container["bootstrap.loader"] = Container.share(lambda c: BootstrapLoader(c))
        container["cfg"] = Container.share(lambda c: self._manifest)

        container["bootstrap.loader"].add(Services()).load()
        return self

    def set_context(self, context: str | CogContext | None = None) -> AppLoader:
        """
        Select the context service for the environment's context.

        Raises:
            ContextError: If ``app.context.<name>`` is not defined
            TypeError: If the service is not a :class:`Context`
        """
        environment = self.services["environment"]
        context = context or self._context_name
        if context is not None:
            environment.set_context(context)

        service_name = f"app.context.{environment.context.value}"
        if service_name not in self.services:
            raise ContextError(f"Context `{service_name}` is not defined on service container")

        instance = self.services[service_name]
        if not isinstance(instance, Context):
            raise TypeError(f"Context `{type(instance).__name__}` does not implement Context")

        self._context = instance
        return self

    def get_context(self) -> Context:
        """
        Raises:
            ContextError: If ``set_context()`` has not been called
        """
        if self._context is None:
            raise ContextError("Context has not been set yet; call set_context() first")
        return self._context

    def load_modules(self) -> AppLoader:
        modules = self.register_modules()
        self.services["module.loader"].run(modules)
        return self

    def execute(self, argv: list[str] | None = None) -> Any:
        """Run the selected context and return its result."""
        return self.get_context().run(argv)

    def run(self, argv: list[str] | None = None) -> Any:
        return self.initialise().load_cog().set_context().load_modules().execute(argv)

    def set_service_container(self, container: Container) -> AppLoader:
        self._services = container
        return self

    def get_asgi_app(self) -> FastAPI:
        """Load the application in the web context and return its ASGI app."""
        self.initialise().load_cog().set_context(CogContext.WEB).load_modules()
        context = self.get_context()
        if not isinstance(context, WebContext):
            raise TypeError(f"Context `{type(context).__name__}` cannot build a web application")
        return context.create_app()
