"""
Bootstrap loader, responsible for loading bootstraps from modules or Cog
itself.

Bootstraps are registered in three fixed phases so that anything defined as
a service is available to route, event and task definitions:

1. services
2. routes
3. events and tasks (tasks only in the console context)
"""

from __future__ import annotations

import importlib
import importlib.util
import inspect
import logging
from pathlib import Path

from cog.bootstrap.interfaces import (
    Bootstrap,
    EventsBootstrap,
    RoutesBootstrap,
    ServicesBootstrap,
    TasksBootstrap,
)
from cog.environment import CogContext
from cog.service.container import Container, ContainerAware

logger = logging.getLogger(__name__)


class BootstrapLoader:
    """Collects bootstraps and runs their registration hooks in order."""

    def __init__(self, container: Container):
        self._services = container
        self._bootstraps: list[Bootstrap] = []

    @property
    def bootstraps(self) -> list[Bootstrap]:
        """Bootstraps added and not yet loaded."""
        return list(self._bootstraps)

    def add(self, bootstrap: Bootstrap) -> BootstrapLoader:
        """
        Add a bootstrap to this loader.

        If the bootstrap is ``ContainerAware`` the service container is
        injected straight away.

        Raises:
            TypeError: If ``bootstrap`` is not a :class:`Bootstrap`
        """
        if not isinstance(bootstrap, Bootstrap):
            raise TypeError(f"{type(bootstrap).__name__} is not a Bootstrap")

        if isinstance(bootstrap, ContainerAware):
            bootstrap.set_container(self._services)

        self._bootstraps.append(bootstrap)
        return self

    def add_from_directory(self, path: Path | str, package: str) -> BootstrapLoader:
        """
        Load all bootstrap classes from a directory. Not recursive.

        Every ``*.py`` file is imported as ``<package>.<stem>`` and each
        concrete :class:`Bootstrap` subclass defined in it is instantiated
        and added. Files starting with ``_`` are skipped. A missing
        directory is ignored.

        Args:
            path: Directory to scan
            package: Dotted package name that the directory is importable as
        """
        directory = Path(path)
        if not directory.is_dir():
            logger.debug("No bootstrap directory at %s", directory)
            return self

        package = package.strip(".")
        for py_file in sorted(directory.glob("*.py")):
            if py_file.name.startswith("_"):
                continue

            module_name = f"{package}.{py_file.stem}"
            module = importlib.import_module(module_name)

            for _, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module.__name__:
                    continue
                if not issubclass(obj, Bootstrap) or inspect.isabstract(obj):
                    continue
                self.add(obj())
                logger.debug("Added bootstrap %s.%s", module_name, obj.__name__)

        return self

    def add_from_package(self, package: str) -> BootstrapLoader:
        """Load bootstraps from an importable package's directory."""
        spec = importlib.util.find_spec(package)
        if spec is None or not spec.submodule_search_locations:
            logger.debug("Bootstrap package %s not found", package)
            return self
        for location in spec.submodule_search_locations:
            self.add_from_directory(location, package)
        return self

    def load(self) -> None:
        """
        Run every added bootstrap, then forget them.

        Services are registered first because event, route and task
        definitions often depend on them. Routes are next; events and tasks
        are registered together last.
        """
        logger.debug("Loading %d bootstraps", len(self._bootstraps))

        for bootstrap in self._bootstraps:
            if isinstance(bootstrap, ServicesBootstrap):
                bootstrap.register_services(self._services)

        for bootstrap in self._bootstraps:
            if isinstance(bootstrap, RoutesBootstrap):
                bootstrap.register_routes(self._services["router"])

        for bootstrap in self._bootstraps:
            if isinstance(bootstrap, EventsBootstrap):
                bootstrap.register_events(self._services["event.dispatcher"])
            if isinstance(bootstrap, TasksBootstrap) and self._is_console():
                bootstrap.register_tasks(self._services["task.collection"])

        self.clear()

    def clear(self) -> BootstrapLoader:
        """Clear all bootstraps from this loader."""
        self._bootstraps = []
        return self

    def _is_console(self) -> bool:
        return bool(self._services["environment"].context == CogContext.CONSOLE)
