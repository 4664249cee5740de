"""
Module loader.

Takes the list of modules an application uses, queues each module's
bootstraps on the bootstrap loader and loads them all in one pass so that
every module's services exist before any module's routes, events or tasks
are registered.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from types import FrameType

from cog.bootstrap.loader import BootstrapLoader
from cog.errors import InvalidReferenceError, UnknownModuleError
from cog.event.dispatcher import Event, EventDispatcher
from cog.module.locator import ModuleLocator

logger = logging.getLogger(__name__)

BOOTSTRAP_PACKAGE = "bootstrap"

MODULE_LOADED = "module.loaded"
MODULES_LOADED = "modules.load.success"

# Frames from these packages never own a relative reference
_FRAMEWORK_PREFIXES = ("cog", "jinja2", "starlette", "fastapi", "anyio", "asyncio", "typer", "click")


class ModuleEvent(Event):
    """Dispatched once a module's bootstraps have been loaded."""

    def __init__(self, module_name: str):
        super().__init__()
        self.module_name = module_name


class ModuleLoader:
    """Loads modules and remembers which ones are loaded."""

    def __init__(
        self,
        locator: ModuleLocator,
        bootstrap_loader: BootstrapLoader,
        dispatcher: EventDispatcher,
    ):
        self._locator = locator
        self._bootstrap_loader = bootstrap_loader
        self._dispatcher = dispatcher
        self._modules: list[str] = []
        # Modules whose bootstraps are loading; they own relative references too
        self._loading: list[str] = []

    def run(self, modules: Iterable[str]) -> None:
        """
        Load a list of modules.

        Raises:
            UnknownModuleError: If any module cannot be located
        """
        queued: list[str] = []
        for module_name in modules:
            if module_name in self._modules or module_name in queued:
                logger.warning("Module %s listed more than once, skipping", module_name)
                continue
            self._queue_module(module_name)
            queued.append(module_name)

        self._loading = queued
        try:
            self._bootstrap_loader.load()
        finally:
            self._loading = []
        self._modules.extend(queued)

        for module_name in queued:
            self._dispatcher.dispatch(MODULE_LOADED, ModuleEvent(module_name))
        self._dispatcher.dispatch(MODULES_LOADED)

        logger.info("Loaded %d modules", len(queued), extra={"context": {"modules": queued}})

    def exists(self, module_name: str) -> bool:
        """Check whether a module has been loaded."""
        return module_name in self._modules

    def get_modules(self) -> list[str]:
        """Names of the loaded modules, in load order."""
        return list(self._modules)

    def trace_calling_module_name(self) -> str:
        """
        Find the module that owns the code currently running.

        Walks the call stack outward, skipping framework frames, and returns
        the loaded module (longest package prefix) of the first frame that
        belongs to one. If no modules are loaded, the first two segments of
        the first non-framework frame's module are used. Modules still being
        loaded by :meth:`run` count as loaded.

        Raises:
            InvalidReferenceError: If no calling module can be determined
        """
        frame: FrameType | None = sys._getframe(1)
        fallback: str | None = None

        while frame is not None:
            name = frame.f_globals.get("__name__", "")
            frame = frame.f_back
            if not name or name == "__main__" or _is_framework(name):
                continue

            owner = self._owning_module(name)
            if owner:
                return owner
            if fallback is None and not self._modules:
                parts = name.split(".")
                if len(parts) >= 2:
                    fallback = ".".join(parts[:2])

        if fallback:
            return fallback

        raise InvalidReferenceError("Calling module could not be determined from the call stack")

    def _owning_module(self, name: str) -> str | None:
        matches = [
            m for m in (*self._modules, *self._loading) if name == m or name.startswith(m + ".")
        ]
        if not matches:
            return None
        return max(matches, key=len)

    def _queue_module(self, module_name: str) -> None:
        if not self._locator.exists(module_name):
            raise UnknownModuleError(module_name)

        bootstrap_dir = self._locator.get_path(module_name) / BOOTSTRAP_PACKAGE
        self._bootstrap_loader.add_from_directory(
            bootstrap_dir, f"{module_name}.{BOOTSTRAP_PACKAGE}"
        )
        logger.debug("Queued bootstraps for module %s", module_name)


def _is_framework(name: str) -> bool:
    return any(name == prefix or name.startswith(prefix + ".") for prefix in _FRAMEWORK_PREFIXES)
