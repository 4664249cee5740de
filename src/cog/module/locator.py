"""Locate Cog modules on disk from their importable package names."""

from __future__ import annotations

import importlib.util
from pathlib import Path

from cog.errors import UnknownModuleError


class ModuleLocator:
    """
    Maps module names to directories.

    A Cog module is an importable package named ``vendor.module``; its
    directory holds the ``bootstrap`` package, ``controller`` package and
    ``view`` templates.
    """

    def __init__(self) -> None:
        self._paths: dict[str, Path] = {}

    def get_path(self, module_name: str) -> Path:
        """
        Get the directory of a module.

        Raises:
            UnknownModuleError: If the package cannot be found or is not a
                package
        """
        if module_name in self._paths:
            return self._paths[module_name]

        try:
            spec = importlib.util.find_spec(module_name)
        except (ImportError, ValueError):
            spec = None

        if spec is None or not spec.submodule_search_locations:
            raise UnknownModuleError(module_name)

        path = Path(next(iter(spec.submodule_search_locations)))
        self._paths[module_name] = path
        return path

    def exists(self, module_name: str) -> bool:
        """Check whether a module can be located."""
        try:
            self.get_path(module_name)
        except UnknownModuleError:
            return False
        return True
