"""Module location, loading and caller tracing."""

from cog.module.loader import MODULE_LOADED, MODULES_LOADED, ModuleEvent, ModuleLoader
from cog.module.locator import ModuleLocator

__all__ = ["MODULE_LOADED", "MODULES_LOADED", "ModuleEvent", "ModuleLoader", "ModuleLocator"]
