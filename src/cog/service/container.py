"""
Service container.

A small Pimple-style container: values are stored by identifier, callables
are treated as factories that receive the container, and ``share()`` turns a
factory into a lazily-built singleton::

    container = Container()
    container["app.name"] = "blog"
    container["router"] = container.share(lambda c: Router(c["reference_parser"]))
    container["event"] = lambda c: Event()   # new instance on every access

Callables that must be stored as plain values are wrapped with
``protect()``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from typing import Any

from cog.errors import ServiceNotFoundError

logger = logging.getLogger(__name__)

Factory = Callable[["Container"], Any]


class SharedFactory:
    """A factory whose result is built once and then reused."""

    def __init__(self, factory: Factory):
        self.factory = factory
        self._lock = threading.Lock()
        self._built = False
        self._instance: Any = None

    def __call__(self, container: Container) -> Any:
        if not self._built:
            with self._lock:
                if not self._built:
                    self._instance = self.factory(container)
                    self._built = True
        return self._instance


class ProtectedValue:
    """Marks a callable that should be returned as-is, not invoked."""

    def __init__(self, value: Callable[..., Any]):
        self.value = value


class Container:
    """Identifier-keyed registry of parameters and service factories."""

    def __init__(self, values: dict[str, Any] | None = None):
        self._definitions: dict[str, Any] = {}
        for name, value in (values or {}).items():
            self[name] = value

    def __setitem__(self, name: str, value: Any) -> None:
        self._definitions[name] = value

    def __getitem__(self, name: str) -> Any:
        try:
            definition = self._definitions[name]
        except KeyError:
            raise ServiceNotFoundError(name) from None

        if isinstance(definition, ProtectedValue):
            return definition.value
        if callable(definition):
            return definition(self)
        return definition

    def __delitem__(self, name: str) -> None:
        try:
            del self._definitions[name]
        except KeyError:
            raise ServiceNotFoundError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def keys(self) -> list[str]:
        """Return every defined identifier."""
        return list(self._definitions)

    def get(self, name: str, default: Any = None) -> Any:
        """Return the service or ``default`` when it is not defined."""
        if name not in self._definitions:
            return default
        return self[name]

    @staticmethod
    def share(factory: Factory) -> SharedFactory:
        """Wrap a factory so that it is only ever built once."""
        return SharedFactory(factory)

    @staticmethod
    def protect(value: Callable[..., Any]) -> ProtectedValue:
        """Store a callable as a parameter rather than a factory."""
        return ProtectedValue(value)

    def is_shared(self, name: str) -> bool:
        """Check whether the identifier is defined as a shared service."""
        return isinstance(self.raw(name), SharedFactory)

    def raw(self, name: str) -> Any:
        """Return the definition stored for ``name`` without invoking it."""
        try:
            return self._definitions[name]
        except KeyError:
            raise ServiceNotFoundError(name) from None

    def extend(self, name: str, extender: Callable[[Any, Container], Any]) -> None:
        """
        Decorate an existing factory.

        The extender receives the built service and the container and returns
        the (possibly replaced) service. Shared services stay shared.

        Raises:
            ServiceNotFoundError: If ``name`` is not defined
            TypeError: If ``name`` is a parameter rather than a factory
        """
        definition = self.raw(name)
        if isinstance(definition, ProtectedValue) or not callable(definition):
            raise TypeError(f"Identifier `{name}` does not contain a service definition")

        original = definition.factory if isinstance(definition, SharedFactory) else definition

        def extended(container: Container) -> Any:
            return extender(original(container), container)

        if isinstance(definition, SharedFactory):
            self._definitions[name] = SharedFactory(extended)
        else:
            self._definitions[name] = extended
        logger.debug("Extended service %s", name)


class ContainerAware:
    """Mixin for objects that receive the service container after creation."""

    _services: Container | None = None

    def set_container(self, container: Container) -> None:
        """Inject the service container."""
        self._services = container

    @property
    def services(self) -> Container:
        if self._services is None:
            raise RuntimeError(f"{type(self).__name__} has no service container set")
        return self._services
