"""
Routing.

Modules add routes to named collections from their ``RoutesBootstrap``::

    def register_routes(self, router):
        router["acme.blog"].set_prefix("/blog")
        router["acme.blog"].add("blog.post.view", "/posts/{post_id:int}", "acme:blog:Post#view")
        router["acme.blog"].add("blog.post.create", "/posts", "::Post#create").set_methods("POST")

A relative reference (``::Post#create``) is resolved when the route is added,
against the module whose bootstrap adds it.

Paths use Starlette's syntax, including convertors (``{id:int}``). When
the web context starts, :meth:`Router.build` registers every route on the
FastAPI application with an endpoint produced by the controller resolver.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI
from starlette.responses import Response
from starlette.routing import NoMatchFound
from starlette.routing import Route as StarletteRoute

from cog.errors import InvalidReferenceError
from cog.reference import RELATIVE_MARKER

if TYPE_CHECKING:
    from cog.controller.resolver import ControllerResolver
    from cog.reference import ReferenceParser

logger = logging.getLogger(__name__)

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"})


@dataclass
class Route:
    """A named path bound to a controller reference."""

    name: str
    path: str
    reference: str
    methods: list[str] = field(default_factory=lambda: ["GET"])
    defaults: dict[str, Any] = field(default_factory=dict)

    def set_methods(self, *methods: str) -> Route:
        """
        Raises:
            ValueError: For an unknown HTTP method
        """
        normalised = [m.upper() for m in methods]
        for method in normalised:
            if method not in HTTP_METHODS:
                raise ValueError(f"`{method}` is not a valid HTTP method for route `{self.name}`")
        self.methods = normalised
        return self

    def set_default(self, key: str, value: Any) -> Route:
        """Default keyword argument passed to the controller."""
        self.defaults[key] = value
        return self


class RouteCollection:
    """An ordered group of routes sharing a path prefix."""

    def __init__(
        self, name: str, prefix: str = "", reference_parser: ReferenceParser | None = None
    ):
        self.name = name
        self._parser = reference_parser
        self._prefix = ""
        self._routes: dict[str, Route] = {}
        self.set_prefix(prefix)

    @property
    def prefix(self) -> str:
        return self._prefix

    def set_prefix(self, prefix: str) -> RouteCollection:
        prefix = prefix.strip()
        self._prefix = ("/" + prefix.strip("/")) if prefix.strip("/") else ""
        return self

    def add(
        self,
        name: str,
        path: str,
        reference: str,
        methods: list[str] | None = None,
    ) -> Route:
        """
        Add a route and return it for further configuration.

        Relative references (``::Post#index``) are resolved here, against the
        module whose code is adding the route.

        Raises:
            ValueError: If the collection already has a route with this name
            InvalidReferenceError: If a relative reference cannot be resolved
        """
        if name in self._routes:
            raise ValueError(f"Route `{name}` already exists in collection `{self.name}`")
        if reference.startswith(RELATIVE_MARKER):
            reference = self._resolve(reference)
        route = Route(name=name, path=path, reference=reference)
        if methods:
            route.set_methods(*methods)
        self._routes[name] = route
        return route

    def get(self, name: str) -> Route | None:
        return self._routes.get(name)

    def _resolve(self, reference: str) -> str:
        if self._parser is None:
            raise InvalidReferenceError(
                f"Relative reference `{reference}` needs a router with a reference parser",
                reference,
            )
        absolute = self._parser.parse(reference).get_absolute_reference()
        logger.debug("Resolved %s to %s", reference, absolute)
        return absolute

    def full_path(self, route: Route) -> str:
        path = route.path if route.path.startswith("/") else "/" + route.path
        if not self._prefix:
            return path
        return self._prefix if path == "/" else self._prefix + path

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes.values())

    def __len__(self) -> int:
        return len(self._routes)


async def _unbuilt_endpoint(request: Any) -> Response:  # pragma: no cover - only used for URL generation
    return Response(status_code=500)


class Router:
    """Named route collections plus URL generation."""

    def __init__(self, reference_parser: ReferenceParser | None = None) -> None:
        self._parser = reference_parser
        self._collections: dict[str, RouteCollection] = {}

    def __getitem__(self, collection: str) -> RouteCollection:
        if collection not in self._collections:
            self._collections[collection] = RouteCollection(
                collection, reference_parser=self._parser
            )
        return self._collections[collection]

    def __contains__(self, collection: object) -> bool:
        return collection in self._collections

    @property
    def collections(self) -> dict[str, RouteCollection]:
        return dict(self._collections)

    def routes(self) -> list[tuple[str, Route]]:
        """Every route with its full path, in registration order.

        Raises:
            ValueError: If two collections define the same route name
        """
        seen: dict[str, str] = {}
        result: list[tuple[str, Route]] = []
        for collection in self._collections.values():
            for route in collection:
                if route.name in seen:
                    raise ValueError(
                        f"Route `{route.name}` defined in both `{seen[route.name]}` "
                        f"and `{collection.name}`"
                    )
                seen[route.name] = collection.name
                result.append((collection.full_path(route), route))
        return result

    def get(self, name: str) -> tuple[str, Route] | None:
        for full_path, route in self.routes():
            if route.name == name:
                return full_path, route
        return None

    def generate(self, name: str, **params: Any) -> str:
        """
        Build the URL path for a named route.

        Raises:
            KeyError: If there is no route with that name
            ValueError: If the parameters do not fit the route path
        """
        found = self.get(name)
        if found is None:
            raise KeyError(f"Route `{name}` is not defined")
        full_path, _ = found
        try:
            return str(StarletteRoute(full_path, _unbuilt_endpoint, name=name).url_path_for(name, **params))
        except NoMatchFound:
            raise ValueError(f"Parameters {sorted(params)} do not match route `{name}` ({full_path})") from None

    def build(self, app: FastAPI, resolver: ControllerResolver) -> int:
        """Register every route on a FastAPI application.

        Returns:
            Number of routes registered
        """
        count = 0
        for full_path, route in self.routes():
            app.add_route(
                full_path,
                resolver.endpoint(route),
                methods=route.methods,
                name=route.name,
            )
            count += 1
            logger.debug("Registered route %s %s -> %s", ",".join(route.methods), full_path, route.reference)
        logger.info("Registered %d routes", count)
        return count
