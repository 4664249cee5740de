"""
Controller resolution.

Turns a controller reference (``acme:blog:Post#view``) into a bound method
on a fresh controller instance, and wraps it in a Starlette endpoint.
"""

from __future__ import annotations

import inspect
import logging
import pkgutil
from collections.abc import Awaitable, Callable
from typing import Any

from starlette.requests import Request as StarletteRequest
from starlette.responses import HTMLResponse, JSONResponse, Response

from cog.errors import InvalidReferenceError
from cog.http.request import Request, build_request, request_scope
from cog.logging import get_web_logger
from cog.reference import ReferenceParser
from cog.routing.router import Route
from cog.service.container import Container, ContainerAware
from cog.templating.engines import RenderedView

logger = logging.getLogger(__name__)
web_logger = get_web_logger()

Endpoint = Callable[[StarletteRequest], Awaitable[Response]]


def to_response(result: Any) -> Response:
    """Convert a controller's return value to a response."""
    if isinstance(result, Response):
        return result
    if isinstance(result, RenderedView):
        return Response(result.content, media_type=Request.get_mime_type(result.format))
    if isinstance(result, str):
        return HTMLResponse(result)
    if isinstance(result, (dict, list)):
        return JSONResponse(result)
    if result is None:
        return Response(status_code=204)
    raise TypeError(f"Controller returned an unsupported value of type {type(result).__name__}")


class ControllerResolver:
    """Builds controller callables and endpoints from references."""

    def __init__(self, reference_parser: ReferenceParser, container: Container):
        self._parser = reference_parser
        self._services = container

    def get_controller(self, reference: str) -> Callable[..., Any]:
        """
        Resolve a reference to a bound controller method.

        Raises:
            InvalidReferenceError: If the class or method does not exist
        """
        logical_name = self._parser.parse(reference).get_logical_controller_name()
        class_path, _, method_name = logical_name.rpartition(".")

        try:
            controller_class = pkgutil.resolve_name(class_path)
        except (ImportError, AttributeError, ValueError) as e:
            raise InvalidReferenceError(
                f"Controller class for reference `{reference}` could not be loaded: {e}",
                reference,
            ) from e

        if not inspect.isclass(controller_class):
            raise InvalidReferenceError(
                f"Reference `{reference}` does not point at a controller class", reference
            )

        controller = controller_class()
        if isinstance(controller, ContainerAware):
            controller.set_container(self._services)

        method = getattr(controller, method_name, None)
        if method is None or not callable(method):
            raise InvalidReferenceError(
                f"Controller `{controller_class.__name__}` has no method `{method_name}`", reference
            )
        return method

    def endpoint(self, route: Route) -> Endpoint:
        """Create the Starlette endpoint for a route."""
        reference = route.reference
        defaults = dict(route.defaults)

        async def endpoint(request: StarletteRequest) -> Response:
            web_logger.debug("%s %s -> %s", request.method, request.url.path, reference)
            cog_request = await build_request(request)
            with request_scope(cog_request):
                controller = self.get_controller(reference)
                result = controller(**{**defaults, **request.path_params})
                if inspect.isawaitable(result):
                    result = await result
                return to_response(result)

        endpoint.__name__ = route.name.replace(".", "_")
        return endpoint
