"""Base controller and response builder."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from starlette.responses import RedirectResponse, Response

from cog.http.request import Request, get_current_request
from cog.service.container import ContainerAware

if TYPE_CHECKING:
    from cog.forms.wrapper import FormWrapper
    from cog.templating.engines import DelegatingEngine


class ResponseBuilder:
    """Renders views into responses with the right content type."""

    def __init__(self, templating: DelegatingEngine):
        self._templating = templating

    def render(
        self,
        reference: str,
        parameters: Mapping[str, Any] | None = None,
        status_code: int = 200,
    ) -> Response:
        view = self._templating.render(reference, parameters)
        return Response(
            view.content,
            status_code=status_code,
            media_type=Request.get_mime_type(view.format),
        )


class Controller(ContainerAware):
    """
    Convenience base for controllers.

    Controllers are created per request; the service container is injected
    before the action method is called.
    """

    def get(self, name: str) -> Any:
        """Shortcut for a service lookup."""
        return self.services[name]

    @property
    def request(self) -> Request:
        request = get_current_request()
        if request is None:
            raise RuntimeError("No request is being handled")
        return request

    def render(
        self,
        reference: str,
        parameters: Mapping[str, Any] | None = None,
        status_code: int = 200,
    ) -> Response:
        """Render a view (relative references resolve to this controller's module)."""
        builder: ResponseBuilder = self.get("response_builder")
        return builder.render(reference, parameters, status_code)

    def generate_url(self, route_name: str, **params: Any) -> str:
        return str(self.get("router").generate(route_name, **params))

    def redirect(self, url: str, status_code: int = 302) -> RedirectResponse:
        return RedirectResponse(url, status_code=status_code)

    def redirect_to_route(self, route_name: str, status_code: int = 302, **params: Any) -> RedirectResponse:
        return self.redirect(self.generate_url(route_name, **params), status_code)

    def create_form(self) -> FormWrapper:
        """A new, empty form wrapper bound to the current request."""
        form: FormWrapper = self.get("form")
        return form
