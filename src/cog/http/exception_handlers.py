"""
Exception handlers for Cog web applications.

Provides centralized exception handling for:
- StatusError: framework errors that carry an HTTP status (e.g. 406 when no
  view matches the acceptable formats)
- FormValidationError: invalid form submissions (422)
- InvalidReferenceError: misconfigured controller/view references (500)
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from cog.errors import FormValidationError, InvalidReferenceError, StatusError
from cog.http.request import parse_accept

logger = logging.getLogger(__name__)


def _wants_json(request: Request) -> bool:
    accepted = parse_accept(request.headers.get("accept"))
    return bool(accepted) and accepted[0] == "application/json"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register Cog's exception handlers on a FastAPI application.

    JSON bodies are returned when the client prefers ``application/json``;
    plain text otherwise.
    """

    @app.exception_handler(StatusError)
    async def status_error_handler(request: Request, exc: StatusError) -> Response:
        """Convert a StatusError to its HTTP status."""
        logger.warning("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc)
        if _wants_json(request):
            return JSONResponse(
                status_code=exc.status_code,
                content={"detail": exc.message, "type": "status_error"},
            )
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(FormValidationError)
    async def form_validation_handler(request: Request, exc: FormValidationError) -> Response:
        """Convert form validation failures to 422 Unprocessable Entity."""
        return JSONResponse(
            status_code=422,
            content={"detail": exc.message, "type": "validation_error", "fields": exc.messages},
        )

    @app.exception_handler(InvalidReferenceError)
    async def reference_error_handler(request: Request, exc: InvalidReferenceError) -> Response:
        """A bad reference is a server-side configuration error."""
        logger.error("Invalid reference while handling %s: %s", request.url.path, exc)
        if _wants_json(request):
            return JSONResponse(
                status_code=500,
                content={"detail": exc.message, "type": "reference_error"},
            )
        return PlainTextResponse(exc.message, status_code=500)
