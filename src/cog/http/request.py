"""
Cog request wrapper.

Wraps the Starlette request for the duration of one HTTP request together
with its already-parsed form data, so synchronous framework code (view
resolution, form binding) can use it without awaiting. The current request
lives in a context variable and is exposed as the ``request`` service.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from starlette.requests import Request as StarletteRequest

DEFAULT_CONTENT_TYPE = "text/html"

FORMATS: dict[str, str] = {
    "text/html": "html",
    "application/xhtml+xml": "html",
    "application/json": "json",
    "application/x-json": "json",
    "text/plain": "txt",
    "application/xml": "xml",
    "text/xml": "xml",
    "text/csv": "csv",
    "application/javascript": "js",
    "text/css": "css",
    "application/rss+xml": "rss",
    "application/atom+xml": "atom",
}

MIME_TYPES: dict[str, str] = {
    "html": "text/html",
    "json": "application/json",
    "txt": "text/plain",
    "xml": "application/xml",
    "csv": "text/csv",
    "js": "application/javascript",
    "css": "text/css",
    "rss": "application/rss+xml",
    "atom": "application/atom+xml",
}

_current_request: ContextVar[Request | None] = ContextVar("cog_request", default=None)

# `contact[address][city]`: a field name followed by bracketed keys
_NESTED_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]+\])+)$")
_BRACKET_RE = re.compile(r"\[([^\[\]]+)\]")


def parse_accept(header: str | None) -> list[str]:
    """
    Parse an Accept header into MIME types ordered by preference.

    Higher ``q`` first, then header order. ``q=0`` entries are dropped and
    wildcards (``*/*``, ``text/*``) fall back to ``text/html``.
    """
    if not header:
        return [DEFAULT_CONTENT_TYPE]

    entries: list[tuple[float, int, str]] = []
    for index, item in enumerate(header.split(",")):
        parts = [p.strip() for p in item.split(";")]
        mime = parts[0].lower()
        if not mime:
            continue
        quality = 1.0
        for param in parts[1:]:
            key, _, value = param.partition("=")
            if key.strip() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if quality <= 0:
            continue
        if mime == "*/*" or mime.endswith("/*"):
            mime = DEFAULT_CONTENT_TYPE
        entries.append((quality, index, mime))

    ordered: list[str] = []
    for _, _, mime in sorted(entries, key=lambda e: (-e[0], e[1])):
        if mime not in ordered:
            ordered.append(mime)
    return ordered


class Request:
    """A request as seen by controllers, forms and the view name parser."""

    def __init__(
        self,
        request: StarletteRequest,
        form_data: Mapping[str, Any] | None = None,
    ):
        self._request = request
        self._post: dict[str, Any] = dict(form_data or {})

    @property
    def raw(self) -> StarletteRequest:
        """The underlying Starlette request."""
        return self._request

    @property
    def method(self) -> str:
        return self._request.method

    @property
    def path(self) -> str:
        return self._request.url.path

    @property
    def headers(self) -> Mapping[str, str]:
        return self._request.headers

    @property
    def query(self) -> dict[str, str]:
        return dict(self._request.query_params)

    @property
    def post(self) -> dict[str, Any]:
        """Submitted form fields (empty for non-form requests)."""
        return dict(self._post)

    @property
    def path_params(self) -> dict[str, Any]:
        return dict(self._request.path_params)

    def is_post(self) -> bool:
        return self._request.method == "POST"

    def get_allowed_content_types(self) -> list[str]:
        """MIME types the client accepts, most preferred first."""
        return parse_accept(self._request.headers.get("accept"))

    @staticmethod
    def get_format(mime_type: str) -> str | None:
        """Short format name (``html``, ``json``...) for a MIME type."""
        return FORMATS.get(mime_type.split(";")[0].strip().lower())

    @staticmethod
    def get_mime_type(format_name: str) -> str:
        return MIME_TYPES.get(format_name, DEFAULT_CONTENT_TYPE)


def get_current_request() -> Request | None:
    """The request being handled in the current context, if any."""
    return _current_request.get()


@contextmanager
def request_scope(request: Request) -> Iterator[Request]:
    """Make ``request`` the current request for the enclosed block."""
    token = _current_request.set(request)
    try:
        yield request
    finally:
        _current_request.reset(token)


async def build_request(request: StarletteRequest) -> Request:
    """Wrap a Starlette request, reading its form body when it has one.

    Bracketed field names (``contact[email]``) are nested into dictionaries.
    """
    form_data: dict[str, Any] = {}
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        for key in form.keys():
            values = form.getlist(key)
            set_form_value(form_data, key, values[0] if len(values) == 1 else values)
    return Request(request, form_data)


def split_form_key(key: str) -> list[str]:
    """Split ``contact[address][city]`` into ``["contact", "address", "city"]``.

    Keys without brackets, or with empty ones (``tags[]``), are returned whole.
    """
    match = _NESTED_KEY_RE.match(key)
    if match is None:
        return [key]
    return [match.group(1), *_BRACKET_RE.findall(match.group(2))]


def set_form_value(data: dict[str, Any], key: str, value: Any) -> None:
    """Store a submitted value, nesting bracketed keys into dictionaries.

    A key that collides with a plain value already stored under one of its
    parents is kept flat.
    """
    *parents, leaf = split_form_key(key)
    target = data
    for part in parents:
        child = target.get(part)
        if child is None:
            child = target[part] = {}
        elif not isinstance(child, dict):
            data[key] = value
            return
        target = child
    target[leaf] = value
