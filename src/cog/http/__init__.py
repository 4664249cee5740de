"""HTTP request wrapper and exception handling."""

from cog.http.request import Request, get_current_request, parse_accept, request_scope

__all__ = ["Request", "get_current_request", "parse_accept", "request_scope"]
