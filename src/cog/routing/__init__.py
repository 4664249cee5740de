"""Named route collections."""

from cog.routing.router import Route, RouteCollection, Router

__all__ = ["Route", "RouteCollection", "Router"]
