"""Application loading and run contexts."""

from cog.application.context import ConsoleContext, Context, WebContext
from cog.application.loader import AppLoader

__all__ = ["AppLoader", "ConsoleContext", "Context", "WebContext"]
