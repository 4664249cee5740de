"""Controllers and controller resolution."""

from cog.controller.base import Controller, ResponseBuilder
from cog.controller.resolver import ControllerResolver, to_response

__all__ = ["Controller", "ControllerResolver", "ResponseBuilder", "to_response"]
