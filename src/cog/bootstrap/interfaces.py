"""
Bootstrap capability bases.

A module declares what it contributes to the application by subclassing one
or more of these. The bootstrap loader checks capabilities with
``isinstance`` and calls the registration hooks in a fixed order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cog.console.tasks import TaskCollection
    from cog.event.dispatcher import EventDispatcher
    from cog.routing.router import Router
    from cog.service.container import Container


class Bootstrap(ABC):  # noqa: B024
    """Marker base for every bootstrap."""


class ServicesBootstrap(Bootstrap):
    @abstractmethod
    def register_services(self, container: Container) -> None:
        """Define services on the container."""


class RoutesBootstrap(Bootstrap):
    @abstractmethod
    def register_routes(self, router: Router) -> None:
        """Add routes to the router's collections."""


class EventsBootstrap(Bootstrap):
    @abstractmethod
    def register_events(self, dispatcher: EventDispatcher) -> None:
        """Attach listeners and subscribers to the event dispatcher."""


class TasksBootstrap(Bootstrap):
    @abstractmethod
    def register_tasks(self, tasks: TaskCollection) -> None:
        """Add console tasks. Only called in the console context."""
