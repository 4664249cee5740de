"""Bootstrap capabilities and the three-phase bootstrap loader."""

from cog.bootstrap.interfaces import (
    Bootstrap,
    EventsBootstrap,
    RoutesBootstrap,
    ServicesBootstrap,
    TasksBootstrap,
)
from cog.bootstrap.loader import BootstrapLoader

__all__ = [
    "Bootstrap",
    "BootstrapLoader",
    "EventsBootstrap",
    "RoutesBootstrap",
    "ServicesBootstrap",
    "TasksBootstrap",
]
