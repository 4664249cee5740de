"""Service container."""

from cog.service.container import Container, ContainerAware

__all__ = ["Container", "ContainerAware"]
