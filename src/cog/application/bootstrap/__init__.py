"""Cog's own bootstraps."""

from cog.application.bootstrap.services import Services

__all__ = ["Services"]
