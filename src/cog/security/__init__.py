"""Security helpers."""

from cog.security.salt import Salt

__all__ = ["Salt"]
