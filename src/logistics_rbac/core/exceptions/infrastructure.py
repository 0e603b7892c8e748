"""Infrastructure exceptions for persistence and caching."""

from .base import RBACError


class DatabaseError(RBACError):
    """Database operation failed."""


class CacheError(RBACError):
    """Cache operation failed."""


class CacheConnectionError(CacheError):
    """Cache backend unreachable."""
