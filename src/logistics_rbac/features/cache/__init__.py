"""Cache feature: backend adapters and the resolution decision cache."""

from .adapters import MemoryAdapter, RedisAdapter
from .entities import Cache
from .services import ResolutionCache

__all__ = ["Cache", "MemoryAdapter", "RedisAdapter", "ResolutionCache"]
