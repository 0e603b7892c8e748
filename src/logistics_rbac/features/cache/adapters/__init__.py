from .memory_adapter import MemoryAdapter
from .redis_adapter import RedisAdapter

__all__ = ["MemoryAdapter", "RedisAdapter"]
