"""In-process cache adapter with LRU eviction and TTL support."""

import asyncio
import fnmatch
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class MemoryCacheEntry:
    """Memory cache entry with expiry metadata."""
    value: str
    expires_at: Optional[float] = None

    @property
    def is_expired(self) -> bool:
        """Check if entry is expired."""
        if self.expires_at is None:
            return False
        return time.monotonic() >= self.expires_at


class MemoryAdapter:
    """Memory cache adapter; all dict access is serialized by an asyncio lock."""

    def __init__(self, max_size: int = 10000, cleanup_interval: float = 60.0):
        self.max_size = max_size
        self._store: "OrderedDict[str, MemoryCacheEntry]" = OrderedDict()
        self._lock = asyncio.Lock()

        # Background cleanup task
        self._cleanup_task: Optional[asyncio.Task] = None
        self._cleanup_interval = cleanup_interval

    async def connect(self) -> None:
        """Start background expiry sweeps."""
        if self._cleanup_task is None:
            self._cleanup_task = asyncio.create_task(self._background_cleanup())
        logger.info(f"Memory cache initialized with max_size={self.max_size}")

    async def disconnect(self) -> None:
        """Stop sweeps and drop all entries."""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None

        async with self._lock:
            self._store.clear()

    async def get(self, key: str) -> Optional[str]:
        """Get value by key."""
        async with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None

            if entry.is_expired:
                del self._store[key]
                return None

            self._store.move_to_end(key)
            return entry.value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Set key-value pair with optional TTL."""
        expires_at = time.monotonic() + ttl if ttl and ttl > 0 else None
        async with self._lock:
            self._store.pop(key, None)
            while len(self._store) >= self.max_size:
                evicted, _ = self._store.popitem(last=False)
                logger.debug(f"Evicted cache key {evicted}")
            self._store[key] = MemoryCacheEntry(value=value, expires_at=expires_at)

    async def delete(self, key: str) -> bool:
        """Delete key and return whether it existed."""
        async with self._lock:
            return self._store.pop(key, None) is not None

    async def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with prefix."""
        async with self._lock:
            doomed = [key for key in self._store if key.startswith(prefix)]
            for key in doomed:
                del self._store[key]
            return len(doomed)

    async def keys(self, pattern: str = "*") -> List[str]:
        """Get keys matching pattern."""
        async with self._lock:
            self._cleanup_expired()
            if pattern == "*":
                return list(self._store.keys())
            return [key for key in self._store if fnmatch.fnmatchcase(key, pattern)]

    async def clear(self) -> None:
        """Clear all cache entries."""
        async with self._lock:
            self._store.clear()

    async def health_check(self) -> bool:
        """The in-process store is always reachable."""
        return True

    def _cleanup_expired(self) -> int:
        """Remove all expired entries. Caller holds the lock."""
        expired_keys = [key for key, entry in self._store.items() if entry.is_expired]
        for key in expired_keys:
            del self._store[key]
        return len(expired_keys)

    async def _background_cleanup(self) -> None:
        """Background task to clean up expired entries."""
        while True:
            try:
                await asyncio.sleep(self._cleanup_interval)
                async with self._lock:
                    removed = self._cleanup_expired()
                if removed:
                    logger.debug(f"Memory cache swept {removed} expired entries")
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in background cleanup: {e}")
