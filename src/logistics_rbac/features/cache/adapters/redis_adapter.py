"""Redis cache adapter built on redis.asyncio."""

import logging
import re
from typing import List, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ....core.exceptions import CacheConnectionError, CacheError

logger = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r"([\\*?\[\]])")


def escape_glob(value: str) -> str:
    """Escape Redis glob metacharacters so ``value`` matches literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", value)


class RedisAdapter:
    """Redis cache adapter."""

    def __init__(
        self,
        url: str,
        max_connections: int = 20,
        socket_timeout: Optional[float] = 2.0,
        client: Optional[redis.Redis] = None
    ):
        self.url = url
        self.max_connections = max_connections
        self.socket_timeout = socket_timeout
        self.redis_client: Optional[redis.Redis] = client
        self._connected = False

    async def connect(self) -> None:
        """Connect to Redis."""
        if self._connected:
            return

        try:
            if self.redis_client is None:
                self.redis_client = redis.from_url(
                    self.url,
                    max_connections=self.max_connections,
                    socket_timeout=self.socket_timeout,
                    socket_connect_timeout=self.socket_timeout,
                    decode_responses=True,
                )
            await self.redis_client.ping()
            self._connected = True
            logger.info("Connected to Redis")
        except Exception as e:
            raise CacheConnectionError(f"Failed to connect to Redis: {e}")

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self.redis_client:
            try:
                await self.redis_client.aclose()
            except Exception as e:
                logger.error(f"Error closing Redis connection: {e}")
            finally:
                self.redis_client = None
                self._connected = False

    async def get(self, key: str) -> Optional[str]:
        """Get value by key."""
        client = self._require_client()
        try:
            value = await client.get(key)
        except RedisError as e:
            raise CacheError(f"Redis get error for key {key}: {e}")
        if isinstance(value, bytes):
            value = value.decode()
        return value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Set key-value pair with optional TTL."""
        client = self._require_client()
        try:
            await client.set(key, value, ex=ttl if ttl and ttl > 0 else None)
        except RedisError as e:
            raise CacheError(f"Redis set error for key {key}: {e}")

    async def delete(self, key: str) -> bool:
        """Delete key and return whether it existed."""
        client = self._require_client()
        try:
            return await client.delete(key) > 0
        except RedisError as e:
            raise CacheError(f"Redis delete error for key {key}: {e}")

    async def delete_prefix(self, prefix: str) -> int:
        """Delete keys starting with prefix using incremental SCAN."""
        client = self._require_client()
        pattern = f"{escape_glob(prefix)}*"
        deleted = 0
        try:
            batch: List[str] = []
            async for key in client.scan_iter(match=pattern, count=500):
                batch.append(key)
                if len(batch) >= 500:
                    deleted += await client.delete(*batch)
                    batch = []
            if batch:
                deleted += await client.delete(*batch)
        except RedisError as e:
            raise CacheError(f"Redis delete prefix error for {prefix}: {e}")
        return deleted

    async def keys(self, pattern: str = "*") -> List[str]:
        """Get keys matching pattern."""
        client = self._require_client()
        try:
            keys = [key async for key in client.scan_iter(match=pattern)]
        except RedisError as e:
            raise CacheError(f"Redis keys error with pattern {pattern}: {e}")
        return [key.decode() if isinstance(key, bytes) else key for key in keys]

    async def clear(self) -> None:
        """Clear all cache entries in the selected database."""
        client = self._require_client()
        try:
            await client.flushdb()
        except RedisError as e:
            raise CacheError(f"Redis clear error: {e}")

    async def health_check(self) -> bool:
        """Check Redis health."""
        if self.redis_client is None:
            return False
        try:
            return bool(await self.redis_client.ping())
        except Exception as e:
            logger.error(f"Redis health check failed: {e}")
            return False

    def _require_client(self) -> redis.Redis:
        if self.redis_client is None:
            raise CacheConnectionError("Redis adapter is not connected")
        return self.redis_client
