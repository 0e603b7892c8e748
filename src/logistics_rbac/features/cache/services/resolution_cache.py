"""Decision cache in front of the permission resolver.

Entries are keyed by ``{prefix}:{user_id}:{resource}:{action}``. The request
context is not part of the key, so a cached decision is reused for any
context until it expires or the user is invalidated.

Cache failures never propagate: reads degrade to a miss, writes and
invalidations are logged and skipped.
"""

import logging
from typing import Iterable, Optional

from ....config.constants import CacheKeys, CacheTTL, CacheValues
from ..entities.protocols import Cache

logger = logging.getLogger(__name__)


class ResolutionCache:
    """Boolean decision cache with per-user invalidation."""

    def __init__(self, cache: Cache, ttl_seconds: int = CacheTTL.PERMISSIONS_SHORT, prefix: str = "perm"):
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix

    def decision_key(self, user_id: str, resource: str, action: str) -> str:
        return CacheKeys.PERMISSION_DECISION.format(
            prefix=self.prefix, user_id=user_id, resource=resource, action=action
        )

    def user_prefix(self, user_id: str) -> str:
        return CacheKeys.USER_DECISIONS.format(prefix=self.prefix, user_id=user_id)

    async def get_decision(self, user_id: str, resource: str, action: str) -> Optional[bool]:
        """Return the cached decision, or None on miss or cache failure."""
        key = self.decision_key(user_id, resource, action)
        try:
            value = await self.cache.get(key)
        except Exception as e:
            logger.warning(f"Cache read failed for {key}, treating as miss: {e}")
            return None

        if value == CacheValues.GRANTED:
            return True
        if value == CacheValues.DENIED:
            return False
        if value is not None:
            logger.warning(f"Ignoring unexpected cached value for {key}: {value!r}")
        return None

    async def set_decision(self, user_id: str, resource: str, action: str, allowed: bool) -> None:
        """Store a decision with the configured TTL."""
        key = self.decision_key(user_id, resource, action)
        value = CacheValues.GRANTED if allowed else CacheValues.DENIED
        try:
            await self.cache.set(key, value, ttl=self.ttl_seconds)
        except Exception as e:
            logger.warning(f"Cache write failed for {key}: {e}")

    async def delete_by_user_prefix(self, user_id: str) -> int:
        """Drop every cached decision of one user."""
        try:
            deleted = await self.cache.delete_prefix(self.user_prefix(user_id))
        except Exception as e:
            logger.warning(f"Cache invalidation failed for user {user_id}: {e}")
            return 0
        logger.debug(f"Invalidated {deleted} cached decisions for user {user_id}")
        return deleted

    async def invalidate_users(self, user_ids: Iterable[str]) -> int:
        """Drop cached decisions for many users; returns total keys removed."""
        total = 0
        for user_id in dict.fromkeys(user_ids):
            total += await self.delete_by_user_prefix(user_id)
        return total
