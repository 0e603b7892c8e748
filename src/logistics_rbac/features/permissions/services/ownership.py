"""Ownership fallback keyed by resource type."""

from typing import Awaitable, Callable, Dict, Optional
import logging

from ....config.constants import OwnershipResources
from ..entities import OwnershipStrategy


logger = logging.getLogger(__name__)

OwnerLookup = Callable[[str], Awaitable[Optional[str]]]


class SelfOwnershipStrategy:
    """A user owns their own user record."""

    async def owns(self, user_id: str, resource_id: str) -> bool:
        return user_id == resource_id


class RepositoryOwnershipStrategy:
    """Looks up the owner of a resource and compares it with the user.

    ``lookup`` receives the resource id and returns the owning user id, or
    None when the resource does not exist.
    """

    def __init__(self, lookup: OwnerLookup):
        self.lookup = lookup

    async def owns(self, user_id: str, resource_id: str) -> bool:
        owner_id = await self.lookup(resource_id)
        return owner_id is not None and owner_id == user_id


class OwnershipRegistry:
    """Dispatches ownership checks to the strategy registered for a resource type."""

    def __init__(self, register_defaults: bool = True):
        self._strategies: Dict[str, OwnershipStrategy] = {}
        if register_defaults:
            self.register(OwnershipResources.USER, SelfOwnershipStrategy())

    def register(self, resource_type: str, strategy: OwnershipStrategy) -> None:
        self._strategies[resource_type] = strategy
        logger.debug(f"Registered ownership strategy for {resource_type}")

    def register_lookup(self, resource_type: str, lookup: OwnerLookup) -> None:
        """Register a lookup-based strategy, e.g. shipments -> owning customer."""
        self.register(resource_type, RepositoryOwnershipStrategy(lookup))

    def supports(self, resource_type: str) -> bool:
        return resource_type in self._strategies

    async def owns_resource(self, user_id: str, resource_type: str, resource_id: str) -> bool:
        """True only when a registered strategy confirms ownership."""
        strategy = self._strategies.get(resource_type)
        if strategy is None:
            logger.warning(f"No ownership strategy for resource type {resource_type}")
            return False

        try:
            return bool(await strategy.owns(user_id, resource_id))
        except Exception as e:
            logger.error(f"Ownership check failed for {resource_type} {resource_id}: {e}")
            return False
