"""Cache invalidation after administrative writes.

Affected users are found through the user-role reverse index. Invalidation
runs after the store commit and never raises; failures leave decisions to
expire with their TTL.
"""

import logging
from typing import Iterable, List, Optional

from ...cache.services import ResolutionCache
from ..entities import RolePermissionRepository, RoleRepository, UserRoleRepository

logger = logging.getLogger(__name__)


class DecisionInvalidator:
    """Maps store mutations to the users whose cached decisions they affect."""

    def __init__(
        self,
        roles: RoleRepository,
        role_permissions: RolePermissionRepository,
        user_roles: UserRoleRepository,
        cache: Optional[ResolutionCache] = None,
    ):
        self.roles = roles
        self.role_permissions = role_permissions
        self.user_roles = user_roles
        self.cache = cache

    async def for_user(self, user_id: str) -> None:
        if self.cache is None:
            return
        await self.cache.delete_by_user_prefix(user_id)

    async def for_roles(self, role_ids: Iterable[str]) -> None:
        """Invalidate holders of the roles and of every descendant role."""
        if self.cache is None:
            return
        role_ids = list(role_ids)
        try:
            affected = await self._expand_descendants(role_ids)
            user_ids = await self.user_roles.list_user_ids_for_roles(affected)
        except Exception as e:
            logger.warning(f"Could not determine users to invalidate for roles {role_ids}: {e}")
            return
        removed = await self.cache.invalidate_users(user_ids)
        logger.debug(f"Invalidated {removed} decisions for {len(user_ids)} users")

    async def for_permission(self, permission_id: str) -> None:
        """Invalidate holders of any role that references the permission."""
        if self.cache is None:
            return
        try:
            role_ids = await self.role_permissions.list_role_ids_for_permission(permission_id)
        except Exception as e:
            logger.warning(f"Could not determine roles referencing permission {permission_id}: {e}")
            return
        if role_ids:
            await self.for_roles(role_ids)

    async def _expand_descendants(self, role_ids: Iterable[str]) -> List[str]:
        expanded = list(dict.fromkeys(role_ids))
        for role_id in list(expanded):
            for descendant_id in await self.roles.get_descendant_ids(role_id):
                if descendant_id not in expanded:
                    expanded.append(descendant_id)
        return expanded
