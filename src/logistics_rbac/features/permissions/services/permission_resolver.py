"""Permission resolution: does a user hold (resource, action) in a context?

Resolution order for a cache miss:

1. unknown user -> deny (not cached)
2. super-admin designation -> allow
3. no effective role assignments -> deny
4. unknown permission -> deny (not cached)
5. for each effective assignment whose scope applies, walk the role and its
   ancestors nearest first; the first assignment of the target permission is
   decisive for that role. It grants when ``granted`` is set and the
   permission attributes match ``{**context, **constraints}``.
6. any role granting -> allow, otherwise deny

Unexpected failures and timeouts are logged and deny without caching.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union
import logging

from ....config.constants import SystemRoles
from ....core.exceptions import ResolutionFailure, ValidationError
from ...cache.services import ResolutionCache
from ..entities import (
    Permission,
    PermissionCode,
    PermissionRepository,
    RolePermissionRepository,
    RoleRepository,
    UserDirectory,
    UserRoleRepository,
)
from .effective import collapse_nearest, granted_permission_ids
from .ownership import OwnershipRegistry


logger = logging.getLogger(__name__)

PermissionRef = Union[str, Tuple[str, str], PermissionCode]


def normalize_pair(resource: str, action: str) -> Tuple[str, str]:
    """Trim and lowercase, matching how permissions are stored."""
    return resource.strip().lower(), action.strip().lower()


def as_pair(ref: PermissionRef) -> Tuple[str, str]:
    """Accept ``"resource:action"``, a (resource, action) tuple or a PermissionCode.

    Raises ValidationError for references that are not a valid code.
    """
    if isinstance(ref, PermissionCode):
        return ref.as_tuple()
    if isinstance(ref, str):
        return PermissionCode.parse(ref.strip().lower()).as_tuple()
    resource, action = ref
    return PermissionCode(*normalize_pair(resource, action)).as_tuple()


class PermissionResolver:
    """Answers authorization questions with a decision cache in front."""

    def __init__(
        self,
        role_repo: RoleRepository,
        permission_repo: PermissionRepository,
        role_permission_repo: RolePermissionRepository,
        user_role_repo: UserRoleRepository,
        user_directory: UserDirectory,
        cache: Optional[ResolutionCache] = None,
        ownership: Optional[OwnershipRegistry] = None,
        super_admin_designation: str = SystemRoles.SUPER_ADMIN,
        timeout_seconds: Optional[float] = 5.0,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    ):
        self.role_repo = role_repo
        self.permission_repo = permission_repo
        self.role_permission_repo = role_permission_repo
        self.user_role_repo = user_role_repo
        self.user_directory = user_directory
        self.cache = cache
        self.ownership = ownership or OwnershipRegistry()
        self.super_admin_designation = super_admin_designation
        self.timeout_seconds = timeout_seconds
        self.clock = clock

    async def resolve(
        self,
        user_id: str,
        resource: str,
        action: str,
        context: Optional[Mapping[str, Any]] = None
    ) -> bool:
        """Return True when the user holds (resource, action) in the context."""
        resource, action = normalize_pair(resource, action)
        if self.cache:
            try:
                cached = await asyncio.wait_for(
                    self.cache.get_decision(user_id, resource, action),
                    timeout=self.timeout_seconds
                )
            except asyncio.TimeoutError:
                logger.warning(f"Cache read timed out for {user_id} {resource}:{action}, treating as miss")
                cached = None
            if cached is not None:
                logger.debug(f"Cache hit for {user_id} {resource}:{action} -> {cached}")
                return cached

        try:
            allowed, cacheable = await asyncio.wait_for(
                self._resolve_uncached(user_id, resource, action, dict(context or {})),
                timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Permission check timed out after {self.timeout_seconds}s for "
                f"user {user_id} on {resource}:{action}"
            )
            return False
        except Exception as e:
            logger.error(f"Failed to check permission {resource}:{action} for user {user_id}: {e}")
            return False

        if cacheable and self.cache:
            await self.cache.set_decision(user_id, resource, action, allowed)
        logger.debug(f"Resolved {user_id} {resource}:{action} -> {allowed}")
        return allowed

    async def has_any(
        self,
        user_id: str,
        permissions: Iterable[PermissionRef],
        context: Optional[Mapping[str, Any]] = None
    ) -> bool:
        """True if any permission resolves; empty input is False.

        Malformed references count as not held.
        """
        for ref in permissions:
            pair = self._valid_pair(ref)
            if pair is None:
                continue
            resource, action = pair
            if await self.resolve(user_id, resource, action, context):
                return True
        return False

    async def has_all(
        self,
        user_id: str,
        permissions: Iterable[PermissionRef],
        context: Optional[Mapping[str, Any]] = None
    ) -> bool:
        """True if every permission resolves; empty input is True.

        Malformed references count as not held.
        """
        for ref in permissions:
            pair = self._valid_pair(ref)
            if pair is None:
                return False
            resource, action = pair
            if not await self.resolve(user_id, resource, action, context):
                return False
        return True

    def _valid_pair(self, ref: PermissionRef) -> Optional[Tuple[str, str]]:
        try:
            return as_pair(ref)
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring malformed permission reference {ref!r}: {e}")
            return None

    async def owns_resource(self, user_id: str, resource_type: str, resource_id: str) -> bool:
        return await self.ownership.owns_resource(user_id, resource_type, resource_id)

    async def resolve_or_owns(
        self,
        user_id: str,
        resource: str,
        action: str,
        resource_type: str,
        resource_id: str,
        context: Optional[Mapping[str, Any]] = None
    ) -> bool:
        """Permission first; ownership only when the permission is not held."""
        if await self.resolve(user_id, resource, action, context):
            return True
        return await self.owns_resource(user_id, resource_type, resource_id)

    async def get_user_permissions(self, user_id: str) -> List[Permission]:
        """Permissions granted through the user's effective roles.

        Scope and constraints are context dependent and are not applied here.
        """
        try:
            user = await self.user_directory.get_user(user_id)
            if user is None:
                return []
            if user.has_designation(self.super_admin_designation):
                return await self.permission_repo.list_all()

            now = self.clock()
            granted_ids: Dict[str, None] = {}
            for assignment in await self.user_role_repo.list_for_user(user_id):
                if not assignment.is_effective(now):
                    continue
                chain_ids = [r.id for r in await self.role_repo.get_ancestor_chain(assignment.role_id)]
                decisive = collapse_nearest(
                    chain_ids, await self.role_permission_repo.list_for_roles(chain_ids)
                )
                granted_ids.update(dict.fromkeys(granted_permission_ids(decisive)))

            permissions = await self.permission_repo.get_by_ids(granted_ids.keys())
            return sorted(permissions, key=lambda p: (p.resource, p.action))
        except Exception as e:
            logger.error(f"Failed to list permissions for user {user_id}: {e}")
            return []

    async def invalidate_user(self, user_id: str) -> int:
        """Drop every cached decision for the user."""
        if self.cache is None:
            return 0
        return await self.cache.delete_by_user_prefix(user_id)

    async def _resolve_uncached(
        self,
        user_id: str,
        resource: str,
        action: str,
        context: Dict[str, Any]
    ) -> Tuple[bool, bool]:
        """Return (allowed, cacheable)."""
        user = await self.user_directory.get_user(user_id)
        if user is None:
            logger.warning(f"Permission check for unknown user {user_id}")
            return False, False

        if user.has_designation(self.super_admin_designation):
            return True, True

        now = self.clock()
        assignments = [
            a for a in await self.user_role_repo.list_for_user(user_id) if a.is_effective(now)
        ]
        if not assignments:
            return False, True

        permission = await self.permission_repo.get_by_code(resource, action)
        if permission is None:
            logger.warning(f"Permission check for unknown permission {resource}:{action}")
            return False, False

        for assignment in assignments:
            if not assignment.applies_to(context):
                continue
            if await self._role_grants(assignment.role_id, permission, context):
                return True, True
        return False, True

    async def _role_grants(self, role_id: str, permission: Permission, context: Dict[str, Any]) -> bool:
        chain = await self.role_repo.get_ancestor_chain(role_id)
        if not chain:
            raise ResolutionFailure(
                f"Role {role_id} referenced by an assignment no longer exists",
                details={"role_id": role_id}
            )
        chain_ids = [role.id for role in chain]

        decisive = collapse_nearest(
            chain_ids,
            (a for a in await self.role_permission_repo.list_for_roles(chain_ids)
             if a.permission_id == permission.id)
        ).get(permission.id)
        if decisive is None:
            return False

        assignment, distance = decisive
        if not assignment.granted:
            logger.debug(f"Role {role_id} denies {permission.code} (distance {distance})")
            return False

        merged = {**context, **assignment.constraints}
        return permission.matches_context(merged)
