"""Role-permission and user-role assignment management.

Every mutation invalidates the cached decisions it can affect once the store
write has committed.
"""

from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional
import logging

from ....core.exceptions import (
    AssignmentNotFoundError,
    PermissionNotFoundError,
    RoleNotFoundError,
)
from ..entities import (
    EffectiveAssignment,
    PermissionRepository,
    Role,
    RolePermission,
    RolePermissionRepository,
    RoleRepository,
    UserRoleAssignment,
    UserRoleRepository,
)
from .effective import collapse_nearest
from .invalidation import DecisionInvalidator


logger = logging.getLogger(__name__)


class AssignmentService:
    """Service for granting, denying and revoking access."""

    def __init__(
        self,
        role_repo: RoleRepository,
        permission_repo: PermissionRepository,
        role_permission_repo: RolePermissionRepository,
        user_role_repo: UserRoleRepository,
        invalidator: Optional[DecisionInvalidator] = None
    ):
        self.role_repo = role_repo
        self.permission_repo = permission_repo
        self.role_permission_repo = role_permission_repo
        self.user_role_repo = user_role_repo
        self.invalidator = invalidator

    # Role -> Permission

    async def assign_permission_to_role(
        self,
        role_id: str,
        permission_id: str,
        constraints: Optional[Mapping[str, Any]] = None,
        granted: bool = True
    ) -> RolePermission:
        """Grant (or explicitly deny) a permission to a role.

        Re-assigning the same pair replaces constraints and the granted flag.
        """
        await self._require_role(role_id)
        if await self.permission_repo.get_by_id(permission_id) is None:
            raise PermissionNotFoundError(permission_id)

        assignment = RolePermission(
            role_id=role_id,
            permission_id=permission_id,
            constraints=dict(constraints or {}),
            granted=granted,
        )
        stored = await self.role_permission_repo.upsert(assignment)
        logger.info(
            f"{'Granted' if granted else 'Denied'} permission {permission_id} on role {role_id}"
        )

        if self.invalidator:
            await self.invalidator.for_roles([role_id])
        return stored

    async def revoke_permission_from_role(self, role_id: str, permission_id: str) -> None:
        deleted = await self.role_permission_repo.delete(role_id, permission_id)
        if not deleted:
            raise AssignmentNotFoundError(
                f"Permission {permission_id} is not assigned to role {role_id}",
                details={"role_id": role_id, "permission_id": permission_id}
            )
        logger.info(f"Revoked permission {permission_id} from role {role_id}")

        if self.invalidator:
            await self.invalidator.for_roles([role_id])

    async def permissions_for_role(
        self,
        role_id: str,
        include_ancestors: bool = True
    ) -> List[EffectiveAssignment]:
        """Effective assignments of a role, nearest role winning per permission.

        Denied assignments are included so callers can see what blocks
        inheritance; check ``granted`` on each entry.
        """
        role = await self._require_role(role_id)
        if include_ancestors:
            chain = await self.role_repo.get_ancestor_chain(role_id)
        else:
            chain = [role]
        chain_ids = [r.id for r in chain]

        decisive = collapse_nearest(chain_ids, await self.role_permission_repo.list_for_roles(chain_ids))
        permissions = {
            p.id: p for p in await self.permission_repo.get_by_ids(decisive.keys())
        }

        effective = [
            EffectiveAssignment(
                assignment=assignment,
                permission=permissions[permission_id],
                source_role_id=assignment.role_id,
                distance=distance,
            )
            for permission_id, (assignment, distance) in decisive.items()
            if permission_id in permissions
        ]
        effective.sort(key=lambda e: (e.distance, e.permission.resource, e.permission.action))
        return effective

    # User -> Role

    async def assign_role_to_user(
        self,
        user_id: str,
        role_id: str,
        scope: Optional[Mapping[str, Any]] = None,
        expires_at: Optional[datetime] = None,
        is_active: bool = True
    ) -> UserRoleAssignment:
        """Assign a role to a user; re-assigning replaces scope, expiry and state."""
        await self._require_role(role_id)
        if expires_at is not None and expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)

        assignment = UserRoleAssignment(
            user_id=user_id,
            role_id=role_id,
            scope=dict(scope or {}),
            expires_at=expires_at,
            is_active=is_active,
        )
        stored = await self.user_role_repo.upsert(assignment)
        logger.info(f"Assigned role {role_id} to user {user_id}")

        if self.invalidator:
            await self.invalidator.for_user(user_id)
        return stored

    async def revoke_role_from_user(self, user_id: str, role_id: str) -> None:
        deleted = await self.user_role_repo.delete(user_id, role_id)
        if not deleted:
            raise AssignmentNotFoundError(
                f"Role {role_id} is not assigned to user {user_id}",
                details={"user_id": user_id, "role_id": role_id}
            )
        logger.info(f"Revoked role {role_id} from user {user_id}")

        if self.invalidator:
            await self.invalidator.for_user(user_id)

    async def roles_for_user(self, user_id: str, active_only: bool = False) -> List[UserRoleAssignment]:
        assignments = await self.user_role_repo.list_for_user(user_id)
        if active_only:
            now = datetime.now(timezone.utc)
            assignments = [a for a in assignments if a.is_effective(now)]
        return assignments

    async def users_with_role(self, role_id: str, active_only: bool = True) -> List[str]:
        """User ids holding the role directly."""
        await self._require_role(role_id)
        assignments = await self.user_role_repo.list_for_role(role_id)
        if active_only:
            now = datetime.now(timezone.utc)
            assignments = [a for a in assignments if a.is_effective(now)]
        return list(dict.fromkeys(a.user_id for a in assignments))

    async def _require_role(self, role_id: str) -> Role:
        role = await self.role_repo.get_by_id(role_id)
        if role is None:
            raise RoleNotFoundError(role_id)
        return role
