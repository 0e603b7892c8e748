"""Permission catalog management."""

from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional
import logging

from ....core.exceptions import (
    DuplicatePermissionError,
    PermissionNotFoundError,
    SystemEntityError,
    ValidationError,
)
from ..entities import Permission, PermissionRepository, RolePermissionRepository
from .invalidation import DecisionInvalidator


logger = logging.getLogger(__name__)


class PermissionCatalogService:
    """Service for the (resource, action) catalog."""

    def __init__(
        self,
        permission_repo: PermissionRepository,
        role_permission_repo: RolePermissionRepository,
        invalidator: Optional[DecisionInvalidator] = None
    ):
        self.permission_repo = permission_repo
        self.role_permission_repo = role_permission_repo
        self.invalidator = invalidator

    async def get(self, permission_id: str) -> Permission:
        """Get a permission or raise PermissionNotFoundError."""
        permission = await self.permission_repo.get_by_id(permission_id)
        if permission is None:
            raise PermissionNotFoundError(permission_id)
        return permission

    async def get_by_code(self, resource: str, action: str) -> Optional[Permission]:
        return await self.permission_repo.get_by_code(resource.strip().lower(), action.strip().lower())

    async def list_permissions(self, resource: Optional[str] = None) -> List[Permission]:
        return await self.permission_repo.list_all(resource)

    async def permissions_by_resource(self) -> Dict[str, List[Permission]]:
        """Catalog grouped by resource."""
        grouped: Dict[str, List[Permission]] = {}
        for permission in await self.permission_repo.list_all():
            grouped.setdefault(permission.resource, []).append(permission)
        return grouped

    async def create(
        self,
        resource: str,
        action: str,
        attributes: Optional[Mapping[str, Any]] = None,
        description: Optional[str] = None,
        is_system: bool = False
    ) -> Permission:
        """Create a permission; (resource, action) must be unique."""
        permission = Permission(
            resource=resource,
            action=action,
            attributes=dict(attributes or {}),
            description=description,
            is_system=is_system,
        )

        if await self.permission_repo.get_by_code(permission.resource, permission.action):
            raise DuplicatePermissionError(permission.resource, permission.action)

        created = await self.permission_repo.create(permission)
        logger.info(f"Created permission {created.code}")
        return created

    async def update(
        self,
        permission_id: str,
        resource: Optional[str] = None,
        action: Optional[str] = None,
        attributes: Optional[Mapping[str, Any]] = None,
        description: Optional[str] = None
    ) -> Permission:
        """Update a non-system permission."""
        current = await self.get(permission_id)
        if current.is_system:
            raise SystemEntityError(
                f"System permission '{current.code}' cannot be modified",
                details={"permission_id": permission_id}
            )

        candidate = replace(
            current,
            resource=resource if resource is not None else current.resource,
            action=action if action is not None else current.action,
            attributes=dict(attributes) if attributes is not None else current.attributes,
            description=description if description is not None else current.description,
        )

        if (candidate.resource, candidate.action) != (current.resource, current.action):
            clash = await self.permission_repo.get_by_code(candidate.resource, candidate.action)
            if clash and clash.id != permission_id:
                raise DuplicatePermissionError(candidate.resource, candidate.action)

        updated = await self.permission_repo.update(candidate)
        logger.info(f"Updated permission {updated.code}")

        if self.invalidator:
            await self.invalidator.for_permission(permission_id)
        return updated

    async def delete(self, permission_id: str) -> None:
        """Delete a non-system permission that no role references."""
        permission = await self.get(permission_id)
        if permission.is_system:
            raise SystemEntityError(
                f"System permission '{permission.code}' cannot be deleted",
                details={"permission_id": permission_id}
            )

        role_ids = await self.role_permission_repo.list_role_ids_for_permission(permission_id)
        if role_ids:
            raise ValidationError(
                f"Permission '{permission.code}' is assigned to {len(role_ids)} role(s)",
                details={"permission_id": permission_id, "role_ids": role_ids}
            )

        await self.permission_repo.delete(permission_id)
        logger.info(f"Deleted permission {permission.code}")
