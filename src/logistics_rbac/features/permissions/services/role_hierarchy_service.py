"""Role hierarchy management.

Keeps the role forest acyclic, keeps ``level`` equal to the depth of each
role, and refuses deletions that would orphan children or user assignments.
"""

from typing import Dict, List, Optional
import logging

from ....core.exceptions import (
    CircularHierarchyError,
    DuplicateRoleError,
    RoleNotFoundError,
    SystemEntityError,
    ValidationError,
)
from ..entities import (
    Role,
    RoleNode,
    RolePermissionRepository,
    RoleRepository,
    UserRoleRepository,
)
from .invalidation import DecisionInvalidator


logger = logging.getLogger(__name__)


class RoleHierarchyService:
    """Service for creating, reshaping and deleting roles."""

    def __init__(
        self,
        role_repo: RoleRepository,
        role_permission_repo: RolePermissionRepository,
        user_role_repo: UserRoleRepository,
        invalidator: Optional[DecisionInvalidator] = None
    ):
        self.role_repo = role_repo
        self.role_permission_repo = role_permission_repo
        self.user_role_repo = user_role_repo
        self.invalidator = invalidator

    async def get(self, role_id: str) -> Role:
        """Get a role or raise RoleNotFoundError."""
        role = await self.role_repo.get_by_id(role_id)
        if role is None:
            raise RoleNotFoundError(role_id)
        return role

    async def get_by_name(self, name: str) -> Optional[Role]:
        return await self.role_repo.get_by_name(name.strip())

    async def list_roles(self) -> List[Role]:
        return await self.role_repo.list_all()

    async def create(
        self,
        name: str,
        parent_id: Optional[str] = None,
        description: Optional[str] = None,
        is_system: bool = False
    ) -> Role:
        """Create a role under an optional parent."""
        role = Role(name=name, description=description, is_system=is_system)

        if await self.role_repo.get_by_name(role.name):
            raise DuplicateRoleError(role.name)

        if parent_id is not None:
            parent = await self.get(parent_id)
            role.parent_id = parent.id
            role.level = parent.level + 1

        created = await self.role_repo.create(role)
        logger.info(f"Created role {created.name} (level {created.level})")
        return created

    async def update(
        self,
        role_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None
    ) -> Role:
        """Rename a role or change its description."""
        role = await self.get(role_id)
        if role.is_system:
            raise SystemEntityError(f"System role '{role.name}' cannot be modified", details={"role_id": role_id})

        if name is not None:
            new_name = name.strip()
            if not new_name:
                raise ValidationError("Role name cannot be empty")
            if new_name != role.name:
                existing = await self.role_repo.get_by_name(new_name)
                if existing and existing.id != role.id:
                    raise DuplicateRoleError(new_name)
                role.name = new_name

        if description is not None:
            role.description = description

        updated = await self.role_repo.update(role)
        logger.info(f"Updated role {updated.id}")
        return updated

    async def reparent(self, role_id: str, new_parent_id: Optional[str]) -> Role:
        """Move a role (and its subtree) under a new parent, or to the top level."""
        if new_parent_id is not None and new_parent_id == role_id:
            raise ValidationError("A role cannot be its own parent", details={"role_id": role_id})

        role = await self.get(role_id)
        if role.is_system:
            raise SystemEntityError(f"System role '{role.name}' cannot be moved", details={"role_id": role_id})

        if new_parent_id is None:
            new_level = 0
        else:
            parent = await self.get(new_parent_id)
            descendants = await self.role_repo.get_descendant_ids(role_id)
            if new_parent_id in descendants:
                raise CircularHierarchyError(role_id, new_parent_id)
            new_level = parent.level + 1

        if role.parent_id == new_parent_id and role.level == new_level:
            return role

        role.parent_id = new_parent_id
        role.level = new_level
        updated = await self.role_repo.update(role)

        descendant_levels = await self._descendant_levels(updated)
        await self.role_repo.update_levels(descendant_levels)

        logger.info(
            f"Moved role {updated.name} under {new_parent_id or 'top level'}; "
            f"{len(descendant_levels)} descendant levels recomputed"
        )

        if self.invalidator:
            await self.invalidator.for_roles([role_id])
        return updated

    async def delete(self, role_id: str) -> None:
        """Delete a role that no other role or user references."""
        role = await self.get(role_id)
        if role.is_system:
            raise SystemEntityError(f"System role '{role.name}' cannot be deleted", details={"role_id": role_id})

        children = await self.role_repo.list_children(role_id)
        if children:
            raise ValidationError(
                f"Role '{role.name}' has child roles; reassign or delete them first",
                details={"role_id": role_id, "children": [child.id for child in children]}
            )

        holders = await self.user_role_repo.list_for_role(role_id)
        if holders:
            raise ValidationError(
                f"Role '{role.name}' is assigned to {len(holders)} user(s)",
                details={"role_id": role_id, "user_count": len(holders)}
            )

        removed = await self.role_permission_repo.delete_for_role(role_id)
        await self.role_repo.delete(role_id)
        logger.info(f"Deleted role {role.name} and {removed} permission assignment(s)")

    async def hierarchy(self) -> List[RoleNode]:
        """Forest view: root roles with children nested, siblings in creation order."""
        roles = await self.role_repo.list_all()
        nodes: Dict[str, RoleNode] = {role.id: RoleNode(role=role) for role in roles}

        roots: List[RoleNode] = []
        for role in roles:
            node = nodes[role.id]
            parent = nodes.get(role.parent_id) if role.parent_id else None
            if parent is None:
                roots.append(node)
            else:
                parent.children.append(node)
        return roots

    async def _descendant_levels(self, root: Role) -> Dict[str, int]:
        levels: Dict[str, int] = {}
        frontier = [(root.id, root.level)]
        while frontier:
            parent_id, parent_level = frontier.pop(0)
            for child in await self.role_repo.list_children(parent_id):
                if child.id in levels:
                    continue
                levels[child.id] = parent_level + 1
                frontier.append((child.id, parent_level + 1))
        return levels
