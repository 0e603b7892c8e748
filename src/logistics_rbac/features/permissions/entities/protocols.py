"""Protocol interfaces for permission feature dependency injection.

Persistence, user lookup and ownership are external collaborators; services
depend on these contracts only.
"""

from abc import abstractmethod
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, runtime_checkable

from .assignment import RolePermission, UserRoleAssignment
from .permission import Permission
from .role import Role
from .user import UserRecord


@runtime_checkable
class RoleRepository(Protocol):
    """Protocol for role persistence."""

    @abstractmethod
    async def get_by_id(self, role_id: str) -> Optional[Role]:
        """Get role by id."""
        ...

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[Role]:
        """Get role by unique name."""
        ...

    @abstractmethod
    async def list_all(self) -> List[Role]:
        """List all roles in creation order."""
        ...

    @abstractmethod
    async def list_children(self, role_id: str) -> List[Role]:
        """List direct children of a role."""
        ...

    @abstractmethod
    async def get_ancestor_chain(self, role_id: str) -> List[Role]:
        """Return the role followed by its ancestors, nearest first."""
        ...

    @abstractmethod
    async def get_descendant_ids(self, role_id: str) -> List[str]:
        """Return ids of every descendant (excluding the role itself)."""
        ...

    @abstractmethod
    async def create(self, role: Role) -> Role:
        """Persist a new role."""
        ...

    @abstractmethod
    async def update(self, role: Role) -> Role:
        """Persist changes to an existing role."""
        ...

    @abstractmethod
    async def update_levels(self, levels: Dict[str, int]) -> None:
        """Set ``level`` for many roles at once."""
        ...

    @abstractmethod
    async def delete(self, role_id: str) -> bool:
        """Delete role; returns whether a row was removed."""
        ...


@runtime_checkable
class PermissionRepository(Protocol):
    """Protocol for permission catalog persistence."""

    @abstractmethod
    async def get_by_id(self, permission_id: str) -> Optional[Permission]:
        """Get permission by id."""
        ...

    @abstractmethod
    async def get_by_code(self, resource: str, action: str) -> Optional[Permission]:
        """Get permission by (resource, action)."""
        ...

    @abstractmethod
    async def get_by_ids(self, permission_ids: Iterable[str]) -> List[Permission]:
        """Get many permissions by id."""
        ...

    @abstractmethod
    async def list_all(self, resource: Optional[str] = None) -> List[Permission]:
        """List permissions, optionally for a single resource."""
        ...

    @abstractmethod
    async def create(self, permission: Permission) -> Permission:
        """Persist a new permission."""
        ...

    @abstractmethod
    async def update(self, permission: Permission) -> Permission:
        """Persist changes to an existing permission."""
        ...

    @abstractmethod
    async def delete(self, permission_id: str) -> bool:
        """Delete permission; returns whether a row was removed."""
        ...


@runtime_checkable
class RolePermissionRepository(Protocol):
    """Protocol for role-permission assignment persistence."""

    @abstractmethod
    async def get(self, role_id: str, permission_id: str) -> Optional[RolePermission]:
        """Get the assignment for a (role, permission) pair."""
        ...

    @abstractmethod
    async def upsert(self, assignment: RolePermission) -> RolePermission:
        """Insert or replace constraints and granted flag in place."""
        ...

    @abstractmethod
    async def delete(self, role_id: str, permission_id: str) -> bool:
        """Delete the assignment; returns whether a row was removed."""
        ...

    @abstractmethod
    async def list_for_roles(self, role_ids: Sequence[str]) -> List[RolePermission]:
        """List assignments held directly by any of the roles."""
        ...

    @abstractmethod
    async def list_role_ids_for_permission(self, permission_id: str) -> List[str]:
        """Ids of roles holding an assignment for the permission."""
        ...

    @abstractmethod
    async def delete_for_role(self, role_id: str) -> int:
        """Delete every assignment of a role; returns count."""
        ...


@runtime_checkable
class UserRoleRepository(Protocol):
    """Protocol for user-role assignment persistence."""

    @abstractmethod
    async def get(self, user_id: str, role_id: str) -> Optional[UserRoleAssignment]:
        """Get the assignment for a (user, role) pair."""
        ...

    @abstractmethod
    async def upsert(self, assignment: UserRoleAssignment) -> UserRoleAssignment:
        """Insert or replace scope, expiry and active flag in place."""
        ...

    @abstractmethod
    async def delete(self, user_id: str, role_id: str) -> bool:
        """Delete the assignment; returns whether a row was removed."""
        ...

    @abstractmethod
    async def list_for_user(self, user_id: str) -> List[UserRoleAssignment]:
        """List every assignment of a user, effective or not."""
        ...

    @abstractmethod
    async def list_for_role(self, role_id: str) -> List[UserRoleAssignment]:
        """List every assignment of a role."""
        ...

    @abstractmethod
    async def list_user_ids_for_roles(self, role_ids: Sequence[str]) -> List[str]:
        """Distinct user ids holding any of the roles (reverse index)."""
        ...


@runtime_checkable
class UserDirectory(Protocol):
    """Protocol for reading user records owned by the identity service."""

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        """Get user by id, or None when unknown."""
        ...


@runtime_checkable
class OwnershipStrategy(Protocol):
    """Decides whether a user owns one resource of a given type."""

    @abstractmethod
    async def owns(self, user_id: str, resource_id: str) -> bool:
        """Return True when the user owns the resource."""
        ...
