"""In-memory repositories for tests, local development and seeding dry runs.

Every read returns a copy so callers cannot mutate stored state without going
through ``update``/``upsert``.
"""

import copy
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ....core.exceptions import ConflictError
from ..entities import Permission, Role, RolePermission, UserRecord, UserRoleAssignment
from ..entities.role import utc_now


class InMemoryRoleRepository:
    """Role store backed by an insertion-ordered dict."""

    def __init__(self):
        self._roles: Dict[str, Role] = {}

    async def get_by_id(self, role_id: str) -> Optional[Role]:
        role = self._roles.get(role_id)
        return copy.deepcopy(role) if role else None

    async def get_by_name(self, name: str) -> Optional[Role]:
        for role in self._roles.values():
            if role.name == name:
                return copy.deepcopy(role)
        return None

    async def list_all(self) -> List[Role]:
        return [copy.deepcopy(role) for role in self._roles.values()]

    async def list_children(self, role_id: str) -> List[Role]:
        return [copy.deepcopy(role) for role in self._roles.values() if role.parent_id == role_id]

    async def get_ancestor_chain(self, role_id: str) -> List[Role]:
        chain: List[Role] = []
        seen = set()
        current = self._roles.get(role_id)
        while current is not None and current.id not in seen:
            seen.add(current.id)
            chain.append(copy.deepcopy(current))
            current = self._roles.get(current.parent_id) if current.parent_id else None
        return chain

    async def get_descendant_ids(self, role_id: str) -> List[str]:
        found: List[str] = []
        frontier = [role_id]
        seen = {role_id}
        while frontier:
            parent = frontier.pop(0)
            for role in self._roles.values():
                if role.parent_id == parent and role.id not in seen:
                    seen.add(role.id)
                    found.append(role.id)
                    frontier.append(role.id)
        return found

    async def create(self, role: Role) -> Role:
        if role.id in self._roles:
            raise ConflictError(f"Role id already exists: {role.id}")
        if any(existing.name == role.name for existing in self._roles.values()):
            raise ConflictError(f"Role with name '{role.name}' already exists", details={"name": role.name})
        self._roles[role.id] = copy.deepcopy(role)
        return copy.deepcopy(role)

    async def update(self, role: Role) -> Role:
        role.updated_at = utc_now()
        self._roles[role.id] = copy.deepcopy(role)
        return copy.deepcopy(role)

    async def update_levels(self, levels: Dict[str, int]) -> None:
        for role_id, level in levels.items():
            if role_id in self._roles:
                self._roles[role_id].level = level
                self._roles[role_id].updated_at = utc_now()

    async def delete(self, role_id: str) -> bool:
        return self._roles.pop(role_id, None) is not None


class InMemoryPermissionRepository:
    """Permission catalog backed by a dict."""

    def __init__(self):
        self._permissions: Dict[str, Permission] = {}

    async def get_by_id(self, permission_id: str) -> Optional[Permission]:
        permission = self._permissions.get(permission_id)
        return copy.deepcopy(permission) if permission else None

    async def get_by_code(self, resource: str, action: str) -> Optional[Permission]:
        for permission in self._permissions.values():
            if permission.resource == resource and permission.action == action:
                return copy.deepcopy(permission)
        return None

    async def get_by_ids(self, permission_ids: Iterable[str]) -> List[Permission]:
        return [
            copy.deepcopy(self._permissions[pid])
            for pid in dict.fromkeys(permission_ids)
            if pid in self._permissions
        ]

    async def list_all(self, resource: Optional[str] = None) -> List[Permission]:
        permissions = [
            p for p in self._permissions.values()
            if resource is None or p.resource == resource
        ]
        return [copy.deepcopy(p) for p in sorted(permissions, key=lambda p: (p.resource, p.action))]

    async def create(self, permission: Permission) -> Permission:
        if await self.get_by_code(permission.resource, permission.action):
            raise ConflictError(f"Permission '{permission.code}' already exists")
        self._permissions[permission.id] = copy.deepcopy(permission)
        return copy.deepcopy(permission)

    async def update(self, permission: Permission) -> Permission:
        permission.updated_at = utc_now()
        self._permissions[permission.id] = copy.deepcopy(permission)
        return copy.deepcopy(permission)

    async def delete(self, permission_id: str) -> bool:
        return self._permissions.pop(permission_id, None) is not None


class InMemoryRolePermissionRepository:
    """Role-permission assignments keyed by (role_id, permission_id)."""

    def __init__(self):
        self._assignments: Dict[Tuple[str, str], RolePermission] = {}

    async def get(self, role_id: str, permission_id: str) -> Optional[RolePermission]:
        assignment = self._assignments.get((role_id, permission_id))
        return copy.deepcopy(assignment) if assignment else None

    async def upsert(self, assignment: RolePermission) -> RolePermission:
        key = (assignment.role_id, assignment.permission_id)
        existing = self._assignments.get(key)
        if existing:
            existing.constraints = dict(assignment.constraints)
            existing.granted = assignment.granted
            existing.updated_at = utc_now()
        else:
            self._assignments[key] = copy.deepcopy(assignment)
        return copy.deepcopy(self._assignments[key])

    async def delete(self, role_id: str, permission_id: str) -> bool:
        return self._assignments.pop((role_id, permission_id), None) is not None

    async def list_for_roles(self, role_ids: Sequence[str]) -> List[RolePermission]:
        wanted = set(role_ids)
        return [copy.deepcopy(a) for a in self._assignments.values() if a.role_id in wanted]

    async def list_role_ids_for_permission(self, permission_id: str) -> List[str]:
        return list(dict.fromkeys(
            a.role_id for a in self._assignments.values() if a.permission_id == permission_id
        ))

    async def delete_for_role(self, role_id: str) -> int:
        doomed = [key for key in self._assignments if key[0] == role_id]
        for key in doomed:
            del self._assignments[key]
        return len(doomed)


class InMemoryUserRoleRepository:
    """User-role assignments keyed by (user_id, role_id)."""

    def __init__(self):
        self._assignments: Dict[Tuple[str, str], UserRoleAssignment] = {}

    async def get(self, user_id: str, role_id: str) -> Optional[UserRoleAssignment]:
        assignment = self._assignments.get((user_id, role_id))
        return copy.deepcopy(assignment) if assignment else None

    async def upsert(self, assignment: UserRoleAssignment) -> UserRoleAssignment:
        key = (assignment.user_id, assignment.role_id)
        existing = self._assignments.get(key)
        if existing:
            existing.scope = dict(assignment.scope)
            existing.expires_at = assignment.expires_at
            existing.is_active = assignment.is_active
            existing.updated_at = utc_now()
        else:
            self._assignments[key] = copy.deepcopy(assignment)
        return copy.deepcopy(self._assignments[key])

    async def delete(self, user_id: str, role_id: str) -> bool:
        return self._assignments.pop((user_id, role_id), None) is not None

    async def list_for_user(self, user_id: str) -> List[UserRoleAssignment]:
        return [copy.deepcopy(a) for a in self._assignments.values() if a.user_id == user_id]

    async def list_for_role(self, role_id: str) -> List[UserRoleAssignment]:
        return [copy.deepcopy(a) for a in self._assignments.values() if a.role_id == role_id]

    async def list_user_ids_for_roles(self, role_ids: Sequence[str]) -> List[str]:
        wanted = set(role_ids)
        return list(dict.fromkeys(a.user_id for a in self._assignments.values() if a.role_id in wanted))


class InMemoryUserDirectory:
    """User lookup over a dict of records."""

    def __init__(self, users: Optional[Iterable[UserRecord]] = None):
        self._users: Dict[str, UserRecord] = {user.id: user for user in (users or [])}

    def add(self, user: UserRecord) -> UserRecord:
        self._users[user.id] = user
        return user

    def remove(self, user_id: str) -> None:
        self._users.pop(user_id, None)

    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        return self._users.get(user_id)


class InMemoryRBACStore:
    """Bundle of in-memory repositories sharing one process."""

    def __init__(self, users: Optional[Iterable[UserRecord]] = None):
        self.roles = InMemoryRoleRepository()
        self.permissions = InMemoryPermissionRepository()
        self.role_permissions = InMemoryRolePermissionRepository()
        self.user_roles = InMemoryUserRoleRepository()
        self.users = InMemoryUserDirectory(users)
