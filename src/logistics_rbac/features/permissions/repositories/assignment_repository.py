"""AsyncPG-based repositories for role-permission and user-role assignments.

Both tables are unique on their pair; writes use ``ON CONFLICT ... DO UPDATE``
so re-assigning replaces the mutable fields in place.
"""

from typing import List, Optional, Sequence
import logging

import asyncpg

from ....core.exceptions import DatabaseError
from ....database.connection import DatabaseManager
from ..entities import RolePermission, UserRoleAssignment
from ._rows import dump_json, load_json


logger = logging.getLogger(__name__)

_RP_COLUMNS = "id, role_id, permission_id, constraints, granted, created_at, updated_at"
_UR_COLUMNS = "id, user_id, role_id, scope, expires_at, is_active, created_at, updated_at"


class AsyncPGRolePermissionRepository:
    """AsyncPG implementation of RolePermissionRepository protocol."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def _build_assignment_from_row(self, row: asyncpg.Record) -> RolePermission:
        return RolePermission(
            id=row['id'],
            role_id=row['role_id'],
            permission_id=row['permission_id'],
            constraints=load_json(row['constraints']),
            granted=row['granted'],
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )

    async def get(self, role_id: str, permission_id: str) -> Optional[RolePermission]:
        try:
            row = await self.db.fetchrow(
                f"SELECT {_RP_COLUMNS} FROM rbac_role_permissions WHERE role_id = $1 AND permission_id = $2",
                role_id, permission_id
            )
        except Exception as e:
            logger.error(f"Failed to get assignment {role_id}/{permission_id}: {e}")
            raise DatabaseError(f"Failed to retrieve role permission: {e}")
        return self._build_assignment_from_row(row) if row else None

    async def upsert(self, assignment: RolePermission) -> RolePermission:
        query = f"""
            INSERT INTO rbac_role_permissions ({_RP_COLUMNS})
            VALUES ($1, $2, $3, $4::jsonb, $5, $6, $7)
            ON CONFLICT (role_id, permission_id) DO UPDATE
            SET constraints = EXCLUDED.constraints,
                granted = EXCLUDED.granted,
                updated_at = NOW()
            RETURNING {_RP_COLUMNS}
        """
        try:
            row = await self.db.fetchrow(
                query, assignment.id, assignment.role_id, assignment.permission_id,
                dump_json(assignment.constraints), assignment.granted,
                assignment.created_at, assignment.updated_at
            )
        except Exception as e:
            logger.error(f"Failed to upsert role permission {assignment.role_id}/{assignment.permission_id}: {e}")
            raise DatabaseError(f"Failed to assign permission to role: {e}")
        return self._build_assignment_from_row(row)

    async def delete(self, role_id: str, permission_id: str) -> bool:
        try:
            result = await self.db.execute(
                "DELETE FROM rbac_role_permissions WHERE role_id = $1 AND permission_id = $2",
                role_id, permission_id
            )
        except Exception as e:
            logger.error(f"Failed to delete role permission {role_id}/{permission_id}: {e}")
            raise DatabaseError(f"Failed to revoke permission from role: {e}")
        return result.endswith(" 1")

    async def list_for_roles(self, role_ids: Sequence[str]) -> List[RolePermission]:
        if not role_ids:
            return []
        try:
            rows = await self.db.fetch(
                f"SELECT {_RP_COLUMNS} FROM rbac_role_permissions WHERE role_id = ANY($1::text[])",
                list(role_ids)
            )
        except Exception as e:
            logger.error(f"Failed to list role permissions: {e}")
            raise DatabaseError(f"Failed to list role permissions: {e}")
        return [self._build_assignment_from_row(row) for row in rows]

    async def list_role_ids_for_permission(self, permission_id: str) -> List[str]:
        try:
            rows = await self.db.fetch(
                "SELECT DISTINCT role_id FROM rbac_role_permissions WHERE permission_id = $1",
                permission_id
            )
        except Exception as e:
            logger.error(f"Failed to list roles for permission {permission_id}: {e}")
            raise DatabaseError(f"Failed to list roles for permission: {e}")
        return [row['role_id'] for row in rows]

    async def delete_for_role(self, role_id: str) -> int:
        try:
            result = await self.db.execute(
                "DELETE FROM rbac_role_permissions WHERE role_id = $1", role_id
            )
        except Exception as e:
            logger.error(f"Failed to delete permissions of role {role_id}: {e}")
            raise DatabaseError(f"Failed to delete role permissions: {e}")
        return int(result.split()[-1])


class AsyncPGUserRoleRepository:
    """AsyncPG implementation of UserRoleRepository protocol."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def _build_assignment_from_row(self, row: asyncpg.Record) -> UserRoleAssignment:
        return UserRoleAssignment(
            id=row['id'],
            user_id=row['user_id'],
            role_id=row['role_id'],
            scope=load_json(row['scope']),
            expires_at=row['expires_at'],
            is_active=row['is_active'],
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )

    async def get(self, user_id: str, role_id: str) -> Optional[UserRoleAssignment]:
        try:
            row = await self.db.fetchrow(
                f"SELECT {_UR_COLUMNS} FROM rbac_user_roles WHERE user_id = $1 AND role_id = $2",
                user_id, role_id
            )
        except Exception as e:
            logger.error(f"Failed to get user role {user_id}/{role_id}: {e}")
            raise DatabaseError(f"Failed to retrieve user role: {e}")
        return self._build_assignment_from_row(row) if row else None

    async def upsert(self, assignment: UserRoleAssignment) -> UserRoleAssignment:
        query = f"""
            INSERT INTO rbac_user_roles ({_UR_COLUMNS})
            VALUES ($1, $2, $3, $4::jsonb, $5, $6, $7, $8)
            ON CONFLICT (user_id, role_id) DO UPDATE
            SET scope = EXCLUDED.scope,
                expires_at = EXCLUDED.expires_at,
                is_active = EXCLUDED.is_active,
                updated_at = NOW()
            RETURNING {_UR_COLUMNS}
        """
        try:
            row = await self.db.fetchrow(
                query, assignment.id, assignment.user_id, assignment.role_id,
                dump_json(assignment.scope), assignment.expires_at, assignment.is_active,
                assignment.created_at, assignment.updated_at
            )
        except Exception as e:
            logger.error(f"Failed to upsert user role {assignment.user_id}/{assignment.role_id}: {e}")
            raise DatabaseError(f"Failed to assign role to user: {e}")
        return self._build_assignment_from_row(row)

    async def delete(self, user_id: str, role_id: str) -> bool:
        try:
            result = await self.db.execute(
                "DELETE FROM rbac_user_roles WHERE user_id = $1 AND role_id = $2", user_id, role_id
            )
        except Exception as e:
            logger.error(f"Failed to delete user role {user_id}/{role_id}: {e}")
            raise DatabaseError(f"Failed to revoke role from user: {e}")
        return result.endswith(" 1")

    async def list_for_user(self, user_id: str) -> List[UserRoleAssignment]:
        try:
            rows = await self.db.fetch(
                f"SELECT {_UR_COLUMNS} FROM rbac_user_roles WHERE user_id = $1 ORDER BY created_at, id",
                user_id
            )
        except Exception as e:
            logger.error(f"Failed to list roles of user {user_id}: {e}")
            raise DatabaseError(f"Failed to list user roles: {e}")
        return [self._build_assignment_from_row(row) for row in rows]

    async def list_for_role(self, role_id: str) -> List[UserRoleAssignment]:
        try:
            rows = await self.db.fetch(
                f"SELECT {_UR_COLUMNS} FROM rbac_user_roles WHERE role_id = $1 ORDER BY created_at, id",
                role_id
            )
        except Exception as e:
            logger.error(f"Failed to list users of role {role_id}: {e}")
            raise DatabaseError(f"Failed to list role users: {e}")
        return [self._build_assignment_from_row(row) for row in rows]

    async def list_user_ids_for_roles(self, role_ids: Sequence[str]) -> List[str]:
        if not role_ids:
            return []
        try:
            rows = await self.db.fetch(
                "SELECT DISTINCT user_id FROM rbac_user_roles WHERE role_id = ANY($1::text[])",
                list(role_ids)
            )
        except Exception as e:
            logger.error(f"Failed to list users for roles: {e}")
            raise DatabaseError(f"Failed to list users for roles: {e}")
        return [row['user_id'] for row in rows]
