"""AsyncPG-based permission catalog repository."""

from typing import Iterable, List, Optional
import logging

import asyncpg

from ....core.exceptions import ConflictError, DatabaseError
from ....database.connection import DatabaseManager
from ..entities import Permission
from ._rows import dump_json, load_json


logger = logging.getLogger(__name__)

_PERMISSION_COLUMNS = "id, resource, action, attributes, description, is_system, created_at, updated_at"


class AsyncPGPermissionRepository:
    """AsyncPG implementation of PermissionRepository protocol."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def _build_permission_from_row(self, row: asyncpg.Record) -> Permission:
        """Build Permission entity from database row."""
        return Permission(
            id=row['id'],
            resource=row['resource'],
            action=row['action'],
            attributes=load_json(row['attributes']),
            description=row['description'],
            is_system=row['is_system'],
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )

    async def get_by_id(self, permission_id: str) -> Optional[Permission]:
        try:
            row = await self.db.fetchrow(
                f"SELECT {_PERMISSION_COLUMNS} FROM rbac_permissions WHERE id = $1", permission_id
            )
        except Exception as e:
            logger.error(f"Failed to get permission by id {permission_id}: {e}")
            raise DatabaseError(f"Failed to retrieve permission: {e}")
        return self._build_permission_from_row(row) if row else None

    async def get_by_code(self, resource: str, action: str) -> Optional[Permission]:
        try:
            row = await self.db.fetchrow(
                f"SELECT {_PERMISSION_COLUMNS} FROM rbac_permissions WHERE resource = $1 AND action = $2",
                resource, action
            )
        except Exception as e:
            logger.error(f"Failed to get permission {resource}:{action}: {e}")
            raise DatabaseError(f"Failed to retrieve permission: {e}")
        return self._build_permission_from_row(row) if row else None

    async def get_by_ids(self, permission_ids: Iterable[str]) -> List[Permission]:
        ids = list(dict.fromkeys(permission_ids))
        if not ids:
            return []
        try:
            rows = await self.db.fetch(
                f"SELECT {_PERMISSION_COLUMNS} FROM rbac_permissions WHERE id = ANY($1::text[])", ids
            )
        except Exception as e:
            logger.error(f"Failed to get permissions by ids: {e}")
            raise DatabaseError(f"Failed to retrieve permissions: {e}")
        return [self._build_permission_from_row(row) for row in rows]

    async def list_all(self, resource: Optional[str] = None) -> List[Permission]:
        query = f"""
            SELECT {_PERMISSION_COLUMNS} FROM rbac_permissions
            WHERE ($1::text IS NULL OR resource = $1)
            ORDER BY resource, action
        """
        try:
            rows = await self.db.fetch(query, resource)
        except Exception as e:
            logger.error(f"Failed to list permissions: {e}")
            raise DatabaseError(f"Failed to list permissions: {e}")
        return [self._build_permission_from_row(row) for row in rows]

    async def create(self, permission: Permission) -> Permission:
        query = f"""
            INSERT INTO rbac_permissions ({_PERMISSION_COLUMNS})
            VALUES ($1, $2, $3, $4::jsonb, $5, $6, $7, $8)
            RETURNING {_PERMISSION_COLUMNS}
        """
        try:
            row = await self.db.fetchrow(
                query, permission.id, permission.resource, permission.action,
                dump_json(permission.attributes), permission.description,
                permission.is_system, permission.created_at, permission.updated_at
            )
        except asyncpg.UniqueViolationError:
            raise ConflictError(f"Permission '{permission.code}' already exists")
        except Exception as e:
            logger.error(f"Failed to create permission {permission.code}: {e}")
            raise DatabaseError(f"Failed to create permission: {e}")
        return self._build_permission_from_row(row)

    async def update(self, permission: Permission) -> Permission:
        query = f"""
            UPDATE rbac_permissions
            SET resource = $2, action = $3, attributes = $4::jsonb, description = $5, updated_at = NOW()
            WHERE id = $1
            RETURNING {_PERMISSION_COLUMNS}
        """
        try:
            row = await self.db.fetchrow(
                query, permission.id, permission.resource, permission.action,
                dump_json(permission.attributes), permission.description
            )
        except asyncpg.UniqueViolationError:
            raise ConflictError(f"Permission '{permission.code}' already exists")
        except Exception as e:
            logger.error(f"Failed to update permission {permission.id}: {e}")
            raise DatabaseError(f"Failed to update permission: {e}")
        if row is None:
            raise DatabaseError(f"Permission disappeared during update: {permission.id}")
        return self._build_permission_from_row(row)

    async def delete(self, permission_id: str) -> bool:
        try:
            result = await self.db.execute("DELETE FROM rbac_permissions WHERE id = $1", permission_id)
        except Exception as e:
            logger.error(f"Failed to delete permission {permission_id}: {e}")
            raise DatabaseError(f"Failed to delete permission: {e}")
        return result.endswith(" 1")
