"""AsyncPG-based role repository implementation.

Ancestor and descendant walks are recursive CTEs so a single round trip
returns the whole chain.
"""

from typing import Dict, List, Optional
import logging

import asyncpg

from ....core.exceptions import ConflictError, DatabaseError
from ....database.connection import DatabaseManager
from ..entities import Role


logger = logging.getLogger(__name__)

_ROLE_COLUMNS = "id, name, parent_id, level, is_system, description, created_at, updated_at"

# Bound on chain depth; the hierarchy is kept acyclic on write.
MAX_HIERARCHY_DEPTH = 64


class AsyncPGRoleRepository:
    """AsyncPG implementation of RoleRepository protocol."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def _build_role_from_row(self, row: asyncpg.Record) -> Role:
        """Build Role entity from database row."""
        return Role(
            id=row['id'],
            name=row['name'],
            parent_id=row['parent_id'],
            level=row['level'],
            is_system=row['is_system'],
            description=row['description'],
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )

    async def get_by_id(self, role_id: str) -> Optional[Role]:
        """Get role by ID."""
        try:
            row = await self.db.fetchrow(
                f"SELECT {_ROLE_COLUMNS} FROM rbac_roles WHERE id = $1", role_id
            )
        except Exception as e:
            logger.error(f"Failed to get role by id {role_id}: {e}")
            raise DatabaseError(f"Failed to retrieve role: {e}")
        return self._build_role_from_row(row) if row else None

    async def get_by_name(self, name: str) -> Optional[Role]:
        """Get role by name."""
        try:
            row = await self.db.fetchrow(
                f"SELECT {_ROLE_COLUMNS} FROM rbac_roles WHERE name = $1", name
            )
        except Exception as e:
            logger.error(f"Failed to get role by name {name}: {e}")
            raise DatabaseError(f"Failed to retrieve role: {e}")
        return self._build_role_from_row(row) if row else None

    async def list_all(self) -> List[Role]:
        """List all roles in creation order."""
        try:
            rows = await self.db.fetch(
                f"SELECT {_ROLE_COLUMNS} FROM rbac_roles ORDER BY created_at, id"
            )
        except Exception as e:
            logger.error(f"Failed to list roles: {e}")
            raise DatabaseError(f"Failed to list roles: {e}")
        return [self._build_role_from_row(row) for row in rows]

    async def list_children(self, role_id: str) -> List[Role]:
        """List direct children of a role."""
        try:
            rows = await self.db.fetch(
                f"SELECT {_ROLE_COLUMNS} FROM rbac_roles WHERE parent_id = $1 ORDER BY created_at, id",
                role_id
            )
        except Exception as e:
            logger.error(f"Failed to list children of role {role_id}: {e}")
            raise DatabaseError(f"Failed to list child roles: {e}")
        return [self._build_role_from_row(row) for row in rows]

    async def get_ancestor_chain(self, role_id: str) -> List[Role]:
        """Return the role and its ancestors, nearest first."""
        query = f"""
            WITH RECURSIVE chain AS (
                SELECT {_ROLE_COLUMNS}, 0 AS depth
                FROM rbac_roles
                WHERE id = $1
                UNION ALL
                SELECT r.id, r.name, r.parent_id, r.level, r.is_system, r.description,
                       r.created_at, r.updated_at, c.depth + 1
                FROM rbac_roles r
                JOIN chain c ON r.id = c.parent_id
                WHERE c.depth < $2
            )
            SELECT {_ROLE_COLUMNS} FROM chain ORDER BY depth
        """
        try:
            rows = await self.db.fetch(query, role_id, MAX_HIERARCHY_DEPTH)
        except Exception as e:
            logger.error(f"Failed to load ancestor chain for role {role_id}: {e}")
            raise DatabaseError(f"Failed to load role ancestors: {e}")
        return [self._build_role_from_row(row) for row in rows]

    async def get_descendant_ids(self, role_id: str) -> List[str]:
        """Return ids of every descendant of a role."""
        query = """
            WITH RECURSIVE descendants AS (
                SELECT id FROM rbac_roles WHERE parent_id = $1
                UNION
                SELECT r.id FROM rbac_roles r
                JOIN descendants d ON r.parent_id = d.id
            )
            SELECT id FROM descendants
        """
        try:
            rows = await self.db.fetch(query, role_id)
        except Exception as e:
            logger.error(f"Failed to load descendants for role {role_id}: {e}")
            raise DatabaseError(f"Failed to load role descendants: {e}")
        return [row['id'] for row in rows]

    async def create(self, role: Role) -> Role:
        """Insert a new role."""
        query = f"""
            INSERT INTO rbac_roles ({_ROLE_COLUMNS})
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            RETURNING {_ROLE_COLUMNS}
        """
        try:
            row = await self.db.fetchrow(
                query, role.id, role.name, role.parent_id, role.level,
                role.is_system, role.description, role.created_at, role.updated_at
            )
        except asyncpg.UniqueViolationError:
            raise ConflictError(f"Role with name '{role.name}' already exists", details={"name": role.name})
        except Exception as e:
            logger.error(f"Failed to create role {role.name}: {e}")
            raise DatabaseError(f"Failed to create role: {e}")
        return self._build_role_from_row(row)

    async def update(self, role: Role) -> Role:
        """Update name, parent, level and description."""
        query = f"""
            UPDATE rbac_roles
            SET name = $2, parent_id = $3, level = $4, description = $5, updated_at = NOW()
            WHERE id = $1
            RETURNING {_ROLE_COLUMNS}
        """
        try:
            row = await self.db.fetchrow(
                query, role.id, role.name, role.parent_id, role.level, role.description
            )
        except asyncpg.UniqueViolationError:
            raise ConflictError(f"Role with name '{role.name}' already exists", details={"name": role.name})
        except Exception as e:
            logger.error(f"Failed to update role {role.id}: {e}")
            raise DatabaseError(f"Failed to update role: {e}")
        if row is None:
            raise DatabaseError(f"Role disappeared during update: {role.id}")
        return self._build_role_from_row(row)

    async def update_levels(self, levels: Dict[str, int]) -> None:
        """Set level for many roles in one transaction."""
        if not levels:
            return
        try:
            async with self.db.transaction() as conn:
                await conn.executemany(
                    "UPDATE rbac_roles SET level = $2, updated_at = NOW() WHERE id = $1",
                    list(levels.items())
                )
        except Exception as e:
            logger.error(f"Failed to update role levels: {e}")
            raise DatabaseError(f"Failed to update role levels: {e}")

    async def delete(self, role_id: str) -> bool:
        """Delete a role."""
        try:
            result = await self.db.execute("DELETE FROM rbac_roles WHERE id = $1", role_id)
        except Exception as e:
            logger.error(f"Failed to delete role {role_id}: {e}")
            raise DatabaseError(f"Failed to delete role: {e}")
        return result.endswith(" 1")
