"""Tests for the asyncpg repositories against a mocked DatabaseManager."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import asyncpg
import pytest

from logistics_rbac.core.exceptions import ConflictError, DatabaseError
from logistics_rbac.features.permissions.entities import Role, RolePermission
from logistics_rbac.features.permissions.repositories import (
    AsyncPGPermissionRepository,
    AsyncPGRolePermissionRepository,
    AsyncPGRoleRepository,
    AsyncPGUserDirectory,
)
from logistics_rbac.features.permissions.repositories.role_repository import MAX_HIERARCHY_DEPTH

TS = datetime(2024, 1, 1, tzinfo=timezone.utc)


def role_row(role_id, name, parent_id=None, level=0):
    return {
        "id": role_id, "name": name, "parent_id": parent_id, "level": level,
        "is_system": False, "description": None, "created_at": TS, "updated_at": TS,
    }


@pytest.fixture
def db():
    return AsyncMock()


class TestRoleRepository:

    @pytest.mark.asyncio
    async def test_ancestor_chain_nearest_first(self, db):
        db.fetch.return_value = [
            role_row("d", "driver", "m", 2),
            role_row("m", "manager", "a", 1),
            role_row("a", "admin"),
        ]
        chain = await AsyncPGRoleRepository(db).get_ancestor_chain("d")

        assert [role.name for role in chain] == ["driver", "manager", "admin"]
        args = db.fetch.await_args.args
        assert "WITH RECURSIVE" in args[0]
        assert args[1:] == ("d", MAX_HIERARCHY_DEPTH)

    @pytest.mark.asyncio
    async def test_missing_role(self, db):
        db.fetchrow.return_value = None
        assert await AsyncPGRoleRepository(db).get_by_id("nope") is None

    @pytest.mark.asyncio
    async def test_unique_violation_becomes_conflict(self, db):
        db.fetchrow.side_effect = asyncpg.UniqueViolationError("duplicate key")
        with pytest.raises(ConflictError):
            await AsyncPGRoleRepository(db).create(Role(name="admin"))

    @pytest.mark.asyncio
    async def test_driver_errors_become_database_errors(self, db):
        db.fetch.side_effect = OSError("connection refused")
        with pytest.raises(DatabaseError):
            await AsyncPGRoleRepository(db).list_all()

    @pytest.mark.asyncio
    async def test_delete_reads_command_status(self, db):
        repo = AsyncPGRoleRepository(db)
        db.execute.return_value = "DELETE 1"
        assert await repo.delete("r1") is True
        db.execute.return_value = "DELETE 0"
        assert await repo.delete("r1") is False


class TestPermissionRepository:

    @pytest.mark.asyncio
    async def test_attributes_decoded_from_json_text(self, db):
        db.fetchrow.return_value = {
            "id": "p1", "resource": "pickups", "action": "assign",
            "attributes": '{"region": "north"}', "description": None, "is_system": False,
            "created_at": TS, "updated_at": TS,
        }
        permission = await AsyncPGPermissionRepository(db).get_by_code("pickups", "assign")
        assert permission.attributes == {"region": "north"}

    @pytest.mark.asyncio
    async def test_get_by_ids_skips_query_for_empty_input(self, db):
        assert await AsyncPGPermissionRepository(db).get_by_ids([]) == []
        db.fetch.assert_not_awaited()


class TestAssignmentRepositories:

    @pytest.mark.asyncio
    async def test_upsert_sends_constraints_as_json(self, db):
        db.fetchrow.return_value = {
            "id": "rp1", "role_id": "r1", "permission_id": "p1",
            "constraints": '{"region": "north"}', "granted": False,
            "created_at": TS, "updated_at": TS,
        }
        stored = await AsyncPGRolePermissionRepository(db).upsert(
            RolePermission(role_id="r1", permission_id="p1", constraints={"region": "north"}, granted=False)
        )

        args = db.fetchrow.await_args.args
        assert "ON CONFLICT (role_id, permission_id)" in args[0]
        assert args[4] == '{"region": "north"}'
        assert stored.constraints == {"region": "north"}
        assert stored.granted is False


class TestUserDirectory:

    @pytest.mark.asyncio
    async def test_reads_designation(self, db):
        db.fetchrow.return_value = {"id": "root", "system_role": "super_admin"}
        user = await AsyncPGUserDirectory(db).get_user("root")
        assert user.has_designation("super_admin")

    @pytest.mark.asyncio
    async def test_unknown_user(self, db):
        db.fetchrow.return_value = None
        assert await AsyncPGUserDirectory(db).get_user("ghost") is None

    def test_rejects_unsafe_table_name(self, db):
        with pytest.raises(ValueError):
            AsyncPGUserDirectory(db, table="users; DROP TABLE users")
