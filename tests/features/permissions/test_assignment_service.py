"""Tests for AssignmentService."""

from datetime import datetime, timedelta, timezone

import pytest

from logistics_rbac.core.exceptions import (
    AssignmentNotFoundError,
    InvalidConstraintError,
    PermissionNotFoundError,
    RoleNotFoundError,
)


class TestRolePermissionAssignments:

    @pytest.mark.asyncio
    async def test_assign_requires_existing_role_and_permission(self, rbac):
        role = await rbac.roles.create("driver")
        permission = await rbac.catalog.create("deliveries", "complete")

        with pytest.raises(RoleNotFoundError):
            await rbac.assignments.assign_permission_to_role("missing", permission.id)
        with pytest.raises(PermissionNotFoundError):
            await rbac.assignments.assign_permission_to_role(role.id, "missing")

    @pytest.mark.asyncio
    async def test_assign_is_idempotent_upsert(self, rbac):
        role = await rbac.roles.create("driver")
        permission = await rbac.catalog.create("deliveries", "complete")

        first = await rbac.assignments.assign_permission_to_role(role.id, permission.id)
        second = await rbac.assignments.assign_permission_to_role(
            role.id, permission.id, constraints={"region": "north"}, granted=False
        )

        assert second.id == first.id
        assert second.constraints == {"region": "north"}
        assert second.granted is False
        assert len(await rbac.store.role_permissions.list_for_roles([role.id])) == 1

    @pytest.mark.asyncio
    async def test_malformed_constraints_rejected(self, rbac):
        role = await rbac.roles.create("driver")
        permission = await rbac.catalog.create("deliveries", "complete")
        with pytest.raises(InvalidConstraintError):
            await rbac.assignments.assign_permission_to_role(
                role.id, permission.id, constraints={"regions": ["a", "b"]}
            )

    @pytest.mark.asyncio
    async def test_revoke_missing_assignment(self, rbac):
        role = await rbac.roles.create("driver")
        with pytest.raises(AssignmentNotFoundError):
            await rbac.assignments.revoke_permission_from_role(role.id, "missing")


class TestPermissionsForRole:

    @pytest.mark.asyncio
    async def test_includes_inherited_with_distance(self, rbac, logistics_tree):
        driver = logistics_tree["roles"]["driver"]

        effective = await rbac.assignments.permissions_for_role(driver.id)

        by_code = {e.permission.code: e for e in effective}
        assert set(by_code) == {
            "deliveries:complete", "shipments:read", "reports:generate", "shipments:delete"
        }
        assert by_code["deliveries:complete"].distance == 0
        assert by_code["shipments:read"].distance == 1
        assert by_code["shipments:delete"].distance == 2
        assert by_code["shipments:delete"].inherited
        assert effective[0].permission.code == "deliveries:complete"

    @pytest.mark.asyncio
    async def test_direct_only(self, rbac, logistics_tree):
        driver = logistics_tree["roles"]["driver"]
        effective = await rbac.assignments.permissions_for_role(driver.id, include_ancestors=False)
        assert [e.permission.code for e in effective] == ["deliveries:complete"]

    @pytest.mark.asyncio
    async def test_nearest_assignment_wins(self, rbac, logistics_tree):
        driver = logistics_tree["roles"]["driver"]
        read = logistics_tree["permissions"]["shipments:read"]
        await rbac.assignments.assign_permission_to_role(driver.id, read.id, granted=False)

        effective = await rbac.assignments.permissions_for_role(driver.id)

        entry = next(e for e in effective if e.permission.code == "shipments:read")
        assert entry.source_role_id == driver.id
        assert entry.granted is False


class TestUserRoleAssignments:

    @pytest.mark.asyncio
    async def test_assign_and_list(self, rbac, logistics_tree):
        driver = logistics_tree["roles"]["driver"]
        await rbac.assignments.assign_role_to_user("alice", driver.id, scope={"branch": "jkt"})

        roles = await rbac.assignments.roles_for_user("alice")
        assert [a.role_id for a in roles] == [driver.id]
        assert roles[0].scope == {"branch": "jkt"}
        assert await rbac.assignments.users_with_role(driver.id) == ["alice"]

    @pytest.mark.asyncio
    async def test_reassign_replaces_in_place(self, rbac, logistics_tree, future):
        driver = logistics_tree["roles"]["driver"]
        first = await rbac.assignments.assign_role_to_user("alice", driver.id)
        second = await rbac.assignments.assign_role_to_user("alice", driver.id, expires_at=future)

        assert second.id == first.id
        assert second.expires_at == future
        assert len(await rbac.assignments.roles_for_user("alice")) == 1

    @pytest.mark.asyncio
    async def test_naive_expiry_treated_as_utc(self, rbac, logistics_tree):
        driver = logistics_tree["roles"]["driver"]
        naive = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(days=1)
        stored = await rbac.assignments.assign_role_to_user("alice", driver.id, expires_at=naive)
        assert stored.expires_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_active_only_filters_expired_and_inactive(self, rbac, logistics_tree, past):
        roles = logistics_tree["roles"]
        await rbac.assignments.assign_role_to_user("alice", roles["driver"].id, expires_at=past)
        await rbac.assignments.assign_role_to_user("alice", roles["customer"].id, is_active=False)
        await rbac.assignments.assign_role_to_user("alice", roles["manager"].id)

        active = await rbac.assignments.roles_for_user("alice", active_only=True)

        assert [a.role_id for a in active] == [roles["manager"].id]
        assert await rbac.assignments.users_with_role(roles["driver"].id) == []
        assert await rbac.assignments.users_with_role(roles["driver"].id, active_only=False) == ["alice"]

    @pytest.mark.asyncio
    async def test_assign_unknown_role(self, rbac):
        with pytest.raises(RoleNotFoundError):
            await rbac.assignments.assign_role_to_user("alice", "missing")

    @pytest.mark.asyncio
    async def test_revoke_missing(self, rbac, logistics_tree):
        with pytest.raises(AssignmentNotFoundError):
            await rbac.assignments.revoke_role_from_user("alice", logistics_tree["roles"]["driver"].id)
