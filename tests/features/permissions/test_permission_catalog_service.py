"""Tests for PermissionCatalogService."""

import pytest

from logistics_rbac.core.exceptions import (
    DuplicatePermissionError,
    PermissionNotFoundError,
    SystemEntityError,
    ValidationError,
)


class TestCatalog:

    @pytest.mark.asyncio
    async def test_create_and_lookup(self, rbac):
        created = await rbac.catalog.create("shipments", "read", attributes={"region": "north"})

        assert created.code == "shipments:read"
        assert (await rbac.catalog.get(created.id)).attributes == {"region": "north"}
        assert (await rbac.catalog.get_by_code("shipments", "read")).id == created.id

    @pytest.mark.asyncio
    async def test_duplicate_pair_conflicts(self, rbac):
        await rbac.catalog.create("shipments", "read")
        with pytest.raises(DuplicatePermissionError):
            await rbac.catalog.create("Shipments", "READ")

    @pytest.mark.asyncio
    async def test_blank_action_rejected(self, rbac):
        with pytest.raises(ValidationError):
            await rbac.catalog.create("shipments", "")

    @pytest.mark.asyncio
    async def test_list_and_group_by_resource(self, rbac):
        await rbac.catalog.create("shipments", "track")
        await rbac.catalog.create("shipments", "create")
        await rbac.catalog.create("payments", "process")

        shipments = await rbac.catalog.list_permissions("shipments")
        grouped = await rbac.catalog.permissions_by_resource()

        assert [p.action for p in shipments] == ["create", "track"]
        assert set(grouped) == {"shipments", "payments"}
        assert len(grouped["shipments"]) == 2

    @pytest.mark.asyncio
    async def test_update_checks_uniqueness_excluding_self(self, rbac):
        read = await rbac.catalog.create("shipments", "read")
        await rbac.catalog.create("shipments", "list")

        same = await rbac.catalog.update(read.id, resource="shipments", description="Read shipments")
        assert same.description == "Read shipments"

        with pytest.raises(DuplicatePermissionError):
            await rbac.catalog.update(read.id, action="list")

    @pytest.mark.asyncio
    async def test_update_attributes(self, rbac):
        read = await rbac.catalog.create("shipments", "read")
        updated = await rbac.catalog.update(read.id, attributes={"region": "north"})
        assert updated.attributes == {"region": "north"}
        assert updated.code == "shipments:read"

    @pytest.mark.asyncio
    async def test_system_permission_read_only(self, rbac):
        permission = await rbac.catalog.create("users", "delete", is_system=True)
        with pytest.raises(SystemEntityError):
            await rbac.catalog.update(permission.id, description="x")
        with pytest.raises(SystemEntityError):
            await rbac.catalog.delete(permission.id)

    @pytest.mark.asyncio
    async def test_delete_referenced_permission_rejected(self, rbac):
        role = await rbac.roles.create("driver")
        permission = await rbac.catalog.create("deliveries", "complete")
        await rbac.assignments.assign_permission_to_role(role.id, permission.id)

        with pytest.raises(ValidationError):
            await rbac.catalog.delete(permission.id)

        await rbac.assignments.revoke_permission_from_role(role.id, permission.id)
        await rbac.catalog.delete(permission.id)
        with pytest.raises(PermissionNotFoundError):
            await rbac.catalog.get(permission.id)
