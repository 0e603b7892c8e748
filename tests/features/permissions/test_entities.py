"""Tests for permission feature entities."""

from datetime import datetime, timedelta, timezone

import pytest

from logistics_rbac.core.exceptions import ValidationError
from logistics_rbac.features.permissions.entities import (
    Permission,
    PermissionCode,
    Role,
    RoleNode,
    UserRecord,
    UserRoleAssignment,
)


class TestRole:

    def test_defaults(self):
        role = Role(name="  driver ")
        assert role.name == "driver"
        assert role.level == 0
        assert role.parent_id is None
        assert role.is_root
        assert role.id

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            Role(name="   ")

    def test_negative_level_rejected(self):
        with pytest.raises(ValidationError):
            Role(name="driver", level=-1)

    def test_node_to_dict_nests_children(self):
        parent = Role(name="manager")
        child = Role(name="driver", parent_id=parent.id, level=1)
        node = RoleNode(role=parent, children=[RoleNode(role=child)])

        data = node.to_dict()

        assert data["name"] == "manager"
        assert data["children"][0]["name"] == "driver"
        assert data["children"][0]["level"] == 1


class TestPermission:

    def test_code_and_default_description(self):
        permission = Permission(resource="Shipments", action="Read")
        assert permission.code == "shipments:read"
        assert permission.description == "Permission to read shipments"

    def test_blank_resource_rejected(self):
        with pytest.raises(ValidationError):
            Permission(resource=" ", action="read")

    def test_matches_context(self):
        permission = Permission(resource="shipments", action="read", attributes={"region": "north"})
        assert permission.matches_context({"region": "north"})
        assert not permission.matches_context({"region": "south"})
        assert not permission.matches_context({})

    def test_permission_code_parse(self):
        code = PermissionCode.parse("pickups:assign")
        assert code.as_tuple() == ("pickups", "assign")
        assert str(code) == "pickups:assign"

    @pytest.mark.parametrize("bad", ["pickups", "", ":assign", "pickups:"])
    def test_permission_code_parse_rejects(self, bad):
        with pytest.raises(ValidationError):
            PermissionCode.parse(bad)


class TestUserRoleAssignment:

    def test_effective_when_active_without_expiry(self):
        assert UserRoleAssignment(user_id="u", role_id="r").is_effective()

    def test_inactive_is_not_effective(self):
        assert not UserRoleAssignment(user_id="u", role_id="r", is_active=False).is_effective()

    def test_expiry_boundary(self):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        assignment = UserRoleAssignment(user_id="u", role_id="r", expires_at=now)
        assert not assignment.is_effective(now)
        assert assignment.is_effective(now - timedelta(seconds=1))

    def test_scope_applies_to_matching_context(self):
        assignment = UserRoleAssignment(user_id="u", role_id="r", scope={"branch": "jkt"})
        assert assignment.applies_to({"branch": "jkt", "other": 1})
        assert not assignment.applies_to({"branch": "bdg"})
        assert not assignment.applies_to({})


class TestUserRecord:

    def test_designation(self):
        assert UserRecord(id="u", system_role="super_admin").has_designation("super_admin")
        assert not UserRecord(id="u").has_designation("super_admin")
