"""Tests for canonical scalar maps and tagged comparison."""

import pytest

from logistics_rbac.core.exceptions import InvalidConstraintError, ValidationError
from logistics_rbac.features.permissions.entities import (
    Permission,
    RolePermission,
    UserRoleAssignment,
    matches,
    normalize_scalar_map,
    scalars_equal,
)


class TestScalarsEqual:
    """Tagged equality rules."""

    @pytest.mark.parametrize("left,right", [
        ("north", "north"),
        (3, 3),
        (3, 3.0),
        (True, True),
        (None, None),
    ])
    def test_equal_values(self, left, right):
        assert scalars_equal(left, right)

    @pytest.mark.parametrize("left,right", [
        (True, 1),
        (False, 0),
        (1, "1"),
        (None, ""),
        (None, False),
        ("north", "North"),
        ([1], [1]),
    ])
    def test_unequal_values(self, left, right):
        assert not scalars_equal(left, right)


class TestNormalizeScalarMap:

    def test_none_becomes_empty(self):
        assert normalize_scalar_map(None) == {}

    def test_returns_copy(self):
        source = {"region": "north"}
        result = normalize_scalar_map(source)
        result["region"] = "south"
        assert source["region"] == "north"

    @pytest.mark.parametrize("bad", [
        {"region": ["north"]},
        {"region": {"name": "north"}},
        {"weight": float("nan")},
        {1: "north"},
        {"": "north"},
    ])
    def test_rejects_malformed_maps(self, bad):
        with pytest.raises(InvalidConstraintError):
            normalize_scalar_map(bad)

    def test_rejects_non_mapping(self):
        with pytest.raises(InvalidConstraintError):
            normalize_scalar_map(["region"])

    def test_invalid_constraint_is_validation_error(self):
        assert issubclass(InvalidConstraintError, ValidationError)


class TestMatches:

    def test_empty_requirement_matches_anything(self):
        assert matches({}, {})
        assert matches({}, {"region": "north"})

    def test_all_keys_must_be_present_and_equal(self):
        required = {"region": "north", "priority": 1}
        assert matches(required, {"region": "north", "priority": 1, "extra": True})
        assert not matches(required, {"region": "north"})
        assert not matches(required, {"region": "south", "priority": 1})

    def test_bool_does_not_match_number(self):
        assert not matches({"flag": True}, {"flag": 1})


class TestEntitiesValidateMaps:

    def test_permission_attributes_validated(self):
        with pytest.raises(InvalidConstraintError):
            Permission(resource="shipments", action="read", attributes={"region": ["a"]})

    def test_role_permission_constraints_validated(self):
        with pytest.raises(InvalidConstraintError):
            RolePermission(role_id="r", permission_id="p", constraints={"region": {"a": 1}})

    def test_user_role_scope_validated(self):
        with pytest.raises(InvalidConstraintError):
            UserRoleAssignment(user_id="u", role_id="r", scope={"branch": object()})
