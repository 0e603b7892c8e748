"""Tests for the exception hierarchy and HTTP mapping."""

import pytest

from logistics_rbac.core.exceptions import (
    AssignmentNotFoundError,
    CacheConnectionError,
    CacheError,
    CircularHierarchyError,
    ConflictError,
    DatabaseError,
    DuplicatePermissionError,
    DuplicateRoleError,
    ForbiddenError,
    InvalidConstraintError,
    NotFoundError,
    PermissionNotFoundError,
    RBACError,
    ResolutionFailure,
    RoleNotFoundError,
    SystemEntityError,
    ValidationError,
    create_error_response,
    get_http_status_code,
)


class TestHierarchy:

    @pytest.mark.parametrize("exc_class,base", [
        (RoleNotFoundError, NotFoundError),
        (PermissionNotFoundError, NotFoundError),
        (AssignmentNotFoundError, NotFoundError),
        (DuplicateRoleError, ConflictError),
        (DuplicatePermissionError, ConflictError),
        (CircularHierarchyError, ValidationError),
        (InvalidConstraintError, ValidationError),
        (SystemEntityError, ForbiddenError),
        (CacheConnectionError, CacheError),
        (DatabaseError, RBACError),
        (ResolutionFailure, RBACError),
    ])
    def test_inheritance(self, exc_class, base):
        assert issubclass(exc_class, base)
        assert issubclass(exc_class, RBACError)

    def test_default_error_code_is_class_name(self):
        error = ValidationError("bad input")
        assert error.error_code == "ValidationError"
        assert error.details == {}
        assert str(error) == "bad input"

    def test_role_not_found_details(self):
        error = RoleNotFoundError("r1")
        assert error.message == "Role not found: r1"
        assert error.details == {"role_id": "r1"}

    def test_circular_hierarchy_message(self):
        error = CircularHierarchyError("child", "grandchild")
        assert error.message == "Circular dependency detected in role hierarchy"
        assert error.details == {"role_id": "child", "parent_id": "grandchild"}


class TestHttpMapping:

    @pytest.mark.parametrize("error,status", [
        (ValidationError("x"), 400),
        (CircularHierarchyError("a", "b"), 400),
        (SystemEntityError("x"), 403),
        (RoleNotFoundError("r"), 404),
        (AssignmentNotFoundError("x"), 404),
        (DuplicateRoleError("admin"), 409),
        (DatabaseError("x"), 500),
        (RBACError("x"), 500),
        (RuntimeError("x"), 500),
    ])
    def test_status_codes(self, error, status):
        assert get_http_status_code(error) == status

    def test_unmapped_subclass_uses_nearest_base(self):
        class ShipmentNotFoundError(NotFoundError):
            pass

        assert get_http_status_code(ShipmentNotFoundError("s1")) == 404

    def test_error_response(self):
        response = create_error_response(DuplicatePermissionError("shipments", "read"))

        assert response == {
            "error": {
                "code": "DuplicatePermissionError",
                "message": "Permission 'shipments:read' already exists",
                "details": {"resource": "shipments", "action": "read"},
                "type": "DuplicatePermissionError",
            }
        }
