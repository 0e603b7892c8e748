"""Domain exceptions for role, permission and assignment management."""

from typing import Any, Dict, Optional

from .base import RBACError


# Not Found

class NotFoundError(RBACError):
    """Referenced entity does not exist."""


class RoleNotFoundError(NotFoundError):
    """Role does not exist."""

    def __init__(self, role_id: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Role not found: {role_id}", details={"role_id": role_id, **(details or {})})


class PermissionNotFoundError(NotFoundError):
    """Permission does not exist."""

    def __init__(self, permission_id: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"Permission not found: {permission_id}",
            details={"permission_id": permission_id, **(details or {})}
        )


class AssignmentNotFoundError(NotFoundError):
    """Role-permission or user-role assignment does not exist."""


# Conflict

class ConflictError(RBACError):
    """Uniqueness rule violated."""


class DuplicateRoleError(ConflictError):
    """Role name already taken."""

    def __init__(self, name: str):
        super().__init__(f"Role with name '{name}' already exists", details={"name": name})


class DuplicatePermissionError(ConflictError):
    """(resource, action) pair already taken."""

    def __init__(self, resource: str, action: str):
        super().__init__(
            f"Permission '{resource}:{action}' already exists",
            details={"resource": resource, "action": action}
        )


# Validation

class ValidationError(RBACError):
    """Request violates a structural rule."""


class CircularHierarchyError(ValidationError):
    """Reparenting would introduce a cycle."""

    def __init__(self, role_id: str, parent_id: str):
        super().__init__(
            "Circular dependency detected in role hierarchy",
            details={"role_id": role_id, "parent_id": parent_id}
        )


class InvalidConstraintError(ValidationError):
    """Constraint, scope or attribute map holds a non-scalar value."""


# Forbidden

class ForbiddenError(RBACError):
    """Operation not allowed on this entity."""


class SystemEntityError(ForbiddenError):
    """System roles and permissions cannot be modified or deleted."""


# Resolution

class ResolutionFailure(RBACError):
    """Unexpected failure while resolving a decision.

    Raised inside the resolver only; callers always receive a boolean.
    """
