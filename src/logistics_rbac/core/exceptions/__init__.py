"""Exception hierarchy for logistics-rbac."""

from .base import RBACError, create_error_response
from .domain import (
    NotFoundError,
    RoleNotFoundError,
    PermissionNotFoundError,
    AssignmentNotFoundError,
    ConflictError,
    DuplicateRoleError,
    DuplicatePermissionError,
    ValidationError,
    CircularHierarchyError,
    InvalidConstraintError,
    ForbiddenError,
    SystemEntityError,
    ResolutionFailure,
)
from .infrastructure import DatabaseError, CacheError, CacheConnectionError
from .http_mapping import HTTP_STATUS_MAP, get_http_status_code

__all__ = [
    "RBACError",
    "create_error_response",
    "NotFoundError",
    "RoleNotFoundError",
    "PermissionNotFoundError",
    "AssignmentNotFoundError",
    "ConflictError",
    "DuplicateRoleError",
    "DuplicatePermissionError",
    "ValidationError",
    "CircularHierarchyError",
    "InvalidConstraintError",
    "ForbiddenError",
    "SystemEntityError",
    "ResolutionFailure",
    "DatabaseError",
    "CacheError",
    "CacheConnectionError",
    "HTTP_STATUS_MAP",
    "get_http_status_code",
]
