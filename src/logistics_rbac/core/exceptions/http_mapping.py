"""HTTP status code mapping for exceptions."""

from typing import Dict, Type

from .base import RBACError
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


HTTP_STATUS_MAP: Dict[Type[Exception], int] = {
    # 400 Bad Request
    ValidationError: 400,
    CircularHierarchyError: 400,
    InvalidConstraintError: 400,

    # 403 Forbidden
    ForbiddenError: 403,
    SystemEntityError: 403,

    # 404 Not Found
    NotFoundError: 404,
    RoleNotFoundError: 404,
    PermissionNotFoundError: 404,
    AssignmentNotFoundError: 404,

    # 409 Conflict
    ConflictError: 409,
    DuplicateRoleError: 409,
    DuplicatePermissionError: 409,

    # 500 Internal Server Error
    ResolutionFailure: 500,
    DatabaseError: 500,
    CacheError: 500,
    CacheConnectionError: 500,

    # Default for RBACError
    RBACError: 500,
}


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for exception.

    Subclasses not listed explicitly inherit the status of their nearest
    mapped base class.
    """
    for klass in type(exception).__mro__:
        if klass in HTTP_STATUS_MAP:
            return HTTP_STATUS_MAP[klass]
    return 500
