"""logistics-rbac - hierarchical role-based access control for logistics services.

Roles form a forest, permissions are (resource, action) pairs with optional
attribute requirements, and a cached resolver answers whether a user may
perform an action in a given context.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .config import RBACSettings, get_settings

from .core.exceptions import (
    RBACError,
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
    DatabaseError,
    CacheError,
    CacheConnectionError,
    get_http_status_code,
    create_error_response,
)

from .features.permissions import (
    EffectiveAssignment,
    Permission,
    PermissionCode,
    Role,
    RoleNode,
    RolePermission,
    UserRecord,
    UserRoleAssignment,
    AssignmentService,
    OwnershipRegistry,
    PermissionCatalogService,
    PermissionResolver,
    RBACSeeder,
    RoleHierarchyService,
    SeedReport,
)

from .features.cache import Cache, MemoryAdapter, RedisAdapter, ResolutionCache

from .module import RBACModule

__all__ = [
    "__version__",
    "RBACSettings",
    "get_settings",
    "RBACError",
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
    "get_http_status_code",
    "create_error_response",
    "EffectiveAssignment",
    "Permission",
    "PermissionCode",
    "Role",
    "RoleNode",
    "RolePermission",
    "UserRecord",
    "UserRoleAssignment",
    "AssignmentService",
    "OwnershipRegistry",
    "PermissionCatalogService",
    "PermissionResolver",
    "RBACSeeder",
    "RoleHierarchyService",
    "SeedReport",
    "Cache",
    "MemoryAdapter",
    "RedisAdapter",
    "ResolutionCache",
    "RBACModule",
]
