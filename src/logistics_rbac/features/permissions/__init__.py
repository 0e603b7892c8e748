"""Permissions feature: hierarchical roles, catalog, assignments and resolution."""

from .entities import (
    EffectiveAssignment,
    Permission,
    PermissionCode,
    Role,
    RoleNode,
    RolePermission,
    UserRecord,
    UserRoleAssignment,
)
from .services import (
    AssignmentService,
    DecisionInvalidator,
    OwnershipRegistry,
    PermissionCatalogService,
    PermissionResolver,
    RBACSeeder,
    RoleHierarchyService,
    SeedReport,
)

__all__ = [
    "EffectiveAssignment",
    "Permission",
    "PermissionCode",
    "Role",
    "RoleNode",
    "RolePermission",
    "UserRecord",
    "UserRoleAssignment",
    "AssignmentService",
    "DecisionInvalidator",
    "OwnershipRegistry",
    "PermissionCatalogService",
    "PermissionResolver",
    "RBACSeeder",
    "RoleHierarchyService",
    "SeedReport",
]
