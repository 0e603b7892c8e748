"""Permission feature services."""

from .assignment_service import AssignmentService
from .invalidation import DecisionInvalidator
from .ownership import OwnershipRegistry, RepositoryOwnershipStrategy, SelfOwnershipStrategy
from .permission_catalog_service import PermissionCatalogService
from .permission_resolver import PermissionResolver, as_pair
from .role_hierarchy_service import RoleHierarchyService
from .seeder import RBACSeeder, SeedReport

__all__ = [
    "AssignmentService",
    "DecisionInvalidator",
    "OwnershipRegistry",
    "RepositoryOwnershipStrategy",
    "SelfOwnershipStrategy",
    "PermissionCatalogService",
    "PermissionResolver",
    "as_pair",
    "RoleHierarchyService",
    "RBACSeeder",
    "SeedReport",
]
