"""Permission feature entities and protocols."""

from .assignment import EffectiveAssignment, RolePermission, UserRoleAssignment
from .constraints import Scalar, ScalarMap, is_scalar, matches, normalize_scalar_map, scalars_equal
from .permission import Permission, PermissionCode
from .protocols import (
    OwnershipStrategy,
    PermissionRepository,
    RolePermissionRepository,
    RoleRepository,
    UserDirectory,
    UserRoleRepository,
)
from .role import Role, RoleNode
from .user import UserRecord

__all__ = [
    "EffectiveAssignment",
    "RolePermission",
    "UserRoleAssignment",
    "Scalar",
    "ScalarMap",
    "is_scalar",
    "matches",
    "normalize_scalar_map",
    "scalars_equal",
    "Permission",
    "PermissionCode",
    "OwnershipStrategy",
    "PermissionRepository",
    "RolePermissionRepository",
    "RoleRepository",
    "UserDirectory",
    "UserRoleRepository",
    "Role",
    "RoleNode",
    "UserRecord",
]
