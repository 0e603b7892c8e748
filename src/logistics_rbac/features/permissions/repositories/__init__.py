"""Permission repositories: asyncpg-backed and in-memory implementations."""

from .assignment_repository import AsyncPGRolePermissionRepository, AsyncPGUserRoleRepository
from .memory_store import (
    InMemoryPermissionRepository,
    InMemoryRBACStore,
    InMemoryRolePermissionRepository,
    InMemoryRoleRepository,
    InMemoryUserDirectory,
    InMemoryUserRoleRepository,
)
from .permission_repository import AsyncPGPermissionRepository
from .role_repository import AsyncPGRoleRepository
from .user_directory import AsyncPGUserDirectory

__all__ = [
    "AsyncPGRolePermissionRepository",
    "AsyncPGUserRoleRepository",
    "AsyncPGPermissionRepository",
    "AsyncPGRoleRepository",
    "AsyncPGUserDirectory",
    "InMemoryPermissionRepository",
    "InMemoryRBACStore",
    "InMemoryRolePermissionRepository",
    "InMemoryRoleRepository",
    "InMemoryUserDirectory",
    "InMemoryUserRoleRepository",
]
