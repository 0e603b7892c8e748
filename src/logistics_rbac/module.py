"""Wiring of settings, storage, cache and services.

``RBACModule`` owns every long-lived resource (database pool, cache
connection) and exposes the administrative services and the resolver built
on top of them.
"""

from typing import Iterable, Optional
import logging

from .config.settings import RBACSettings, get_settings
from .database.connection import DatabaseManager
from .features.cache import Cache, MemoryAdapter, RedisAdapter, ResolutionCache
from .features.permissions.entities import (
    PermissionRepository,
    RolePermissionRepository,
    RoleRepository,
    UserDirectory,
    UserRecord,
    UserRoleRepository,
)
from .features.permissions.repositories import (
    AsyncPGPermissionRepository,
    AsyncPGRolePermissionRepository,
    AsyncPGRoleRepository,
    AsyncPGUserDirectory,
    AsyncPGUserRoleRepository,
    InMemoryRBACStore,
)
from .features.permissions.services import (
    AssignmentService,
    DecisionInvalidator,
    OwnershipRegistry,
    PermissionCatalogService,
    PermissionResolver,
    RBACSeeder,
    RoleHierarchyService,
)

logger = logging.getLogger(__name__)


def build_cache(settings: RBACSettings) -> Cache:
    """Create the cache adapter selected by ``cache_backend``."""
    if settings.cache_backend == "redis":
        return RedisAdapter(
            settings.redis_url,
            max_connections=settings.redis_max_connections,
            socket_timeout=settings.redis_socket_timeout,
        )
    return MemoryAdapter(max_size=settings.memory_cache_max_size)


class RBACModule:
    """Composition root for the authorization core."""

    def __init__(
        self,
        role_repo: RoleRepository,
        permission_repo: PermissionRepository,
        role_permission_repo: RolePermissionRepository,
        user_role_repo: UserRoleRepository,
        user_directory: UserDirectory,
        cache: Optional[Cache] = None,
        settings: Optional[RBACSettings] = None,
        ownership: Optional[OwnershipRegistry] = None,
        db: Optional[DatabaseManager] = None
    ):
        self.settings = settings or get_settings()
        self.db = db
        self.cache_backend = cache
        self.decision_cache = (
            ResolutionCache(cache, ttl_seconds=self.settings.cache_ttl_seconds, prefix=self.settings.cache_key_prefix)
            if cache is not None else None
        )
        self.ownership = ownership or OwnershipRegistry()

        invalidator = DecisionInvalidator(role_repo, role_permission_repo, user_role_repo, self.decision_cache)
        self.roles = RoleHierarchyService(role_repo, role_permission_repo, user_role_repo, invalidator)
        self.catalog = PermissionCatalogService(permission_repo, role_permission_repo, invalidator)
        self.assignments = AssignmentService(
            role_repo, permission_repo, role_permission_repo, user_role_repo, invalidator
        )
        self.resolver = PermissionResolver(
            role_repo,
            permission_repo,
            role_permission_repo,
            user_role_repo,
            user_directory,
            cache=self.decision_cache,
            ownership=self.ownership,
            super_admin_designation=self.settings.super_admin_designation,
            timeout_seconds=self.settings.resolution_timeout_seconds,
        )
        self.seeder = RBACSeeder(self.roles, self.catalog, self.assignments)
        self.store: Optional[InMemoryRBACStore] = None
        self._connected = False

    @classmethod
    def in_memory(
        cls,
        users: Optional[Iterable[UserRecord]] = None,
        settings: Optional[RBACSettings] = None,
        cache: Optional[Cache] = None
    ) -> "RBACModule":
        """Module over in-memory repositories and, by default, a memory cache."""
        settings = settings or RBACSettings(cache_backend="memory")
        store = InMemoryRBACStore(users)
        module = cls(
            store.roles,
            store.permissions,
            store.role_permissions,
            store.user_roles,
            store.users,
            cache=cache if cache is not None else MemoryAdapter(max_size=settings.memory_cache_max_size),
            settings=settings,
        )
        module.store = store
        return module

    @classmethod
    def from_settings(
        cls,
        settings: Optional[RBACSettings] = None,
        user_directory: Optional[UserDirectory] = None
    ) -> "RBACModule":
        """Module over PostgreSQL (asyncpg) and the configured cache backend."""
        settings = settings or get_settings()
        db = DatabaseManager(
            settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )
        return cls(
            AsyncPGRoleRepository(db),
            AsyncPGPermissionRepository(db),
            AsyncPGRolePermissionRepository(db),
            AsyncPGUserRoleRepository(db),
            user_directory or AsyncPGUserDirectory(db),
            cache=build_cache(settings),
            settings=settings,
            db=db,
        )

    async def connect(self) -> None:
        """Open the database pool and the cache connection."""
        if self._connected:
            return
        if self.db is not None:
            await self.db.create_pool()
        if self.cache_backend is not None:
            await self.cache_backend.connect()
        self._connected = True
        logger.info("RBAC module connected")

    async def close(self) -> None:
        """Release the cache connection and the database pool."""
        if self.cache_backend is not None:
            await self.cache_backend.disconnect()
        if self.db is not None:
            await self.db.close_pool()
        self._connected = False
        logger.info("RBAC module closed")

    async def health_check(self) -> dict:
        return {
            "database": await self.db.health_check() if self.db is not None else True,
            "cache": await self.cache_backend.health_check() if self.cache_backend is not None else True,
        }

    async def __aenter__(self) -> "RBACModule":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
