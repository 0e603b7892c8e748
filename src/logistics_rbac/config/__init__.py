"""Configuration for logistics-rbac."""

from .constants import (
    CacheKeys,
    CacheTTL,
    CacheValues,
    SystemRoles,
    OwnershipResources,
    DEFAULT_RESOURCES,
    DEFAULT_ROLES,
    DEFAULT_ROLE_GRANTS,
)
from .logging_config import (
    setup_logging,
    LogVerbosity,
    LogFormat,
    LoggingConfig,
)
from .settings import RBACSettings, get_settings

__all__ = [
    "CacheKeys",
    "CacheTTL",
    "CacheValues",
    "SystemRoles",
    "OwnershipResources",
    "DEFAULT_RESOURCES",
    "DEFAULT_ROLES",
    "DEFAULT_ROLE_GRANTS",
    "setup_logging",
    "LogVerbosity",
    "LogFormat",
    "LoggingConfig",
    "RBACSettings",
    "get_settings",
]
