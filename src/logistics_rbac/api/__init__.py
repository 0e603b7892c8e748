"""FastAPI integration: request guards backed by the permission resolver."""

from .dependencies import (
    build_resolution_context,
    get_current_user_id,
    get_permission_resolver,
    require_all_permissions,
    require_any_permission,
    require_authentication,
    require_ownership,
    require_permission,
    require_permission_or_ownership,
)
from .errors import register_exception_handlers

__all__ = [
    "build_resolution_context",
    "get_current_user_id",
    "get_permission_resolver",
    "require_all_permissions",
    "require_any_permission",
    "require_authentication",
    "require_ownership",
    "require_permission",
    "require_permission_or_ownership",
    "register_exception_handlers",
]
