"""FastAPI dependency factories enforcing permissions on routes.

The application provides the resolver by overriding ``get_permission_resolver``
and sets ``request.state.user_id`` in its authentication layer.

Usage:
    @router.get("/shipments/{id}")
    async def get_shipment(
        user_id: str = Depends(require_permission_or_ownership("shipments", "read", "shipment"))
    ):
        ...
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import Depends, HTTPException, Request, status

from ..features.permissions.services import PermissionResolver
from ..features.permissions.services.permission_resolver import PermissionRef, as_pair

logger = logging.getLogger(__name__)


def get_permission_resolver() -> PermissionResolver:
    """Get the resolver instance.

    Must be overridden by the application, typically with
    ``app.dependency_overrides[get_permission_resolver] = lambda: module.resolver``.
    """
    raise NotImplementedError(
        "get_permission_resolver must be provided by the application"
    )


def get_current_user_id(request: Request) -> Optional[str]:
    """Authenticated user id placed on the request by the auth layer."""
    user_id = getattr(request.state, "user_id", None)
    return str(user_id) if user_id else None


def require_authentication(request: Request) -> str:
    """Require authenticated user, raise 401 if not authenticated."""
    user_id = get_current_user_id(request)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"}
        )
    return user_id


def build_resolution_context(request: Request, user_id: str) -> Dict[str, Any]:
    """Path parameters plus ``own_resource`` (the ``id`` parameter is the caller)."""
    context: Dict[str, Any] = {key: str(value) for key, value in request.path_params.items()}
    context["own_resource"] = request.path_params.get("id") == user_id
    return context


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def require_permission(resource: str, action: str):
    """Create a dependency that requires (resource, action)."""

    async def _check_permission(
        request: Request,
        resolver: PermissionResolver = Depends(get_permission_resolver)
    ) -> str:
        user_id = require_authentication(request)
        context = build_resolution_context(request, user_id)
        if await resolver.resolve(user_id, resource, action, context):
            return user_id
        logger.warning(f"Permission denied: {user_id} attempted to {action} {resource} ({request.url.path})")
        raise _forbidden("Insufficient permissions")

    return _check_permission


def require_any_permission(permissions: List[PermissionRef]):
    """Create a dependency that requires any of the permissions."""
    pairs = [as_pair(ref) for ref in permissions]

    async def _check_any_permission(
        request: Request,
        resolver: PermissionResolver = Depends(get_permission_resolver)
    ) -> str:
        user_id = require_authentication(request)
        context = build_resolution_context(request, user_id)
        if await resolver.has_any(user_id, pairs, context):
            return user_id
        logger.warning(f"Permission denied: {user_id} lacks all of {pairs} ({request.url.path})")
        raise _forbidden("Insufficient permissions")

    return _check_any_permission


def require_all_permissions(permissions: List[PermissionRef]):
    """Create a dependency that requires every permission."""
    pairs = [as_pair(ref) for ref in permissions]

    async def _check_all_permissions(
        request: Request,
        resolver: PermissionResolver = Depends(get_permission_resolver)
    ) -> str:
        user_id = require_authentication(request)
        context = build_resolution_context(request, user_id)
        if await resolver.has_all(user_id, pairs, context):
            return user_id
        logger.warning(f"Permission denied: {user_id} lacks one of {pairs} ({request.url.path})")
        raise _forbidden("Insufficient permissions")

    return _check_all_permissions


def require_ownership(resource_type: str, param_name: str = "id"):
    """Create a dependency that requires the caller to own the resource."""

    async def _check_ownership(
        request: Request,
        resolver: PermissionResolver = Depends(get_permission_resolver)
    ) -> str:
        user_id = require_authentication(request)
        resource_id = request.path_params.get(param_name)
        if not resource_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Resource ID parameter '{param_name}' is required"
            )
        if await resolver.owns_resource(user_id, resource_type, str(resource_id)):
            return user_id
        logger.warning(f"Ownership check failed: {user_id} attempted to access {resource_type} {resource_id}")
        raise _forbidden("You do not have access to this resource")

    return _check_ownership


def require_permission_or_ownership(resource: str, action: str, resource_type: str, param_name: str = "id"):
    """Create a dependency that accepts either the permission or ownership."""

    async def _check_permission_or_ownership(
        request: Request,
        resolver: PermissionResolver = Depends(get_permission_resolver)
    ) -> str:
        user_id = require_authentication(request)
        resource_id = request.path_params.get(param_name)
        if not resource_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Resource ID parameter '{param_name}' is required"
            )
        context = build_resolution_context(request, user_id)
        if await resolver.resolve_or_owns(user_id, resource, action, resource_type, str(resource_id), context):
            return user_id
        logger.warning(f"Access denied: {user_id} attempted to access {resource_type} {resource_id}")
        raise _forbidden("Insufficient permissions")

    return _check_permission_or_ownership
