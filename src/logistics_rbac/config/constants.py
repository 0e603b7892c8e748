"""Constants and default catalog data for logistics-rbac."""

from typing import Dict, Final, List, Optional, Tuple


class CacheKeys:
    """Cache key patterns for resolution decisions."""

    PERMISSION_DECISION: Final[str] = "{prefix}:{user_id}:{resource}:{action}"
    USER_DECISIONS: Final[str] = "{prefix}:{user_id}:"


class CacheTTL:
    """Cache TTL values in seconds."""

    PERMISSIONS_SHORT: Final[int] = 300      # 5 minutes


class CacheValues:
    """Serialized decision values stored in the cache."""

    GRANTED: Final[str] = "true"
    DENIED: Final[str] = "false"


class SystemRoles:
    """Designations carried on user records."""

    SUPER_ADMIN: Final[str] = "super_admin"


class OwnershipResources:
    """Resource types with built-in ownership strategies."""

    USER: Final[str] = "user"


# Default logistics catalog: resource -> actions
DEFAULT_RESOURCES: Final[Dict[str, List[str]]] = {
    "users": ["create", "read", "update", "delete", "list"],
    "roles": ["create", "read", "update", "delete", "list"],
    "permissions": ["create", "read", "update", "delete", "list"],
    "user_roles": ["create", "read", "update", "delete", "list"],
    "sessions": ["read", "revoke", "list"],
    "security_logs": ["read", "list"],
    "shipments": ["create", "read", "update", "delete", "list", "track"],
    "pickups": ["create", "read", "update", "delete", "list", "assign", "complete"],
    "deliveries": ["create", "read", "update", "delete", "list", "assign", "complete"],
    "payments": ["create", "read", "update", "delete", "list", "process"],
    "reports": ["generate", "read", "export", "list"],
}

# name, description, parent name
DEFAULT_ROLES: Final[List[Tuple[str, str, Optional[str]]]] = [
    ("admin", "Administrator with full system access", None),
    ("manager", "Manager with access to operations and reporting", "admin"),
    ("courier", "Courier responsible for pickups", "manager"),
    ("driver", "Driver responsible for deliveries", "manager"),
    ("warehouse", "Warehouse staff responsible for shipment processing", "manager"),
    ("collector", "Collector responsible for payment collection", "manager"),
    ("customer", "Customer with limited access to own shipments", None),
]

# Role name -> resource -> actions. "*" grants the whole catalog.
DEFAULT_ROLE_GRANTS: Final[Dict[str, Dict[str, List[str]]]] = {
    "admin": {"*": []},
    "manager": {
        "users": ["read", "update", "list"],
        "roles": ["read", "list"],
        "permissions": ["read", "list"],
        "user_roles": ["read", "list"],
        "sessions": ["read", "revoke", "list"],
        "security_logs": ["read", "list"],
        "shipments": ["create", "read", "update", "delete", "list", "track"],
        "pickups": ["create", "read", "update", "delete", "list", "assign", "complete"],
        "deliveries": ["create", "read", "update", "delete", "list", "assign", "complete"],
        "payments": ["create", "read", "update", "delete", "list", "process"],
        "reports": ["generate", "read", "export", "list"],
    },
    "courier": {
        "users": ["read"],
        "shipments": ["read", "update", "list", "track"],
        "pickups": ["read", "update", "list", "complete"],
        "sessions": ["read"],
        "security_logs": ["read"],
    },
    "driver": {
        "users": ["read"],
        "shipments": ["read", "update", "list", "track"],
        "deliveries": ["read", "update", "list", "complete"],
        "sessions": ["read"],
        "security_logs": ["read"],
    },
    "warehouse": {
        "users": ["read"],
        "shipments": ["read", "update", "list", "track"],
        "pickups": ["read", "list"],
        "deliveries": ["read", "list"],
        "sessions": ["read"],
        "security_logs": ["read"],
    },
    "collector": {
        "users": ["read"],
        "shipments": ["read", "list", "track"],
        "payments": ["read", "update", "list", "process"],
        "sessions": ["read"],
        "security_logs": ["read"],
    },
    "customer": {
        "shipments": ["create", "read", "list", "track"],
        "pickups": ["create", "read", "list"],
        "payments": ["read", "list"],
        "sessions": ["read"],
    },
}
