"""Role-permission and user-role assignment entities."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from .constraints import ScalarMap, matches, normalize_scalar_map
from .permission import Permission
from .role import new_id, utc_now


@dataclass
class RolePermission:
    """Links a role to a permission; ``granted=False`` is an explicit deny."""

    role_id: str
    permission_id: str
    constraints: ScalarMap = field(default_factory=dict)
    granted: bool = True
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        self.constraints = normalize_scalar_map(self.constraints, "constraints")


@dataclass
class UserRoleAssignment:
    """Links a user to a role, optionally scoped and time bounded."""

    user_id: str
    role_id: str
    scope: ScalarMap = field(default_factory=dict)
    expires_at: Optional[datetime] = None
    is_active: bool = True
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        self.scope = normalize_scalar_map(self.scope, "scope")

    def is_effective(self, now: Optional[datetime] = None) -> bool:
        """Active and not expired at ``now``."""
        if not self.is_active:
            return False
        if self.expires_at is None:
            return True
        return self.expires_at > (now or utc_now())

    def applies_to(self, context: Mapping[str, Any]) -> bool:
        """A scoped assignment only applies when the context carries its scope."""
        return matches(self.scope, context)


@dataclass(frozen=True)
class EffectiveAssignment:
    """A role-permission assignment as seen from a descendant role.

    ``distance`` is 0 for a direct assignment and grows by one per ancestor.
    """

    assignment: RolePermission
    permission: Permission
    source_role_id: str
    distance: int

    @property
    def granted(self) -> bool:
        return self.assignment.granted

    @property
    def inherited(self) -> bool:
        return self.distance > 0
