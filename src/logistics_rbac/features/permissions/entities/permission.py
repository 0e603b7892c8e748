"""Permission domain entity and code value object."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from ....core.exceptions import ValidationError
from .constraints import ScalarMap, matches, normalize_scalar_map
from .role import new_id, utc_now

_SEGMENT = re.compile(r"^[a-z0-9_.-]+$")


@dataclass(frozen=True)
class PermissionCode:
    """Immutable ``resource:action`` identifier."""

    resource: str
    action: str

    def __post_init__(self):
        for part, value in (("resource", self.resource), ("action", self.action)):
            if not value or not _SEGMENT.match(value):
                raise ValidationError(
                    f"Permission {part} must be lowercase alphanumeric (with _ . -): {value!r}"
                )

    @classmethod
    def parse(cls, code: str) -> "PermissionCode":
        """Parse ``resource:action``."""
        resource, sep, action = (code or "").partition(":")
        if not sep:
            raise ValidationError(f"Permission code must look like 'resource:action': {code!r}")
        return cls(resource.strip(), action.strip())

    def as_tuple(self) -> Tuple[str, str]:
        return self.resource, self.action

    def __str__(self) -> str:
        return f"{self.resource}:{self.action}"


@dataclass
class Permission:
    """A grantable capability identified by (resource, action)."""

    resource: str
    action: str
    id: str = field(default_factory=new_id)
    attributes: ScalarMap = field(default_factory=dict)
    description: Optional[str] = None
    is_system: bool = False
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        self.resource = (self.resource or "").strip().lower()
        self.action = (self.action or "").strip().lower()
        PermissionCode(self.resource, self.action)
        self.attributes = normalize_scalar_map(self.attributes, "attributes")
        if self.description is None:
            self.description = f"Permission to {self.action} {self.resource}"

    @property
    def code(self) -> str:
        return f"{self.resource}:{self.action}"

    def matches_context(self, context: Dict[str, Any]) -> bool:
        """Every attribute must be present in the context with an equal value."""
        return matches(self.attributes, context)
