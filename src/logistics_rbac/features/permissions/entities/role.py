"""Role domain entity.

Roles form a forest through ``parent_id``. ``level`` is the depth of the role
in that forest and is always ``parent.level + 1`` (roots are level 0).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from ....core.exceptions import ValidationError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid4().hex


@dataclass
class Role:
    """Domain entity representing a named role in the hierarchy."""

    name: str
    id: str = field(default_factory=new_id)
    parent_id: Optional[str] = None
    level: int = 0
    is_system: bool = False
    description: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        """Validate role name and level."""
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError("Role name cannot be empty")
        if len(self.name) > 100:
            raise ValidationError(f"Role name cannot exceed 100 characters, got: {len(self.name)}")
        if self.level < 0:
            raise ValidationError(f"Role level cannot be negative: {self.level}")

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


@dataclass
class RoleNode:
    """A role with its children attached, as returned by the hierarchy view."""

    role: Role
    children: List["RoleNode"] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.role.id,
            "name": self.role.name,
            "level": self.role.level,
            "is_system": self.role.is_system,
            "description": self.role.description,
            "children": [child.to_dict() for child in self.children],
        }
