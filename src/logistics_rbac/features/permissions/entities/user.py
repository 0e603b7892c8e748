"""Consumed view of a user record owned by the identity service."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class UserRecord:
    """The fields authorization needs from an external user."""

    id: str
    system_role: Optional[str] = None

    def has_designation(self, designation: str) -> bool:
        return self.system_role == designation
