"""
User entity, roles and the authenticated identity.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from domain.common.exceptions import ForbiddenException


class Role(str, Enum):
    """Closed set of platform roles.

    Permissions are expressed as capability predicates on the variant rather
    than through a role hierarchy: an admin is not implicitly a creator.
    """
    USER = "user"
    CREATOR = "creator"
    ADMIN = "admin"

    def can_moderate_contests(self) -> bool:
        return self is Role.ADMIN

    def can_delete_contest(self, *, is_owner: bool) -> bool:
        if self is Role.ADMIN:
            return True
        return self is Role.CREATOR and is_owner


@dataclass(frozen=True)
class Identity:
    """Verified caller supplied by the authentication collaborator."""
    user_id: int
    role: Role
    email: Optional[str] = None

    def require_owner(self, owner_id: int, message: str = "Access denied") -> None:
        if self.user_id != owner_id:
            raise ForbiddenException(message, details={"user_id": self.user_id})


@dataclass
class User:
    """User entity"""

    id: Optional[int]
    name: str
    email: str
    role: Role = Role.USER
    photo_url: str = ""
    wins_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.email = self.email.strip().lower()
        if not isinstance(self.role, Role):
            self.role = Role(self.role)
