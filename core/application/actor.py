"""Authenticated caller, as seen by the application layer."""
from dataclasses import dataclass
from typing import FrozenSet, Optional

DEFAULT_ADMIN_ROLES = frozenset({"admin", "superadmin"})


@dataclass(frozen=True)
class Actor:
    """User behind a request (decoded from the bearer token)."""

    id: str
    email: Optional[str] = None
    role: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    admin_roles: FrozenSet[str] = DEFAULT_ADMIN_ROLES

    @property
    def is_admin(self) -> bool:
        return (self.role or "").lower() in self.admin_roles
