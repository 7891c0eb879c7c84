"""Customer entity."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import uuid4

from ..enums import CustomerSource
from ..value_objects import utcnow


@dataclass
class Customer:
    """Canonical buyer record, shared by guest and registered checkouts."""

    email: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    user_id: Optional[str] = None
    source: CustomerSource = CustomerSource.GUEST_CHECKOUT
    last_order_at: Optional[datetime] = None
    created_by: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        if self.email:
            self.email = self.email.strip().lower()

    def merge_contact(
        self,
        full_name: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
    ) -> bool:
        """Fill in contact details the record is missing. Returns True if changed."""
        changed = False
        if full_name and not self.full_name:
            self.full_name = full_name
            changed = True
        if phone and not self.phone:
            self.phone = phone
            changed = True
        if email and not self.email:
            self.email = email.strip().lower()
            changed = True
        if changed:
            self.updated_at = utcnow()
        return changed

    def link_user(self, user_id: str) -> bool:
        """Attach an authenticated account, promoting a guest to registered."""
        if self.user_id:
            return False
        self.user_id = user_id
        self.source = CustomerSource.REGISTERED
        self.updated_at = utcnow()
        return True

    def record_order(self, at: Optional[datetime] = None) -> None:
        self.last_order_at = at or utcnow()
        self.updated_at = self.last_order_at
