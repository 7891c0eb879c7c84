"""Customer enums."""
from enum import Enum


class CustomerSource(str, Enum):
    """How a customer record came to exist."""

    GUEST_CHECKOUT = "guest_checkout"
    REGISTERED = "registered"
    MANUAL = "manual"
    ADMIN_MANUAL_ORDER = "admin_manual_order"
    BACKFILL = "backfill"
