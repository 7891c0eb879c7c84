"""
Order Domain Events.

Events that occur during the order lifecycle.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .base import DomainEvent


@dataclass
class OrderCreatedEvent(DomainEvent):
    """
    Order was created (checkout or payment webhook).

    Consumers: admin alert subscriber
    """

    order_id: str = ""
    order_number: str = ""
    total: Decimal = Decimal("0")
    currency: str = "GHS"
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    customer_email: Optional[str] = None

    def __post_init__(self):
        """Set aggregate_id to order_id."""
        if not self.aggregate_id and self.order_id:
            object.__setattr__(self, 'aggregate_id', self.order_id)
        super().__post_init__()


@dataclass
class OrderStatusChangedEvent(DomainEvent):
    """Fulfilment status changed (pending -> shipped, etc.)."""

    order_id: str = ""
    order_number: str = ""
    previous_status: str = ""
    new_status: str = ""
    reason: Optional[str] = None

    def __post_init__(self):
        """Set aggregate_id to order_id."""
        if not self.aggregate_id and self.order_id:
            object.__setattr__(self, 'aggregate_id', self.order_id)
        super().__post_init__()


@dataclass
class PaymentStatusChangedEvent(DomainEvent):
    """Payment status changed (pending -> paid, etc.)."""

    order_id: str = ""
    order_number: str = ""
    previous_status: str = ""
    new_status: str = ""

    def __post_init__(self):
        if not self.aggregate_id and self.order_id:
            object.__setattr__(self, 'aggregate_id', self.order_id)
        super().__post_init__()


@dataclass
class OrderCancelledEvent(DomainEvent):
    """
    Order was cancelled by its owner or an admin.

    ``payment_failed`` tells consumers whether the payment was voided too.
    """

    order_id: str = ""
    order_number: str = ""
    cancelled_by: str = ""
    reason: Optional[str] = None
    payment_failed: bool = False

    def __post_init__(self):
        if not self.aggregate_id and self.order_id:
            object.__setattr__(self, 'aggregate_id', self.order_id)
        super().__post_init__()
