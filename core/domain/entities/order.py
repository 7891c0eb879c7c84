"""
Order aggregate root.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..enums import OrderStatus, PaymentStatus
from ..events.base import DomainEvent
from ..events.order_events import (
    OrderCancelledEvent,
    OrderCreatedEvent,
    OrderStatusChangedEvent,
    PaymentStatusChangedEvent,
)
from ..exceptions import InvalidStatusTransition, InvalidTotal
from ..value_objects import ShippingAddress, round2, utcnow

PAYMENT_TRANSITIONS: Dict[PaymentStatus, frozenset] = {
    PaymentStatus.PENDING: frozenset(
        {
            PaymentStatus.PAID,
            PaymentStatus.FAILED,
            PaymentStatus.REFUNDED,
            PaymentStatus.CANCELLED,
        }
    ),
    PaymentStatus.PAID: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.FAILED: frozenset(),
    PaymentStatus.CANCELLED: frozenset(),
    PaymentStatus.REFUNDED: frozenset(),
}


@dataclass(frozen=True)
class DealSnapshot:
    """Deal pricing as it was when the order was placed."""

    deal_product_id: Optional[str]
    product_name: str
    unit_price: Decimal
    deal_id: Optional[str] = None
    product_description: Optional[str] = None
    image: Optional[str] = None
    original_price: Optional[Decimal] = None
    discount_percentage: Optional[Decimal] = None
    source: str = "deal_product"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "deal_product_id": self.deal_product_id,
            "deal_id": self.deal_id,
            "product_name": self.product_name,
            "product_description": self.product_description,
            "image": self.image,
            "unit_price": str(self.unit_price),
            "original_price": (
                str(self.original_price) if self.original_price is not None else None
            ),
            "discount_percentage": (
                str(self.discount_percentage)
                if self.discount_percentage is not None
                else None
            ),
        }


@dataclass
class OrderItem:
    """Line item. ``product_id`` is None for non-catalog (deal) items."""

    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    product_id: Optional[str] = None
    deal_product_id: Optional[str] = None
    variant_options: Dict[str, Any] = field(default_factory=dict)
    deal_snapshot: Optional[DealSnapshot] = None
    id: str = field(default_factory=lambda: str(uuid4()))

    @property
    def is_catalog_item(self) -> bool:
        return self.product_id is not None


@dataclass
class Order:
    """
    Order aggregate root.

    Holds the monetary breakdown, the fulfilment/payment state machine and
    the events recorded while it changes. Invariant:
    ``total == subtotal - discount + tax + shipping_fee``.
    """

    order_number: str
    subtotal: Decimal
    total: Decimal
    shipping_address: ShippingAddress
    items: List[OrderItem] = field(default_factory=list)
    discount: Decimal = Decimal("0.00")
    tax: Decimal = Decimal("0.00")
    shipping_fee: Decimal = Decimal("0.00")
    discount_code: Optional[str] = None
    customer_id: Optional[str] = None
    user_id: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    notes: Optional[str] = None
    tracking_number: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    # Event collection
    _domain_events: List[DomainEvent] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def create(cls, customer_email: Optional[str] = None, currency: str = "GHS", **fields) -> "Order":
        """Create a new order and record OrderCreatedEvent."""
        order = cls(**fields)
        order._record_event(
            OrderCreatedEvent(
                order_id=order.id,
                order_number=order.order_number,
                total=order.total,
                currency=currency,
                payment_method=order.payment_method,
                payment_reference=order.payment_reference,
                customer_email=customer_email,
                user_id=order.user_id,
            )
        )
        return order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        return bool(user_id) and self.user_id == user_id

    def totals_consistent(self, tolerance: Decimal = Decimal("0.01")) -> bool:
        expected = self.subtotal - self.discount + self.tax + self.shipping_fee
        return abs(expected - self.total) <= tolerance

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def update_status(
        self,
        new_status: OrderStatus,
        tracking_number: Optional[str] = None,
        notes: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> bool:
        """
        Move the order to ``new_status``.

        Delivered and cancelled orders are final; re-applying the current
        status only updates tracking number and notes.

        Returns:
            True if the status changed
        """
        if self.status.is_terminal and new_status != self.status:
            raise InvalidStatusTransition(
                f"Cannot change status of a {self.status.value} order to {new_status.value}"
            )

        if tracking_number is not None:
            self.tracking_number = tracking_number
        if notes is not None:
            self.notes = notes

        previous = self.status
        self.status = new_status
        self.updated_at = utcnow()
        if previous == new_status:
            return False

        self._record_event(
            OrderStatusChangedEvent(
                order_id=self.id,
                order_number=self.order_number,
                previous_status=previous.value,
                new_status=new_status.value,
                reason=reason,
            )
        )
        return True

    def update_payment_status(self, new_status: PaymentStatus) -> bool:
        """
        Apply an explicit payment status change.

        Returns:
            True if the payment status changed
        """
        if new_status == self.payment_status:
            return False
        if new_status not in PAYMENT_TRANSITIONS[self.payment_status]:
            raise InvalidStatusTransition(
                f"Cannot change payment status from {self.payment_status.value} to {new_status.value}"
            )
        self._set_payment_status(new_status)
        return True

    def fail_payment(self) -> bool:
        """Void the payment of a cancelled order (refunds are left alone)."""
        if self.payment_status in (PaymentStatus.FAILED, PaymentStatus.REFUNDED):
            return False
        self._set_payment_status(PaymentStatus.FAILED)
        return True

    def cancel(self, cancelled_by: str, reason: Optional[str] = None, fail_payment: bool = False) -> None:
        """Cancel the order, optionally voiding its payment."""
        if self.status.is_terminal:
            raise InvalidStatusTransition(f"Order is already {self.status.value}")

        previous = self.status
        self.status = OrderStatus.CANCELLED
        if reason:
            self.notes = reason
        self.updated_at = utcnow()

        self._record_event(
            OrderStatusChangedEvent(
                order_id=self.id,
                order_number=self.order_number,
                previous_status=previous.value,
                new_status=OrderStatus.CANCELLED.value,
                reason=reason,
            )
        )
        payment_failed = self.fail_payment() if fail_payment else False
        self._record_event(
            OrderCancelledEvent(
                order_id=self.id,
                order_number=self.order_number,
                cancelled_by=cancelled_by,
                reason=reason,
                payment_failed=payment_failed,
            )
        )

    def update_details(
        self, shipping_fee: Optional[Decimal] = None, notes: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Edit shipping fee and/or notes, recomputing the total.

        Returns:
            Mapping of changed field -> new value
        """
        changes: Dict[str, Any] = {}
        if shipping_fee is not None and round2(shipping_fee) != self.shipping_fee:
            new_fee = round2(shipping_fee)
            new_total = round2(max(Decimal("0"), self.subtotal - self.discount) + self.tax + new_fee)
            if new_total <= 0:
                raise InvalidTotal(new_total)
            self.shipping_fee = new_fee
            self.total = new_total
            changes["shipping_fee"] = new_fee
            changes["total"] = new_total
        if notes is not None and notes != self.notes:
            self.notes = notes
            changes["notes"] = notes
        if changes:
            self.updated_at = utcnow()
        return changes

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def pull_events(self) -> List[DomainEvent]:
        """Return and clear the recorded events."""
        events, self._domain_events = self._domain_events, []
        return events

    def _set_payment_status(self, new_status: PaymentStatus) -> None:
        previous = self.payment_status
        self.payment_status = new_status
        self.updated_at = utcnow()
        self._record_event(
            PaymentStatusChangedEvent(
                order_id=self.id,
                order_number=self.order_number,
                previous_status=previous.value,
                new_status=new_status.value,
            )
        )

    def _record_event(self, event: DomainEvent) -> None:
        self._domain_events.append(event)
