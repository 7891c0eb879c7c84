"""Domain events published on the event bus."""
from .base import DomainEvent
from .order_events import (
    OrderCancelledEvent,
    OrderCreatedEvent,
    OrderStatusChangedEvent,
    PaymentStatusChangedEvent,
)

__all__ = [
    "DomainEvent",
    "OrderCancelledEvent",
    "OrderCreatedEvent",
    "OrderStatusChangedEvent",
    "PaymentStatusChangedEvent",
]
