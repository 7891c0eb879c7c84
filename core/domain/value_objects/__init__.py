"""Domain value objects."""

from .value_objects import (
    ExecutionID,
    ensure_utc,
    round2,
    to_decimal,
    utcnow,
)
from .order_number import OrderNumber
from .address import DeliveryOption, ShippingAddress

__all__ = [
    "DeliveryOption",
    "ExecutionID",
    "OrderNumber",
    "ShippingAddress",
    "ensure_utc",
    "round2",
    "to_decimal",
    "utcnow",
]
