"""Domain layer - pure domain models and interfaces."""

from .entities import Customer, Discount, Order, OrderItem, Transaction
from .repositories import OrderRepository
from .value_objects import ExecutionID, OrderNumber, ShippingAddress

__all__ = [
    "Customer",
    "Discount",
    "ExecutionID",
    "Order",
    "OrderItem",
    "OrderNumber",
    "OrderRepository",
    "ShippingAddress",
    "Transaction",
]
