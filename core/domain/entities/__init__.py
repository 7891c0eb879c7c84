"""Domain entities."""
from .customer import Customer
from .discount import (
    Discount,
    DiscountRule,
    FixedAmountRule,
    FreeShippingRule,
    PercentageRule,
)
from .order import DealSnapshot, Order, OrderItem
from .product import DealProduct, Product
from .transaction import Transaction

__all__ = [
    "Customer",
    "DealProduct",
    "DealSnapshot",
    "Discount",
    "DiscountRule",
    "FixedAmountRule",
    "FreeShippingRule",
    "Order",
    "OrderItem",
    "PercentageRule",
    "Product",
    "Transaction",
]
