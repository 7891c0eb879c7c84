"""Domain enums."""
from .customer import CustomerSource
from .discount import DiscountAppliesTo, DiscountType
from .order_status import OrderStatus, PaymentStatus
from .payment import PaymentProvider, TransactionStatus

__all__ = [
    "CustomerSource",
    "DiscountAppliesTo",
    "DiscountType",
    "OrderStatus",
    "PaymentProvider",
    "PaymentStatus",
    "TransactionStatus",
]
