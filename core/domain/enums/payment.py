"""Transaction enums."""
from enum import Enum
from typing import Optional


class TransactionStatus(str, Enum):
    """Gateway-level status of a payment attempt."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class PaymentProvider(str, Enum):
    """Who settles the payment."""

    PAYSTACK = "paystack"
    CASH = "cash"
    OTHER = "other"

    @classmethod
    def from_payment_method(cls, payment_method: Optional[str]) -> "PaymentProvider":
        """Map a checkout payment method to its provider."""
        if payment_method == "paystack":
            return cls.PAYSTACK
        if payment_method == "cash_on_delivery":
            return cls.CASH
        return cls.OTHER
