"""
Transaction entity.

One record per payment attempt, keyed by its transaction reference.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import uuid4

from ..enums import PaymentProvider, PaymentStatus, TransactionStatus
from ..value_objects import utcnow

# refunded intentionally absent: a refund does not change how the charge itself ended.
_STATUS_FOR_PAYMENT = {
    PaymentStatus.PENDING: TransactionStatus.PENDING,
    PaymentStatus.PAID: TransactionStatus.SUCCESS,
    PaymentStatus.FAILED: TransactionStatus.FAILED,
    PaymentStatus.CANCELLED: TransactionStatus.FAILED,
}


def transaction_status_for(payment_status: PaymentStatus) -> Optional[TransactionStatus]:
    """Transaction status that mirrors an order payment status (None = unchanged)."""
    return _STATUS_FOR_PAYMENT.get(payment_status)


@dataclass
class Transaction:
    """Payment attempt linked (eventually) to exactly one order."""

    transaction_reference: str
    amount: Decimal
    currency: str = "GHS"
    order_id: Optional[str] = None
    user_id: Optional[str] = None
    payment_method: Optional[str] = None
    payment_provider: PaymentProvider = PaymentProvider.OTHER
    status: TransactionStatus = TransactionStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    customer_email: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    initiated_at: datetime = field(default_factory=utcnow)
    paid_at: Optional[datetime] = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def link_order(self, order_id: str) -> bool:
        """
        Attach the order this payment paid for.

        The link is written once; a transaction already linked to another
        order keeps its original link.

        Returns:
            True if the link was set (or already pointed at ``order_id``)
        """
        if self.order_id and self.order_id != order_id:
            return False
        self.order_id = order_id
        self.updated_at = utcnow()
        return True

    def mirror_payment_status(
        self, payment_status: PaymentStatus, now: Optional[datetime] = None
    ) -> None:
        """Sync status fields with an order payment status."""
        now = now or utcnow()
        self.payment_status = payment_status
        status = transaction_status_for(payment_status)
        if status is not None:
            self.status = status
        if payment_status == PaymentStatus.PAID and self.paid_at is None:
            self.paid_at = now
        self.updated_at = now
