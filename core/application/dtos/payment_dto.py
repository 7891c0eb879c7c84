"""Application DTOs for payments and gateway callbacks."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from core.domain.entities.transaction import Transaction
from core.domain.enums import PaymentProvider, PaymentStatus, TransactionStatus


class InitializePaymentRequest(BaseModel):
    email: str = Field(..., description="Payer email")
    amount: int = Field(..., gt=0, description="Amount in minor units (pesewas)")
    reference: str = Field(..., min_length=1, description="Checkout reference")
    callback_url: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(None, description="Carries checkout_data")


class VerifyPaymentRequest(BaseModel):
    reference: str = Field(..., min_length=1)


class LinkOrderRequest(BaseModel):
    transaction_reference: str = Field(..., min_length=1)
    order_id: str = Field(..., min_length=1)


class TransactionDTO(BaseModel):
    """Response DTO for a payment transaction."""

    id: str
    transaction_reference: str
    order_id: Optional[str] = None
    user_id: Optional[str] = None
    payment_method: Optional[str] = None
    payment_provider: PaymentProvider
    amount: Decimal
    currency: str
    status: TransactionStatus
    payment_status: PaymentStatus
    customer_email: Optional[str] = None
    paid_at: Optional[datetime] = None

    model_config = {"frozen": True}

    @classmethod
    def from_entity(cls, transaction: Transaction) -> "TransactionDTO":
        return cls(
            id=transaction.id,
            transaction_reference=transaction.transaction_reference,
            order_id=transaction.order_id,
            user_id=transaction.user_id,
            payment_method=transaction.payment_method,
            payment_provider=transaction.payment_provider,
            amount=transaction.amount,
            currency=transaction.currency,
            status=transaction.status,
            payment_status=transaction.payment_status,
            customer_email=transaction.customer_email,
            paid_at=transaction.paid_at,
        )


class VerifiedPaymentDTO(BaseModel):
    """Gateway verdict plus the transaction it was recorded on."""

    success: bool
    reference: str
    gateway_status: Optional[str] = None
    amount: Decimal
    currency: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    transaction: TransactionDTO

    model_config = {"frozen": True}


class WebhookAckDTO(BaseModel):
    """Acknowledgement returned to the gateway."""

    status: str = Field(..., description="created, already_processed or ignored")
    message: str
    order_id: Optional[str] = None
    order_number: Optional[str] = None

    model_config = {"frozen": True}
