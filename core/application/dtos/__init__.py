"""Application DTOs."""

from .discount_dto import ApplyDiscountRequest, DiscountApplicationDTO
from .order_dto import (
    CancelOrderRequest,
    CreateOrderRequest,
    OrderDTO,
    OrderItemDTO,
    OrderItemInput,
    OrderListDTO,
    TrackedOrderDTO,
    TrackOrderRequest,
    UpdateOrderDetailsRequest,
    UpdatePaymentStatusRequest,
    UpdateStatusRequest,
)
from .payment_dto import (
    InitializePaymentRequest,
    LinkOrderRequest,
    TransactionDTO,
    VerifiedPaymentDTO,
    VerifyPaymentRequest,
    WebhookAckDTO,
)

__all__ = [
    "ApplyDiscountRequest",
    "DiscountApplicationDTO",
    "CancelOrderRequest",
    "CreateOrderRequest",
    "OrderDTO",
    "OrderItemDTO",
    "OrderItemInput",
    "OrderListDTO",
    "TrackedOrderDTO",
    "TrackOrderRequest",
    "UpdateOrderDetailsRequest",
    "UpdatePaymentStatusRequest",
    "UpdateStatusRequest",
    "InitializePaymentRequest",
    "LinkOrderRequest",
    "TransactionDTO",
    "VerifiedPaymentDTO",
    "VerifyPaymentRequest",
    "WebhookAckDTO",
]
