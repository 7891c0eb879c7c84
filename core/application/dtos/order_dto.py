"""Application DTOs for Order operations."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.domain.entities.order import Order, OrderItem
from core.domain.enums import OrderStatus, PaymentStatus


# =============================================================================
# REQUESTS
# =============================================================================

class OrderItemInput(BaseModel):
    """
    Line item as posted by the storefront.

    Catalog carts send ``product_id``/``unit_price``; deal carts send
    ``id``/``price``/``original_price``. Unknown keys are kept.
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    name: Optional[str] = None
    quantity: Optional[int] = Field(default=None, description="Defaults to 1")
    unit_price: Optional[Decimal] = None
    price: Optional[Decimal] = None
    original_price: Optional[Decimal] = None
    discount_price: Optional[Decimal] = None
    discount_percentage: Optional[Decimal] = None
    subtotal: Optional[Decimal] = None
    total_price: Optional[Decimal] = None
    variant_options: Optional[Dict[str, Any]] = None
    selected_variants: Optional[Dict[str, Any]] = None
    deal_id: Optional[str] = None
    deal_product_id: Optional[str] = None
    standalone_source_id: Optional[str] = None


class CreateOrderRequest(BaseModel):
    """Request DTO for creating an order."""

    user_id: Optional[str] = Field(None, description="Account placing the order")
    customer_id: Optional[str] = Field(None, description="Existing customer record")
    customer_email: Optional[str] = Field(None, description="Contact email for guests")
    customer_name: Optional[str] = Field(None, description="Contact name")
    customer_phone: Optional[str] = Field(None, description="Contact phone")
    order_items: List[OrderItemInput] = Field(default_factory=list, description="Line items")
    delivery_address: Optional[Dict[str, Any]] = Field(None, description="Shipping address")
    delivery_option: Optional[Dict[str, Any]] = Field(None, description="{name, price}")
    delivery_fee: Optional[Decimal] = Field(None, ge=0, description="Overrides delivery_option.price")
    subtotal: Optional[Decimal] = Field(None, description="Client subtotal (informational)")
    tax: Decimal = Field(default=Decimal("0"), ge=0, description="Tax on the discounted base")
    total: Optional[Decimal] = Field(None, description="Client total (informational)")
    discount_code: Optional[str] = Field(None, description="Discount code to apply")
    payment_method: Optional[str] = Field(None, description="paystack, cash_on_delivery, ...")
    payment_reference: Optional[str] = Field(None, description="Gateway reference")
    order_number: Optional[str] = Field(None, description="ORD-NNNDDMMYY; generated when absent")
    notes: Optional[str] = None


class TrackOrderRequest(BaseModel):
    """Public order lookup."""

    order_number: Optional[str] = None
    email: Optional[str] = None


class UpdateStatusRequest(BaseModel):
    status: OrderStatus
    tracking_number: Optional[str] = None
    notes: Optional[str] = None


class UpdatePaymentStatusRequest(BaseModel):
    payment_status: PaymentStatus


class CancelOrderRequest(BaseModel):
    cancellation_reason: Optional[str] = Field(None, description="Stored as the order notes")


class UpdateOrderDetailsRequest(BaseModel):
    shipping_fee: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None


# =============================================================================
# RESPONSES
# =============================================================================

class OrderItemDTO(BaseModel):
    """DTO for order item."""

    id: str
    product_id: Optional[str] = None
    deal_product_id: Optional[str] = None
    product_name: str
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    subtotal: Decimal = Field(..., ge=0)
    variant_options: Dict[str, Any] = Field(default_factory=dict)
    deal_snapshot: Optional[Dict[str, Any]] = None

    model_config = {"frozen": True}

    @classmethod
    def from_entity(cls, item: OrderItem) -> "OrderItemDTO":
        return cls(
            id=item.id,
            product_id=item.product_id,
            deal_product_id=item.deal_product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            subtotal=item.subtotal,
            variant_options=item.variant_options,
            deal_snapshot=item.deal_snapshot.to_dict() if item.deal_snapshot else None,
        )


class OrderDTO(BaseModel):
    """Response DTO for order details."""

    id: str
    order_number: str
    customer_id: Optional[str] = None
    user_id: Optional[str] = None
    status: OrderStatus
    payment_status: PaymentStatus
    subtotal: Decimal
    discount: Decimal
    discount_code: Optional[str] = None
    tax: Decimal
    shipping_fee: Decimal
    total: Decimal
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    shipping_address: Dict[str, Any] = Field(default_factory=dict)
    notes: Optional[str] = None
    tracking_number: Optional[str] = None
    items: List[OrderItemDTO] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = {"frozen": True}

    @classmethod
    def from_entity(cls, order: Order) -> "OrderDTO":
        return cls(
            id=order.id,
            order_number=order.order_number,
            customer_id=order.customer_id,
            user_id=order.user_id,
            status=order.status,
            payment_status=order.payment_status,
            subtotal=order.subtotal,
            discount=order.discount,
            discount_code=order.discount_code,
            tax=order.tax,
            shipping_fee=order.shipping_fee,
            total=order.total,
            payment_method=order.payment_method,
            payment_reference=order.payment_reference,
            shipping_address=order.shipping_address.to_dict(),
            notes=order.notes,
            tracking_number=order.tracking_number,
            items=[OrderItemDTO.from_entity(item) for item in order.items],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderListDTO(BaseModel):
    """DTO for listing orders."""

    orders: List[OrderDTO] = Field(default_factory=list, description="List of orders")
    total: int = Field(..., ge=0, description="Total matching count")
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)

    model_config = {"frozen": True}


class TrackedItemDTO(BaseModel):
    product_name: str
    quantity: int
    unit_price: Decimal

    model_config = {"frozen": True}


class TrackedOrderDTO(BaseModel):
    """What a guest may see about an order: no contact or payment details."""

    order_number: str
    status: OrderStatus
    payment_status: PaymentStatus
    subtotal: Decimal
    discount: Decimal
    shipping_fee: Decimal
    total: Decimal
    items: List[TrackedItemDTO] = Field(default_factory=list)
    tracking_number: Optional[str] = None
    delivery_option: Optional[Dict[str, Any]] = None
    city: Optional[str] = None
    region: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"frozen": True}

    @classmethod
    def from_entity(cls, order: Order) -> "TrackedOrderDTO":
        address = order.shipping_address
        return cls(
            order_number=order.order_number,
            status=order.status,
            payment_status=order.payment_status,
            subtotal=order.subtotal,
            discount=order.discount,
            shipping_fee=order.shipping_fee,
            total=order.total,
            items=[
                TrackedItemDTO(
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
                for item in order.items
            ],
            tracking_number=order.tracking_number,
            delivery_option=address.delivery_option.to_dict() if address.delivery_option else None,
            city=address.city,
            region=address.region,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
