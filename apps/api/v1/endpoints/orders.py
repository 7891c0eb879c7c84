"""Order endpoints for REST API."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.application.actor import Actor
from core.application.commands import CreateOrderCommand
from core.application.dtos.order_dto import (
    CancelOrderRequest,
    CreateOrderRequest,
    OrderDTO,
    OrderListDTO,
    TrackedOrderDTO,
    TrackOrderRequest,
    UpdateOrderDetailsRequest,
    UpdatePaymentStatusRequest,
    UpdateStatusRequest,
)
from core.application.services.order_service import OrderApplicationService
from core.application.services.status_service import OrderStatusService
from core.application.use_cases.create_order import CreateOrderUseCase
from core.domain.enums import OrderStatus, PaymentStatus
from core.domain.repositories.order_repository import OrderFilter

from apps.api.deps import get_create_order_use_case, get_order_service, get_status_service
from apps.api.security import get_admin_actor, get_current_actor, get_optional_actor

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderDTO, status_code=201)
async def create_order(
    request: CreateOrderRequest,
    use_case: CreateOrderUseCase = Depends(get_create_order_use_case),
    actor: Optional[Actor] = Depends(get_optional_actor),
) -> OrderDTO:
    """Place an order (guests and signed-in customers, or admins on their behalf).

    Totals are always recomputed server-side; client subtotal/total are only
    compared for logging.
    """
    command = CreateOrderCommand(
        items=[item.model_dump(exclude_none=True) for item in request.order_items],
        delivery_address=request.delivery_address,
        delivery_option=request.delivery_option,
        delivery_fee=request.delivery_fee,
        tax=request.tax,
        client_subtotal=request.subtotal,
        client_total=request.total,
        discount_code=request.discount_code,
        payment_method=request.payment_method,
        payment_reference=request.payment_reference,
        order_number=request.order_number,
        notes=request.notes,
        user_id=request.user_id,
        customer_id=request.customer_id,
        customer_email=request.customer_email,
        customer_name=request.customer_name,
        customer_phone=request.customer_phone,
        actor=actor,
    )
    order = await use_case.execute(command)
    return OrderDTO.from_entity(order)


@router.get("", response_model=OrderListDTO)
async def list_orders(
    status: Optional[OrderStatus] = Query(default=None),
    payment_status: Optional[PaymentStatus] = Query(default=None),
    user_id: Optional[str] = Query(default=None, description="Admin only"),
    has_discount: Optional[bool] = Query(default=None),
    date_from: Optional[datetime] = Query(default=None),
    date_to: Optional[datetime] = Query(default=None),
    search: Optional[str] = Query(default=None, description="Order number or discount code"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    service: OrderApplicationService = Depends(get_order_service),
) -> OrderListDTO:
    """List orders, newest first. Customers only see their own orders."""
    criteria = OrderFilter(
        status=status,
        payment_status=payment_status,
        user_id=user_id,
        has_discount=has_discount,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )
    return await service.list_orders(actor, criteria, page=page, limit=limit)


@router.post("/track", response_model=TrackedOrderDTO)
async def track_order(
    request: TrackOrderRequest,
    service: OrderApplicationService = Depends(get_order_service),
) -> TrackedOrderDTO:
    """Public order tracking by order number and the email used at checkout."""
    return await service.track_order(request.order_number, request.email)


@router.get("/{order_id}", response_model=OrderDTO)
async def get_order(
    order_id: str,
    actor: Actor = Depends(get_current_actor),
    service: OrderApplicationService = Depends(get_order_service),
) -> OrderDTO:
    return await service.get_order(order_id, actor)


@router.patch("/{order_id}/status", response_model=OrderDTO)
async def update_order_status(
    order_id: str,
    request: UpdateStatusRequest,
    actor: Actor = Depends(get_admin_actor),
    service: OrderStatusService = Depends(get_status_service),
) -> OrderDTO:
    logger.info(f"Admin {actor.id} sets order {order_id} status to {request.status.value}")
    order = await service.update_status(
        order_id,
        request.status,
        tracking_number=request.tracking_number,
        notes=request.notes,
    )
    return OrderDTO.from_entity(order)


@router.patch("/{order_id}/payment-status", response_model=OrderDTO)
async def update_payment_status(
    order_id: str,
    request: UpdatePaymentStatusRequest,
    actor: Actor = Depends(get_admin_actor),
    service: OrderStatusService = Depends(get_status_service),
) -> OrderDTO:
    logger.info(f"Admin {actor.id} sets order {order_id} payment status to {request.payment_status.value}")
    order = await service.update_payment_status(order_id, request.payment_status)
    return OrderDTO.from_entity(order)


@router.patch("/{order_id}/details", response_model=OrderDTO)
async def update_order_details(
    order_id: str,
    request: UpdateOrderDetailsRequest,
    actor: Actor = Depends(get_admin_actor),
    service: OrderStatusService = Depends(get_status_service),
) -> OrderDTO:
    order = await service.update_details(order_id, shipping_fee=request.shipping_fee, notes=request.notes)
    return OrderDTO.from_entity(order)


@router.patch("/{order_id}/cancel", response_model=OrderDTO)
async def cancel_order(
    order_id: str,
    request: Optional[CancelOrderRequest] = None,
    actor: Actor = Depends(get_current_actor),
    service: OrderStatusService = Depends(get_status_service),
) -> OrderDTO:
    """Cancel an order. Customers may cancel their own pending orders."""
    reason = request.cancellation_reason if request is not None else None
    order = await service.cancel(order_id, actor, reason=reason)
    return OrderDTO.from_entity(order)
