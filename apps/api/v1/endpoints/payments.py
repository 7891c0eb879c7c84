"""Payment endpoints for REST API."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, Request

from core.application.actor import Actor
from core.application.dtos.payment_dto import (
    InitializePaymentRequest,
    LinkOrderRequest,
    TransactionDTO,
    VerifiedPaymentDTO,
    VerifyPaymentRequest,
    WebhookAckDTO,
)
from core.application.services.payment_service import PaymentService
from core.application.services.webhook_service import PaymentWebhookService

from apps.api.deps import get_payment_service, get_webhook_service
from apps.api.security import get_admin_actor

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/initialize")
async def initialize_payment(
    request: InitializePaymentRequest,
    service: PaymentService = Depends(get_payment_service),
) -> Dict[str, Any]:
    """Start a Paystack checkout; returns authorization_url, access_code and reference."""
    return await service.initialize(request)


@router.post("/verify", response_model=VerifiedPaymentDTO)
async def verify_payment(
    request: VerifyPaymentRequest,
    service: PaymentService = Depends(get_payment_service),
) -> VerifiedPaymentDTO:
    return await service.verify(request.reference)


@router.post("/link-order", response_model=TransactionDTO)
async def link_order(
    request: LinkOrderRequest,
    actor: Actor = Depends(get_admin_actor),
    service: PaymentService = Depends(get_payment_service),
) -> TransactionDTO:
    return await service.link_order(request)


@router.post("/webhook", response_model=WebhookAckDTO)
async def paystack_webhook(
    request: Request,
    x_paystack_signature: Optional[str] = Header(default=None),
    service: PaymentWebhookService = Depends(get_webhook_service),
) -> WebhookAckDTO:
    """Paystack callback. The signature covers the raw body, so it is read unparsed."""
    raw_body = await request.body()
    return await service.handle(raw_body, x_paystack_signature)
