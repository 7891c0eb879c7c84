"""
Payment webhook reconciler.

Turns a verified ``charge.success`` callback into exactly one paid order,
however many times the gateway delivers it.
"""
import json
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.commands import CreateOrderCommand
from core.application.dtos.payment_dto import WebhookAckDTO
from core.application.services.status_service import OrderStatusService
from core.application.use_cases.create_order import CreateOrderUseCase
from core.data.uow import create_uow
from core.domain.entities.order import Order
from core.domain.exceptions import (
    DuplicatePaymentReference,
    InvalidSignature,
    MissingCheckoutData,
    MissingReference,
    ValidationError,
)
from core.domain.value_objects import to_decimal
from core.infrastructure.adapters.payments import verify_signature
from core.settings.modules.paystack_settings import PaystackSettings


logger = logging.getLogger(__name__)

SUCCESS_EVENTS = frozenset({"charge.success", "transaction.success"})


def checkout_items(raw_items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Cart lines from checkout metadata, priced at the discounted price when there is one."""
    items = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        quantity = raw.get("quantity") or 1
        price = raw.get("discount_price") or raw.get("original_price") or Decimal("0")
        items.append(
            {
                **raw,
                "product_name": raw.get("name"),
                "quantity": quantity,
                "unit_price": price,
                "subtotal": raw.get("subtotal") or to_decimal(price, Decimal("0")) * int(quantity),
                "selected_variants": raw.get("selected_variants") or {},
            }
        )
    return items


class PaymentWebhookService:
    """
    Reconciles gateway callbacks with orders.

    Duplicate deliveries are answered "already processed"; the unique
    payment/transaction references close the window between the guard and
    the insert.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        create_order: CreateOrderUseCase,
        status_service: OrderStatusService,
        paystack: PaystackSettings,
    ):
        self._session_factory = session_factory
        self.create_order = create_order
        self.status_service = status_service
        self.paystack = paystack

    async def handle(self, raw_body: bytes, signature: Optional[str]) -> WebhookAckDTO:
        """
        Process one webhook delivery.

        Raises:
            InvalidSignature: signature missing or wrong
            ValidationError: body is not a JSON object
            MissingReference: success event without a reference
            MissingCheckoutData: success event without checkout metadata
        """
        if not signature:
            logger.error("❌ Webhook rejected: missing signature")
            raise InvalidSignature("Missing signature")
        if not verify_signature(self.paystack.secret_key, raw_body, signature):
            logger.error("❌ Webhook rejected: invalid signature")
            raise InvalidSignature()

        try:
            payload = json.loads(raw_body, parse_float=Decimal)
        except ValueError as e:
            raise ValidationError("Malformed webhook payload") from e
        if not isinstance(payload, dict):
            raise ValidationError("Malformed webhook payload")

        event = payload.get("event")
        data = payload.get("data") or {}
        if not isinstance(data, dict):
            logger.error(f"❌ Webhook rejected: data is {type(data).__name__}, expected an object")
            raise ValidationError("Malformed webhook payload")
        logger.info(f"🔔 Webhook received: event={event} reference={data.get('reference')}")

        if event not in SUCCESS_EVENTS or data.get("status") != "success":
            return WebhookAckDTO(status="ignored", message="Event ignored")

        reference = data.get("reference")
        if not reference:
            logger.error("❌ Webhook payload missing transaction reference")
            raise MissingReference()

        existing = await self._existing_order(reference)
        if existing is not None:
            return await self._already_processed(existing, reference)

        command = self._command_from(reference, data)
        try:
            order = await self.create_order.execute(command)
        except DuplicatePaymentReference:
            logger.info(f"ℹ️ Concurrent delivery already created the order for {reference}")
            existing = await self._existing_order(reference)
            if existing is None:
                return WebhookAckDTO(status="already_processed", message="Webhook already processed")
            return await self._already_processed(existing, reference)

        logger.info(f"✅ Order {order.order_number} created from webhook {reference}")
        return WebhookAckDTO(
            status="created",
            message="Order created",
            order_id=order.id,
            order_number=order.order_number,
        )

    async def _existing_order(self, reference: str) -> Optional[Order]:
        async with create_uow(self._session_factory) as uow:
            transaction = await uow.transactions.find_by_reference(reference)
            if transaction is not None and transaction.order_id:
                order = await uow.orders.find_by_id(transaction.order_id)
                if order is not None:
                    return order
            return await uow.orders.find_by_payment_reference(reference)

    async def _already_processed(self, order: Order, reference: str) -> WebhookAckDTO:
        logger.info(f"ℹ️ Webhook already processed for {reference} (order {order.order_number})")
        order, _ = await self.status_service.confirm_payment(order.id)
        return WebhookAckDTO(
            status="already_processed",
            message="Webhook already processed",
            order_id=order.id,
            order_number=order.order_number,
        )

    @staticmethod
    def _command_from(reference: str, data: Dict[str, Any]) -> CreateOrderCommand:
        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            metadata = {}
        checkout = metadata.get("checkout_data")
        if not isinstance(checkout, dict):
            logger.error(f"❌ No checkout data in webhook metadata for {reference}")
            raise MissingCheckoutData(reference)

        user_id = metadata.get("user_id")
        if not user_id or user_id == "guest":
            user_id = None

        delivery_option = checkout.get("delivery_option") or None
        if delivery_option is not None and not isinstance(delivery_option, dict):
            raise ValidationError("Malformed delivery option in checkout data")
        delivery_address = checkout.get("delivery_address")
        if delivery_address is not None and not isinstance(delivery_address, dict):
            raise ValidationError("Malformed delivery address in checkout data")
        raw_items = checkout.get("items") or []
        if not isinstance(raw_items, list):
            raise ValidationError("Malformed items in checkout data")
        delivery_fee = (delivery_option or {}).get("price") or checkout.get("delivery_fee") or 0
        customer = data.get("customer")
        if not isinstance(customer, dict):
            customer = {}

        return CreateOrderCommand(
            items=checkout_items(raw_items),
            delivery_address=delivery_address,
            delivery_option=delivery_option,
            delivery_fee=to_decimal(delivery_fee, Decimal("0")),
            tax=to_decimal(checkout.get("tax"), Decimal("0")),
            client_subtotal=to_decimal(checkout.get("subtotal")),
            client_total=to_decimal(checkout.get("total")),
            discount_code=checkout.get("discount_code") or metadata.get("discount_code"),
            payment_method=checkout.get("payment_method") or "paystack",
            payment_reference=reference,
            notes=checkout.get("notes"),
            user_id=user_id,
            customer_email=customer.get("email") or metadata.get("customer_email"),
            payment_confirmed=True,
            source="webhook",
            metadata={"gateway_event": data.get("id")},
        )
