"""Application service for gateway-backed payment operations."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.dtos.payment_dto import (
    InitializePaymentRequest,
    LinkOrderRequest,
    TransactionDTO,
    VerifiedPaymentDTO,
)
from core.application.interfaces import IPaymentGateway
from core.data.uow import UnitOfWork, create_uow
from core.domain.entities.transaction import Transaction
from core.domain.enums import PaymentProvider, PaymentStatus, TransactionStatus
from core.domain.exceptions import DomainError, NotFoundError
from core.domain.value_objects import ensure_utc, round2, utcnow


logger = logging.getLogger(__name__)

MINOR_UNITS = Decimal("100")


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return ensure_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))
    except ValueError:
        return None


class PaymentService:
    """
    Payment initialization, verification and manual order linking.

    Verification records the gateway's verdict on the transaction keyed by
    the checkout reference, creating it when the webhook has not yet.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        gateway: IPaymentGateway,
        currency: str = "GHS",
    ):
        self._session_factory = session_factory
        self.gateway = gateway
        self.currency = currency

    async def initialize(self, request: InitializePaymentRequest) -> Dict[str, Any]:
        """Start a gateway checkout; returns the gateway's authorization data."""
        return await self.gateway.initialize_transaction(
            email=request.email,
            amount=request.amount,
            reference=request.reference,
            callback_url=request.callback_url,
            metadata=request.metadata,
        )

    async def verify(self, reference: str) -> VerifiedPaymentDTO:
        """
        Verify a payment with the gateway and upsert its transaction.

        Raises:
            PaymentGatewayError: gateway unreachable or rejected the lookup
        """
        data = await self.gateway.verify_transaction(reference)
        gateway_status = data.get("status")
        successful = gateway_status == "success"
        amount = round2(Decimal(str(data.get("amount") or 0)) / MINOR_UNITS)
        currency = data.get("currency") or self.currency
        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            metadata = {}
        customer = data.get("customer") or {}

        async with create_uow(self._session_factory) as uow:
            transaction = await uow.transactions.find_by_reference(reference)
            if transaction is None:
                transaction = Transaction(
                    transaction_reference=reference,
                    amount=amount,
                    currency=currency,
                    payment_provider=PaymentProvider.PAYSTACK,
                    initiated_at=_parse_timestamp(data.get("created_at")) or utcnow(),
                )
                logger.info(f"Recording transaction {reference} from verification")

            transaction.amount = amount
            transaction.currency = currency
            transaction.payment_provider = PaymentProvider.PAYSTACK
            transaction.payment_method = metadata.get("payment_method") or transaction.payment_method or "paystack"
            transaction.customer_email = (
                customer.get("email") or metadata.get("customer_email") or transaction.customer_email
            )
            user_id = metadata.get("user_id")
            if user_id and user_id != "guest" and not transaction.user_id:
                transaction.user_id = user_id
            transaction.metadata = {
                **transaction.metadata,
                **metadata,
                "gateway_response": data.get("gateway_response"),
            }

            if successful:
                transaction.status = TransactionStatus.SUCCESS
                transaction.payment_status = PaymentStatus.PAID
                transaction.paid_at = _parse_timestamp(data.get("paid_at")) or transaction.paid_at or utcnow()
            elif gateway_status in ("failed", "abandoned", "reversed"):
                transaction.status = TransactionStatus.FAILED
                transaction.payment_status = PaymentStatus.FAILED
            else:
                transaction.status = TransactionStatus.PENDING
                transaction.payment_status = PaymentStatus.PENDING
            transaction.updated_at = utcnow()

            if not transaction.order_id:
                await self._link_from_metadata(uow, transaction, metadata)

            await uow.transactions.save(transaction)
            await uow.commit()

        logger.info(f"{'✅' if successful else '⚠️'} Payment {reference} verified: {gateway_status}")
        return VerifiedPaymentDTO(
            success=successful,
            reference=data.get("reference") or reference,
            gateway_status=gateway_status,
            amount=amount,
            currency=currency,
            metadata=metadata,
            transaction=TransactionDTO.from_entity(transaction),
        )

    async def link_order(self, request: LinkOrderRequest) -> TransactionDTO:
        """
        Attach a transaction to an order (admin).

        Raises:
            NotFoundError: unknown transaction or order
            DomainError: transaction already belongs to another order
        """
        async with create_uow(self._session_factory) as uow:
            transaction = await uow.transactions.find_by_reference(request.transaction_reference)
            if transaction is None:
                raise NotFoundError("Transaction not found")
            order = await uow.orders.find_by_id(request.order_id)
            if order is None:
                raise NotFoundError("Order not found")
            if not transaction.link_order(order.id):
                raise DomainError(
                    f"Transaction is already linked to order {transaction.order_id}",
                    code="TRANSACTION_ALREADY_LINKED",
                )
            transaction.user_id = transaction.user_id or order.user_id
            await uow.transactions.save(transaction)
            await uow.commit()

        logger.info(f"🔗 Transaction {request.transaction_reference} linked to {order.order_number}")
        return TransactionDTO.from_entity(transaction)

    @staticmethod
    async def _link_from_metadata(
        uow: UnitOfWork, transaction: Transaction, metadata: Dict[str, Any]
    ) -> None:
        order = None
        if metadata.get("order_id"):
            order = await uow.orders.find_by_id(str(metadata["order_id"]))
        elif metadata.get("payment_reference"):
            reference = str(metadata["payment_reference"])
            order = await uow.orders.find_by_payment_reference(reference)
            if order is None:
                order = await uow.orders.find_by_order_number(reference)

        if order is not None and transaction.link_order(order.id):
            transaction.user_id = transaction.user_id or order.user_id
            logger.info(f"🔗 Transaction {transaction.transaction_reference} linked to {order.order_number}")
