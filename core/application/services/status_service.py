"""
Order status management.

Admin and customer actions on existing orders: fulfilment status, payment
status, cancellation and detail edits. Transactions are kept in step with
the order's payment status inside the same database transaction.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.actor import Actor
from core.application.services.notification_dispatcher import (
    NotificationDispatcher,
    recipient_for,
)
from core.data.uow import UnitOfWork, create_uow
from core.domain.entities.customer import Customer
from core.domain.entities.order import Order
from core.domain.entities.transaction import Transaction
from core.domain.enums import OrderStatus, PaymentProvider, PaymentStatus
from core.domain.event_bus import EventBus
from core.domain.events import DomainEvent
from core.domain.exceptions import (
    AuthorizationError,
    InvalidStatusTransition,
    NotFoundError,
)
from core.domain.value_objects import utcnow
from core.settings.modules.checkout_settings import CheckoutSettings


logger = logging.getLogger(__name__)


class OrderStatusService:
    """
    Application service for the order/payment state machine.

    Every method commits before publishing events or sending emails; email
    failures never undo a committed change.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        event_bus: EventBus,
        dispatcher: Optional[NotificationDispatcher] = None,
        checkout: Optional[CheckoutSettings] = None,
    ) -> None:
        self._session_factory = session_factory
        self.event_bus = event_bus
        self.dispatcher = dispatcher
        self.checkout = checkout or CheckoutSettings()

    # ------------------------------------------------------------------
    # Fulfilment status
    # ------------------------------------------------------------------

    async def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        tracking_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Order:
        """
        Move an order to ``status`` (admin).

        Cancelling fails every transaction of the order; the order's own
        payment status is left as it was.

        Raises:
            NotFoundError: unknown order
            InvalidStatusTransition: the order is delivered or cancelled
        """
        async with create_uow(self._session_factory) as uow:
            order = await self._get(uow, order_id)
            previous = order.status

            changed = order.update_status(status, tracking_number=tracking_number, notes=notes)
            if changed and status == OrderStatus.CANCELLED:
                await self._sync_transactions(uow, order, PaymentStatus.FAILED)

            await uow.orders.save(order)
            customer = await self._customer(uow, order)
            await uow.commit()

        logger.info(f"✅ Order {order.order_number}: {previous.value} -> {order.status.value}")
        await self._publish(order.pull_events())
        if changed and self.dispatcher is not None:
            await self.dispatcher.status_changed(order, recipient_for(order, customer), previous.value)
        return order

    # ------------------------------------------------------------------
    # Payment status
    # ------------------------------------------------------------------

    async def update_payment_status(self, order_id: str, payment_status: PaymentStatus) -> Order:
        """
        Apply an explicit payment status (admin) and mirror it on transactions.

        Marking an order paid creates its transaction when none exists.

        Raises:
            NotFoundError: unknown order
            InvalidStatusTransition: the payment state machine forbids the change
        """
        async with create_uow(self._session_factory) as uow:
            order = await self._get(uow, order_id)
            changed = order.update_payment_status(payment_status)
            if changed:
                await self._sync_transactions(uow, order, payment_status)
                await uow.orders.save(order)
                await uow.commit()

        logger.info(f"✅ Order {order.order_number} payment status: {order.payment_status.value}")
        await self._publish(order.pull_events())
        return order

    async def confirm_payment(self, order_id: str) -> Tuple[Order, bool]:
        """
        Settle a pending order after the gateway confirmed its charge.

        Cancelled orders and orders whose payment already left ``pending``
        are returned untouched.

        Returns:
            (order, True if it moved to paid)
        """
        async with create_uow(self._session_factory) as uow:
            order = await self._get(uow, order_id)
            if order.status == OrderStatus.CANCELLED or order.payment_status != PaymentStatus.PENDING:
                return order, False
            order.update_payment_status(PaymentStatus.PAID)
            await self._sync_transactions(uow, order, PaymentStatus.PAID)
            await uow.orders.save(order)
            await uow.commit()

        logger.info(f"✅ Order {order.order_number} marked paid by gateway confirmation")
        await self._publish(order.pull_events())
        return order, True

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    async def cancel(self, order_id: str, actor: Actor, reason: Optional[str] = None) -> Order:
        """
        Cancel an order on behalf of its owner or an admin.

        Customers may only cancel pending orders. A cancellation by the
        order's owner also fails the payment and its transactions.

        Raises:
            NotFoundError: unknown order
            AuthorizationError: actor is neither owner nor admin
            InvalidStatusTransition: order already final, or not pending for a customer
        """
        async with create_uow(self._session_factory) as uow:
            order = await self._get(uow, order_id)

            is_owner = order.is_owned_by(actor.id)
            if not is_owner and not actor.is_admin:
                raise AuthorizationError("You are not authorized to cancel this order")
            if order.status.is_terminal:
                raise InvalidStatusTransition(f"Order is already {order.status.value}")
            if not actor.is_admin and order.status != OrderStatus.PENDING:
                raise InvalidStatusTransition("Only pending orders can be cancelled")

            cancelled_by = "customer" if is_owner else "admin"
            order.cancel(cancelled_by=cancelled_by, reason=reason, fail_payment=is_owner)
            if is_owner:
                await self._sync_transactions(uow, order, PaymentStatus.FAILED)

            await uow.orders.save(order)
            customer = await self._customer(uow, order)
            await uow.commit()

        logger.info(f"✅ Order {order.order_number} cancelled by {cancelled_by} ({actor.id})")
        await self._publish(order.pull_events())
        if self.dispatcher is not None:
            await self.dispatcher.order_cancelled(
                order,
                recipient_for(order, customer),
                cancelled_by,
                reason or ("Cancelled by customer" if is_owner else "Cancelled by admin"),
            )
        return order

    # ------------------------------------------------------------------
    # Details
    # ------------------------------------------------------------------

    async def update_details(
        self,
        order_id: str,
        shipping_fee: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> Order:
        """
        Edit shipping fee and/or notes (admin); the total follows the fee.

        Raises:
            NotFoundError: unknown order
            InvalidTotal: the new total would not be positive
        """
        async with create_uow(self._session_factory) as uow:
            order = await self._get(uow, order_id)
            previous_fee = order.shipping_fee
            changes: Dict[str, Any] = order.update_details(shipping_fee=shipping_fee, notes=notes)
            if changes:
                await uow.orders.save(order)
                customer = await self._customer(uow, order)
                await uow.commit()

        if not changes:
            return order

        logger.info(f"✅ Order {order.order_number} details updated: {sorted(changes)}")
        if self.dispatcher is not None:
            email_changes = dict(changes)
            if "shipping_fee" in changes:
                email_changes["old_shipping_fee"] = previous_fee
            await self.dispatcher.order_updated(order, recipient_for(order, customer), email_changes)
        return order

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    async def _get(uow: UnitOfWork, order_id: str) -> Order:
        order = await uow.orders.find_by_id(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        return order

    @staticmethod
    async def _customer(uow: UnitOfWork, order: Order) -> Optional[Customer]:
        if not order.customer_id:
            return None
        return await uow.customers.find_by_id(order.customer_id)

    async def _sync_transactions(
        self, uow: UnitOfWork, order: Order, payment_status: PaymentStatus
    ) -> List[Transaction]:
        """Mirror ``payment_status`` onto the order's transactions."""
        now = utcnow()
        transactions = await uow.transactions.find_by_order(order.id)

        if not transactions and payment_status == PaymentStatus.PAID:
            transaction = await self._paid_transaction(uow, order)
            transaction.mirror_payment_status(PaymentStatus.PAID, now)
            await uow.transactions.save(transaction)
            return [transaction]

        for transaction in transactions:
            transaction.mirror_payment_status(payment_status, now)
            await uow.transactions.save(transaction)
        if transactions:
            logger.info(
                f"🔗 {len(transactions)} transaction(s) of {order.order_number} -> {payment_status.value}"
            )
        return transactions

    async def _paid_transaction(self, uow: UnitOfWork, order: Order) -> Transaction:
        reference = order.payment_reference or f"TXN-{order.id[:8]}-{order.order_number}"
        existing = await uow.transactions.find_by_reference(reference)
        if existing is not None and existing.link_order(order.id):
            logger.info(f"🔗 Linked existing transaction {reference} to {order.order_number}")
            return existing

        logger.info(f"Creating transaction {reference} for {order.order_number} marked paid")
        return Transaction(
            transaction_reference=reference if existing is None else f"TXN-{order.id[:8]}-{order.order_number}",
            amount=order.total,
            currency=self.checkout.currency,
            order_id=order.id,
            user_id=order.user_id,
            payment_method=order.payment_method or "cash_on_delivery",
            payment_provider=PaymentProvider.from_payment_method(order.payment_method or "cash_on_delivery"),
            customer_email=order.shipping_address.email,
            metadata={
                "order_number": order.order_number,
                "order_id": order.id,
                "total": str(order.total),
                "created_from_status_update": True,
            },
            initiated_at=order.created_at,
        )

    async def _publish(self, events: List[DomainEvent]) -> None:
        if events:
            await self.event_bus.publish_all(events)
