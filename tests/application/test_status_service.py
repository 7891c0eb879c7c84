"""Tests for OrderStatusService: status, payment status, cancellation and details."""
from decimal import Decimal

import pytest
from sqlalchemy import select

from core.application.actor import Actor
from core.application.commands import CreateOrderCommand
from core.data.models import OrderModel, TransactionModel
from core.domain.enums import OrderStatus, PaymentStatus, TransactionStatus
from core.domain.events import OrderCancelledEvent, OrderStatusChangedEvent
from core.domain.exceptions import AuthorizationError, InvalidStatusTransition, NotFoundError
from tests.conftest import address, setting_row

CUSTOMER = Actor(id="user-1", email="ama@example.com", role="customer")
STRANGER = Actor(id="user-2", role="customer")
ADMIN = Actor(id="admin-1", role="admin")


@pytest.fixture
def place_order(create_order):
    async def _place(**overrides):
        values = {
            "items": [{"id": "deal-1", "name": "Speaker", "price": "100", "quantity": 2}],
            "delivery_address": address(),
            "delivery_fee": Decimal("20"),
            "payment_method": "cash_on_delivery",
            "actor": CUSTOMER,
        }
        values.update(overrides)
        return await create_order.execute(CreateOrderCommand(**values))

    return _place


async def transactions_for(session_factory, order_id):
    async with session_factory() as session:
        result = await session.execute(select(TransactionModel).where(TransactionModel.order_id == order_id))
        return result.scalars().all()


@pytest.mark.asyncio
async def test_shipping_sends_status_email(place_order, status_service, email_notifier, event_bus):
    order = await place_order()

    updated = await status_service.update_status(order.id, OrderStatus.SHIPPED, tracking_number="TRK-77")

    assert updated.status == OrderStatus.SHIPPED
    assert updated.tracking_number == "TRK-77"
    [email] = email_notifier.of_kind("order_status_update")
    assert email["previous_status"] == "pending"
    assert email["new_status"] == "shipped"
    assert isinstance(event_bus.published[-1], OrderStatusChangedEvent)


@pytest.mark.asyncio
async def test_shipped_email_respects_store_toggle(place_order, status_service, email_notifier, seed):
    await seed(setting_row("email_order_shipped", "false"))
    order = await place_order()

    await status_service.update_status(order.id, OrderStatus.SHIPPED)

    assert email_notifier.of_kind("order_status_update") == []


@pytest.mark.asyncio
async def test_unchanged_status_sends_nothing(place_order, status_service, email_notifier):
    order = await place_order()

    await status_service.update_status(order.id, OrderStatus.PENDING, notes="Called customer")

    assert email_notifier.of_kind("order_status_update") == []


@pytest.mark.asyncio
async def test_cancel_via_status_fails_transactions(place_order, status_service, session_factory):
    order = await place_order()

    updated = await status_service.update_status(order.id, OrderStatus.CANCELLED)

    assert updated.status == OrderStatus.CANCELLED
    assert updated.payment_status == PaymentStatus.PENDING
    [transaction] = await transactions_for(session_factory, order.id)
    assert transaction.status == TransactionStatus.FAILED.value
    assert transaction.payment_status == PaymentStatus.FAILED.value


@pytest.mark.asyncio
async def test_cancel_via_status_keeps_paid_order_paid(place_order, status_service, session_factory):
    order = await place_order(
        payment_method="paystack", payment_reference="TXN-PAID1", payment_confirmed=True
    )

    updated = await status_service.update_status(order.id, OrderStatus.CANCELLED)

    assert updated.status == OrderStatus.CANCELLED
    assert updated.payment_status == PaymentStatus.PAID
    async with session_factory() as session:
        stored = await session.get(OrderModel, order.id)
    assert stored.payment_status == PaymentStatus.PAID.value
    [transaction] = await transactions_for(session_factory, order.id)
    assert transaction.status == TransactionStatus.FAILED.value


@pytest.mark.asyncio
async def test_delivered_order_is_final(place_order, status_service):
    order = await place_order()
    await status_service.update_status(order.id, OrderStatus.DELIVERED)

    with pytest.raises(InvalidStatusTransition):
        await status_service.update_status(order.id, OrderStatus.PROCESSING)


@pytest.mark.asyncio
async def test_unknown_order(status_service):
    with pytest.raises(NotFoundError):
        await status_service.update_status("missing", OrderStatus.SHIPPED)


@pytest.mark.asyncio
async def test_mark_paid_mirrors_transaction(place_order, status_service, session_factory):
    order = await place_order()

    updated = await status_service.update_payment_status(order.id, PaymentStatus.PAID)

    assert updated.payment_status == PaymentStatus.PAID
    [transaction] = await transactions_for(session_factory, order.id)
    assert transaction.status == TransactionStatus.SUCCESS.value
    assert transaction.payment_status == PaymentStatus.PAID.value
    assert transaction.paid_at is not None


@pytest.mark.asyncio
async def test_mark_paid_creates_missing_transaction(place_order, status_service, session_factory):
    order = await place_order()
    async with session_factory() as session:
        for row in await transactions_for(session_factory, order.id):
            await session.delete(await session.get(TransactionModel, row.id))
        await session.commit()

    await status_service.update_payment_status(order.id, PaymentStatus.PAID)

    [transaction] = await transactions_for(session_factory, order.id)
    assert transaction.transaction_reference == f"TXN-{order.id[:8]}-{order.order_number}"
    assert transaction.transaction_metadata["created_from_status_update"] is True
    assert transaction.payment_provider == "cash"
    assert transaction.status == TransactionStatus.SUCCESS.value


@pytest.mark.asyncio
async def test_refund_keeps_transaction_outcome(place_order, status_service, session_factory):
    order = await place_order()
    await status_service.update_payment_status(order.id, PaymentStatus.PAID)

    await status_service.update_payment_status(order.id, PaymentStatus.REFUNDED)

    [transaction] = await transactions_for(session_factory, order.id)
    assert transaction.status == TransactionStatus.SUCCESS.value
    assert transaction.payment_status == PaymentStatus.REFUNDED.value


@pytest.mark.asyncio
async def test_paid_cannot_become_failed(place_order, status_service):
    order = await place_order()
    await status_service.update_payment_status(order.id, PaymentStatus.PAID)

    with pytest.raises(InvalidStatusTransition):
        await status_service.update_payment_status(order.id, PaymentStatus.FAILED)


@pytest.mark.asyncio
async def test_owner_cancels_pending_order(place_order, status_service, session_factory, email_notifier, event_bus):
    order = await place_order()

    cancelled = await status_service.cancel(order.id, CUSTOMER, reason="Ordered twice")

    assert cancelled.status == OrderStatus.CANCELLED
    assert cancelled.payment_status == PaymentStatus.FAILED
    assert cancelled.notes == "Ordered twice"
    [transaction] = await transactions_for(session_factory, order.id)
    assert transaction.status == TransactionStatus.FAILED.value
    [email] = email_notifier.of_kind("order_cancellation")
    assert email["cancelled_by"] == "customer"
    assert email["reason"] == "Ordered twice"
    assert isinstance(event_bus.published[-1], OrderCancelledEvent)


@pytest.mark.asyncio
async def test_admin_cancel_keeps_payment_status(place_order, status_service, email_notifier):
    order = await place_order()
    await status_service.update_status(order.id, OrderStatus.PROCESSING)

    cancelled = await status_service.cancel(order.id, ADMIN)

    assert cancelled.status == OrderStatus.CANCELLED
    assert cancelled.payment_status == PaymentStatus.PENDING
    [email] = email_notifier.of_kind("order_cancellation")
    assert email["cancelled_by"] == "admin"
    assert email["reason"] == "Cancelled by admin"


@pytest.mark.asyncio
async def test_stranger_cannot_cancel(place_order, status_service):
    order = await place_order()

    with pytest.raises(AuthorizationError):
        await status_service.cancel(order.id, STRANGER)


@pytest.mark.asyncio
async def test_customer_cannot_cancel_shipped_order(place_order, status_service):
    order = await place_order()
    await status_service.update_status(order.id, OrderStatus.SHIPPED)

    with pytest.raises(InvalidStatusTransition) as exc_info:
        await status_service.cancel(order.id, CUSTOMER)

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_cancelled_order_cannot_be_cancelled_again(place_order, status_service):
    order = await place_order()
    await status_service.cancel(order.id, CUSTOMER)

    with pytest.raises(InvalidStatusTransition):
        await status_service.cancel(order.id, ADMIN)


@pytest.mark.asyncio
async def test_update_details_recomputes_total(place_order, status_service, session_factory, email_notifier):
    order = await place_order()

    updated = await status_service.update_details(order.id, shipping_fee=Decimal("35"), notes="Express")

    assert updated.total == Decimal("235.00")
    async with session_factory() as session:
        stored = await session.get(OrderModel, order.id)
    assert stored.shipping_fee == Decimal("35.00")
    assert stored.total == Decimal("235.00")
    [email] = email_notifier.of_kind("order_update")
    assert email["changes"]["old_shipping_fee"] == Decimal("20.00")
    assert email["changes"]["shipping_fee"] == Decimal("35.00")


@pytest.mark.asyncio
async def test_update_details_without_changes_sends_nothing(place_order, status_service, email_notifier):
    order = await place_order()

    await status_service.update_details(order.id, shipping_fee=Decimal("20"))

    assert email_notifier.of_kind("order_update") == []
