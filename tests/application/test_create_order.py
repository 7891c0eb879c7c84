"""
Tests for CreateOrderUseCase.

Runs against in-memory SQLite with the real repositories and unit of work.
"""
import logging
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from core.application.actor import Actor
from core.application.commands import CreateOrderCommand
from core.application.use_cases.create_order import CreateOrderUseCase
from core.data.models import (
    CustomerModel,
    DealProductModel,
    DiscountModel,
    OrderModel,
    ProductModel,
    TransactionModel,
)
from core.data.repositories import (
    SqlAlchemyDiscountRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyProductRepository,
)
from core.data.uow import create_uow
from core.domain.enums import PaymentStatus, TransactionStatus
from core.domain.events import OrderCreatedEvent
from core.domain.exceptions import (
    CustomerNotFound,
    DuplicatePaymentReference,
    InvalidDiscount,
    MissingAddress,
    MissingItems,
    ValidationError,
)
from core.domain.value_objects import OrderNumber
from core.settings.modules.checkout_settings import CheckoutSettings
from tests.conftest import FIXED_NOW, address, deal_row, discount_row, product_row

MOUSE_ID = "prod-mouse"


def mouse_line(quantity: int = 2) -> dict:
    return {
        "product_id": MOUSE_ID,
        "product_name": "Wireless Mouse",
        "quantity": quantity,
        "unit_price": "100.00",
    }


def command(**overrides) -> CreateOrderCommand:
    values = {
        "items": [mouse_line()],
        "delivery_address": address(),
        "delivery_option": {"name": "Standard", "price": "20.00"},
        "payment_method": "cash_on_delivery",
    }
    values.update(overrides)
    return CreateOrderCommand(**values)


async def fetch(session_factory, model, *conditions):
    async with session_factory() as session:
        result = await session.execute(select(model).where(*conditions))
        return result.scalars().all()


@pytest.mark.asyncio
async def test_order_with_percentage_discount(create_order, seed, session_factory, event_bus):
    await seed(product_row(MOUSE_ID, stock=10), discount_row("SAVE10"))

    order = await create_order.execute(command(discount_code="save10"))

    assert order.order_number == "ORD-001191026"
    assert order.subtotal == Decimal("200.00")
    assert order.discount == Decimal("20.00")
    assert order.shipping_fee == Decimal("20.00")
    assert order.total == Decimal("200.00")
    assert order.discount_code == "SAVE10"
    assert order.payment_status == PaymentStatus.PENDING
    assert order.total == order.subtotal - order.discount + order.tax + order.shipping_fee

    [stored] = await fetch(session_factory, OrderModel, OrderModel.id == order.id)
    assert stored.total == Decimal("200.00")

    [product] = await fetch(session_factory, ProductModel, ProductModel.id == MOUSE_ID)
    assert product.stock_quantity == 8

    [discount] = await fetch(session_factory, DiscountModel, DiscountModel.code == "SAVE10")
    assert discount.used_count == 1

    assert [type(event) for event in event_bus.published] == [OrderCreatedEvent]


@pytest.mark.asyncio
async def test_free_shipping_waives_delivery_fee(create_order, seed):
    await seed(product_row(MOUSE_ID), discount_row("FREESHIP", type="free_shipping", value="0"))

    order = await create_order.execute(command(discount_code="FREESHIP"))

    assert order.discount == Decimal("20.00")
    assert order.shipping_fee == Decimal("20.00")
    assert order.total == Decimal("200.00")
    assert order.shipping_address.delivery_option.price == Decimal("20.00")


@pytest.mark.asyncio
async def test_invalid_discount_is_ignored_by_default(create_order, seed, session_factory):
    await seed(product_row(MOUSE_ID), discount_row("OLD10", is_active=False))

    order = await create_order.execute(command(discount_code="OLD10"))

    assert order.discount == Decimal("0.00")
    assert order.discount_code is None
    assert order.total == Decimal("220.00")


@pytest.mark.asyncio
async def test_invalid_discount_rejected_in_strict_mode(session_factory, event_bus, seed):
    await seed(product_row(MOUSE_ID))
    use_case = CreateOrderUseCase(
        session_factory,
        event_bus,
        checkout=CheckoutSettings(strict_discount_codes=True),
        clock=lambda: FIXED_NOW,
    )

    with pytest.raises(InvalidDiscount) as exc_info:
        await use_case.execute(command(discount_code="NOPE"))

    assert exc_info.value.status_code == 400
    assert await fetch(session_factory, OrderModel) == []


@pytest.mark.asyncio
async def test_deal_item_gets_snapshot_and_stock_update(create_order, seed, session_factory):
    await seed(deal_row("deal-headphones", stock=5))

    order = await create_order.execute(
        command(
            items=[
                {
                    "id": "deal-headphones",
                    "name": "Noise Cancelling Headphones",
                    "price": "150.00",
                    "quantity": 1,
                }
            ],
            delivery_option=None,
            delivery_fee=Decimal("0"),
        )
    )

    [item] = order.items
    assert item.product_id is None
    assert item.deal_product_id == "deal-headphones"
    assert item.deal_snapshot.deal_id == "deal-42"
    assert item.deal_snapshot.original_price == Decimal("200.00")
    assert item.deal_snapshot.image == "https://cdn.example.com/headphones.png"
    assert order.total == Decimal("150.00")

    [deal] = await fetch(session_factory, DealProductModel, DealProductModel.id == "deal-headphones")
    assert deal.stock_quantity == 4


@pytest.mark.asyncio
async def test_unknown_product_still_places_order(create_order):
    order = await create_order.execute(
        command(items=[{"id": "standalone-1", "name": "Gift Card", "price": "50", "quantity": 2}])
    )

    assert order.subtotal == Decimal("100.00")
    assert order.items[0].deal_snapshot.deal_product_id == "standalone-1"


@pytest.mark.asyncio
async def test_transaction_created_for_order(create_order, seed, session_factory):
    await seed(product_row(MOUSE_ID))

    order = await create_order.execute(command(payment_reference="TXN-ABC123"))

    [transaction] = await fetch(
        session_factory, TransactionModel, TransactionModel.transaction_reference == "TXN-ABC123"
    )
    assert transaction.order_id == order.id
    assert transaction.amount == Decimal("220.00")
    assert transaction.status == TransactionStatus.PENDING.value
    assert transaction.transaction_metadata["order_number"] == order.order_number


@pytest.mark.asyncio
async def test_existing_transaction_is_linked(create_order, seed, session_factory):
    await seed(
        product_row(MOUSE_ID),
        TransactionModel(
            id="txn-1",
            transaction_reference="TXN-PREPAID",
            amount=Decimal("220.00"),
            currency="GHS",
            status="pending",
            payment_status="pending",
            payment_provider="paystack",
            transaction_metadata={"channel": "card"},
            initiated_at=FIXED_NOW,
            created_at=FIXED_NOW,
            updated_at=FIXED_NOW,
        ),
    )

    order = await create_order.execute(
        command(payment_reference="TXN-PREPAID", payment_method="paystack", payment_confirmed=True)
    )

    assert order.payment_status == PaymentStatus.PAID
    [transaction] = await fetch(session_factory, TransactionModel)
    assert transaction.id == "txn-1"
    assert transaction.order_id == order.id
    assert transaction.status == TransactionStatus.SUCCESS.value
    assert transaction.transaction_metadata["channel"] == "card"


@pytest.mark.asyncio
async def test_duplicate_payment_reference(create_order, seed):
    await seed(product_row(MOUSE_ID))
    await create_order.execute(command(payment_reference="TXN-ABC123"))

    with pytest.raises(DuplicatePaymentReference) as exc_info:
        await create_order.execute(command(payment_reference="TXN-ABC123"))

    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_order_numbers_increment(create_order):
    first = await create_order.execute(command())
    second = await create_order.execute(command())

    assert (first.order_number, second.order_number) == ("ORD-001191026", "ORD-002191026")


@pytest.mark.asyncio
async def test_guest_customer_created_and_reused(create_order, session_factory):
    first = await create_order.execute(command())
    second = await create_order.execute(command(delivery_address=address(email="AMA@example.com")))

    customers = await fetch(session_factory, CustomerModel)
    assert len(customers) == 1
    assert customers[0].source == "guest_checkout"
    assert first.customer_id == second.customer_id == customers[0].id


@pytest.mark.asyncio
async def test_signed_in_customer_owns_order(create_order):
    actor = Actor(id="user-7", email="kofi@example.com", role="customer")

    order = await create_order.execute(command(actor=actor))

    assert order.user_id == "user-7"


@pytest.mark.asyncio
async def test_admin_placed_order_is_not_owned_by_admin(create_order, session_factory):
    actor = Actor(id="admin-1", role="admin")

    order = await create_order.execute(command(actor=actor))

    assert order.user_id is None
    [customer] = await fetch(session_factory, CustomerModel)
    assert customer.source == "admin_manual_order"
    assert customer.created_by == "admin-1"


@pytest.mark.asyncio
async def test_unknown_customer_id(create_order):
    with pytest.raises(CustomerNotFound):
        await create_order.execute(command(customer_id="missing"))


@pytest.mark.asyncio
async def test_missing_items_and_address(create_order):
    with pytest.raises(MissingItems):
        await create_order.execute(command(items=[]))
    with pytest.raises(MissingAddress):
        await create_order.execute(command(delivery_address=None))


@pytest.mark.asyncio
async def test_emails_sent_after_commit(create_order, email_notifier):
    await create_order.execute(command())

    [confirmation] = email_notifier.of_kind("order_confirmation")
    assert confirmation["recipient"] == "ama@example.com"
    [admin] = email_notifier.of_kind("admin_order_notification")
    assert admin["recipient"] == "admin@example.com"


async def lost_usage_race(self, discount_id):
    return False


@pytest.mark.asyncio
async def test_discount_dropped_when_last_use_is_taken(create_order, seed, session_factory, monkeypatch):
    await seed(product_row(MOUSE_ID), discount_row("ONCE", usage_limit=1))
    monkeypatch.setattr(SqlAlchemyDiscountRepository, "increment_usage", lost_usage_race)

    order = await create_order.execute(command(discount_code="ONCE"))

    assert order.discount == Decimal("0.00")
    assert order.discount_code is None
    assert order.total == Decimal("220.00")
    [stored] = await fetch(session_factory, OrderModel, OrderModel.id == order.id)
    assert stored.discount == Decimal("0.00")
    assert stored.discount_code is None
    [transaction] = await fetch(session_factory, TransactionModel)
    assert transaction.amount == Decimal("220.00")


@pytest.mark.asyncio
async def test_lost_usage_race_fails_order_in_strict_mode(session_factory, event_bus, seed, monkeypatch):
    await seed(product_row(MOUSE_ID), discount_row("ONCE", usage_limit=1))
    monkeypatch.setattr(SqlAlchemyDiscountRepository, "increment_usage", lost_usage_race)
    use_case = CreateOrderUseCase(
        session_factory,
        event_bus,
        checkout=CheckoutSettings(strict_discount_codes=True),
        clock=lambda: FIXED_NOW,
    )

    with pytest.raises(InvalidDiscount):
        await use_case.execute(command(discount_code="ONCE"))

    assert await fetch(session_factory, OrderModel) == []
    [product] = await fetch(session_factory, ProductModel)
    assert product.stock_quantity == 10


@pytest.mark.asyncio
async def test_usage_counter_stops_at_limit(seed, session_factory):
    full = discount_row("FULL", id="disc-full", usage_limit=2, used_count=2)
    open_ended = discount_row("OPEN", id="disc-open", usage_limit=None, used_count=7)
    await seed(full, open_ended)

    async with create_uow(session_factory) as uow:
        assert await uow.discounts.increment_usage("disc-full") is False
        assert await uow.discounts.increment_usage("disc-open") is True
        await uow.commit()

    [stored_full] = await fetch(session_factory, DiscountModel, DiscountModel.code == "FULL")
    [stored_open] = await fetch(session_factory, DiscountModel, DiscountModel.code == "OPEN")
    assert stored_full.used_count == 2
    assert stored_open.used_count == 8


@pytest.mark.asyncio
async def test_stock_never_goes_negative(create_order, seed, session_factory):
    await seed(product_row(MOUSE_ID, stock=1))

    await create_order.execute(command(items=[mouse_line(quantity=3)]))

    [product] = await fetch(session_factory, ProductModel, ProductModel.id == MOUSE_ID)
    assert product.stock_quantity == 0
    assert product.in_stock is False


@pytest.mark.asyncio
async def test_stock_failure_does_not_roll_back_order(create_order, seed, session_factory, monkeypatch, caplog):
    await seed(product_row(MOUSE_ID, stock=10))

    async def broken_decrement(self, product_id, quantity):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(SqlAlchemyProductRepository, "decrement_stock", broken_decrement)

    with caplog.at_level(logging.WARNING):
        order = await create_order.execute(command(payment_reference="TXN-STOCK"))

    [stored] = await fetch(session_factory, OrderModel, OrderModel.id == order.id)
    assert stored.total == Decimal("220.00")
    [transaction] = await fetch(session_factory, TransactionModel)
    assert transaction.order_id == order.id
    [product] = await fetch(session_factory, ProductModel)
    assert product.stock_quantity == 10
    assert "Stock update failed" in caplog.text


@pytest.mark.asyncio
async def test_client_order_number_is_used(create_order):
    order = await create_order.execute(command(order_number=" ord-123191026 "))

    assert order.order_number == "ORD-123191026"


@pytest.mark.asyncio
async def test_malformed_client_order_number(create_order, session_factory):
    with pytest.raises(ValidationError) as exc_info:
        await create_order.execute(command(order_number="12345"))

    assert exc_info.value.code == "INVALID_ORDER_NUMBER"
    assert await fetch(session_factory, OrderModel) == []


@pytest.mark.asyncio
async def test_taken_client_order_number_gets_a_generated_one(create_order, session_factory):
    first = await create_order.execute(command(order_number="ORD-050191026"))
    second = await create_order.execute(command(order_number="ORD-050191026"))

    assert first.order_number == "ORD-050191026"
    assert second.order_number != first.order_number
    assert OrderNumber(second.order_number).date_suffix == "191026"
    assert len(await fetch(session_factory, OrderModel)) == 2


@pytest.mark.asyncio
async def test_order_number_fallback_never_issues_zero(create_order, monkeypatch):
    async def lookup_fails(self, suffix):
        raise SQLAlchemyError("connection reset")

    monkeypatch.setattr(SqlAlchemyOrderRepository, "last_order_number_with_suffix", lookup_fails)
    # 1_760_000_000_000 ms is a multiple of 1000
    monkeypatch.setattr(
        "core.application.use_cases.create_order.time", SimpleNamespace(time=lambda: 1_760_000_000.0)
    )

    order = await create_order.execute(command())

    assert OrderNumber(order.order_number).sequence == 762
