"""Tests for PaymentService (gateway verification and manual linking)."""
from decimal import Decimal

import pytest
from sqlalchemy import select

from core.application.commands import CreateOrderCommand
from core.application.dtos.payment_dto import InitializePaymentRequest, LinkOrderRequest
from core.application.services.payment_service import PaymentService
from core.data.models import TransactionModel
from core.domain.enums import PaymentStatus, TransactionStatus
from core.domain.exceptions import DomainError, NotFoundError, PaymentGatewayError
from tests.conftest import address
from tests.mocks.mock_payment_gateway import MockPaymentGateway


@pytest.fixture
def gateway() -> MockPaymentGateway:
    return MockPaymentGateway()


@pytest.fixture
def payment_service(session_factory, gateway) -> PaymentService:
    return PaymentService(session_factory, gateway)


@pytest.fixture
def place_order(create_order):
    async def _place(reference=None):
        return await create_order.execute(
            CreateOrderCommand(
                items=[{"id": "deal-1", "name": "Speaker", "price": "150", "quantity": 1}],
                delivery_address=address(),
                delivery_fee=Decimal("30"),
                payment_method="paystack",
                payment_reference=reference,
            )
        )

    return _place


@pytest.mark.asyncio
async def test_initialize_delegates_to_gateway(payment_service, gateway):
    result = await payment_service.initialize(
        InitializePaymentRequest(email="ama@example.com", amount=18000, reference="CHK-1")
    )

    assert result["authorization_url"].endswith("/CHK-1")
    assert gateway.initialized[0]["amount"] == 18000


@pytest.mark.asyncio
async def test_verify_records_new_transaction(payment_service, gateway, session_factory):
    gateway.add_charge("TXN-NEW", metadata={"user_id": "user-1", "channel": "mobile_money"})

    verified = await payment_service.verify("TXN-NEW")

    assert verified.success is True
    assert verified.amount == Decimal("180.00")
    assert verified.transaction.status == TransactionStatus.SUCCESS
    assert verified.transaction.payment_status == PaymentStatus.PAID
    assert verified.transaction.order_id is None
    async with session_factory() as session:
        stored = (await session.execute(select(TransactionModel))).scalar_one()
    assert stored.transaction_reference == "TXN-NEW"
    assert stored.user_id == "user-1"
    assert stored.payment_provider == "paystack"
    assert stored.transaction_metadata["gateway_response"] == "Successful"
    assert stored.transaction_metadata["channel"] == "mobile_money"
    assert stored.paid_at is not None


@pytest.mark.asyncio
async def test_verify_links_order_from_metadata(payment_service, gateway, place_order):
    order = await place_order()
    gateway.add_charge("TXN-LATE", metadata={"order_id": order.id, "user_id": "guest"})

    verified = await payment_service.verify("TXN-LATE")

    assert verified.transaction.order_id == order.id
    assert verified.transaction.user_id is None


@pytest.mark.asyncio
async def test_verify_updates_existing_transaction(payment_service, gateway, place_order, session_factory):
    order = await place_order(reference="TXN-ABC123")
    gateway.add_charge("TXN-ABC123", status="abandoned")

    verified = await payment_service.verify("TXN-ABC123")

    assert verified.success is False
    assert verified.transaction.status == TransactionStatus.FAILED
    assert verified.transaction.order_id == order.id
    async with session_factory() as session:
        rows = (await session.execute(select(TransactionModel))).scalars().all()
    assert len(rows) == 1


@pytest.mark.asyncio
async def test_verify_unknown_reference(payment_service):
    with pytest.raises(PaymentGatewayError) as exc_info:
        await payment_service.verify("TXN-MISSING")

    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_link_order(payment_service, gateway, place_order):
    gateway.add_charge("TXN-ORPHAN")
    await payment_service.verify("TXN-ORPHAN")
    order = await place_order()

    linked = await payment_service.link_order(
        LinkOrderRequest(transaction_reference="TXN-ORPHAN", order_id=order.id)
    )

    assert linked.order_id == order.id


@pytest.mark.asyncio
async def test_link_order_rejects_relinking(payment_service, place_order):
    first = await place_order(reference="TXN-ABC123")
    second = await place_order()

    with pytest.raises(DomainError) as exc_info:
        await payment_service.link_order(
            LinkOrderRequest(transaction_reference="TXN-ABC123", order_id=second.id)
        )

    assert exc_info.value.code == "TRANSACTION_ALREADY_LINKED"
    assert first.id in exc_info.value.message


@pytest.mark.asyncio
async def test_link_order_unknown_records(payment_service, place_order):
    order = await place_order(reference="TXN-ABC123")

    with pytest.raises(NotFoundError):
        await payment_service.link_order(LinkOrderRequest(transaction_reference="nope", order_id=order.id))
    with pytest.raises(NotFoundError):
        await payment_service.link_order(
            LinkOrderRequest(transaction_reference="TXN-ABC123", order_id="missing")
        )
