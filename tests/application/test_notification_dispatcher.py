"""Tests for NotificationDispatcher and StoreSettingsService toggles."""
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from core.application.services.notification_dispatcher import NotificationDispatcher, recipient_for
from core.application.services.store_settings_service import StoreSettingsService
from core.domain.entities.customer import Customer
from core.domain.entities.order import Order
from core.domain.enums import OrderStatus
from core.domain.value_objects import ShippingAddress
from core.infrastructure.cache import TTLCache
from core.settings.modules.notification_settings import NotificationSettings
from tests.conftest import setting_row


def shipped_order() -> Order:
    return Order(
        order_number="ORD-003191026",
        subtotal=Decimal("80.00"),
        total=Decimal("90.00"),
        shipping_fee=Decimal("10.00"),
        shipping_address=ShippingAddress(email="typed@example.com"),
        status=OrderStatus.SHIPPED,
    )


def test_recipient_prefers_customer_email():
    order = shipped_order()

    assert recipient_for(order, Customer(email="Ama@Example.com")) == "ama@example.com"
    assert recipient_for(order, Customer(email=None, phone="+233")) == "typed@example.com"
    assert recipient_for(order) == "typed@example.com"


@pytest.mark.asyncio
async def test_status_email_sent(dispatcher, email_notifier):
    result = await dispatcher.status_changed(shipped_order(), "ama@example.com", "processing")

    assert result.success is True
    assert email_notifier.of_kind("order_status_update")[0]["previous_status"] == "processing"


@pytest.mark.asyncio
async def test_master_toggle_disables_everything(dispatcher, email_notifier, seed):
    await seed(setting_row("email_notifications_enabled", "false"))

    results = await dispatcher.order_created(shipped_order(), "ama@example.com")

    assert all(result.skipped for result in results.values())
    assert list(email_notifier.sent) == []


@pytest.mark.asyncio
async def test_status_without_toggle_always_sent(dispatcher, email_notifier, seed):
    await seed(setting_row("email_order_shipped", "no"))
    order = shipped_order()
    order.status = OrderStatus.PROCESSING

    result = await dispatcher.status_changed(order, "ama@example.com", "pending")

    assert result.success is True


@pytest.mark.asyncio
async def test_missing_recipient_is_skipped(dispatcher):
    result = await dispatcher.order_cancelled(shipped_order(), None, "admin", None)

    assert result.skipped is True
    assert result.reason == "No recipient email"


@pytest.mark.asyncio
async def test_admin_email_skipped_without_address(email_notifier, store_settings):
    dispatcher = NotificationDispatcher(email_notifier, store_settings, NotificationSettings(ADMIN_EMAIL=None))

    results = await dispatcher.order_created(shipped_order(), "ama@example.com")

    assert results["confirmation"].success is True
    assert results["admin"].skipped is True


@pytest.mark.asyncio
async def test_mailer_exception_becomes_failed_result(email_notifier, store_settings, notification_settings):
    email_notifier.send_order_update = AsyncMock(side_effect=RuntimeError("SMTP timeout"))
    dispatcher = NotificationDispatcher(email_notifier, store_settings, notification_settings)

    result = await dispatcher.order_updated(shipped_order(), "ama@example.com", {"notes": "x"})

    assert result.success is False
    assert result.skipped is False
    assert result.reason == "SMTP timeout"


@pytest.mark.asyncio
async def test_store_settings_are_cached(session_factory, seed):
    service = StoreSettingsService(session_factory, TTLCache(ttl_seconds=300))
    await seed(setting_row("free_shipping_threshold", "500"))

    assert await service.get_number_setting("free_shipping_threshold", Decimal("0")) == Decimal("500")

    await seed(setting_row("email_order_delivered", "false"))
    assert await service.is_enabled("email_order_delivered") is True

    service.invalidate()
    assert await service.is_enabled("email_order_delivered") is False


@pytest.mark.asyncio
async def test_unparseable_settings_fall_back(session_factory, seed):
    service = StoreSettingsService(session_factory)
    await seed(setting_row("free_shipping_threshold", "lots"), setting_row("email_order_shipped", "maybe"))

    assert await service.get_number_setting("free_shipping_threshold", Decimal("100")) == Decimal("100")
    assert await service.is_enabled("email_order_shipped", default=False) is False
