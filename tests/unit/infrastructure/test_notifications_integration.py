"""
Unit tests for operator notification adapters.
"""
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.application.services.admin_alerts import AdminOrderAlertSubscriber
from core.domain.events import OrderCreatedEvent, PaymentStatusChangedEvent
from core.infrastructure.adapters.notifications.mock_email_notifier import MockEmailNotifier
from core.infrastructure.adapters.notifications.mock_notification_service import MockNotificationService
from core.infrastructure.adapters.notifications.slack_notification_service import SlackNotificationService
from core.settings.modules.integrations_settings import SlackSettings


@pytest.fixture
def mock_notification_service():
    """Create a mock notification service for testing."""
    return MockNotificationService()


@pytest.mark.asyncio
async def test_new_order_alert_is_sent(mock_notification_service):
    subscriber = AdminOrderAlertSubscriber(mock_notification_service)

    await subscriber(
        OrderCreatedEvent(
            order_id="order-1",
            order_number="ORD-007191026",
            total=Decimal("99.50"),
            payment_method=None,
        )
    )

    notifications = mock_notification_service.get_notifications()
    assert len(notifications) == 1
    assert notifications[0]["message"] == "New Order: ORD-007191026 - GHS 99.50 via unspecified"
    assert notifications[0]["severity"] == 30


@pytest.mark.asyncio
async def test_other_events_are_not_alerted(mock_notification_service):
    subscriber = AdminOrderAlertSubscriber(mock_notification_service)

    await subscriber(PaymentStatusChangedEvent(order_id="order-1", previous_status="pending", new_status="paid"))

    assert mock_notification_service.get_notifications() == []


@pytest.mark.asyncio
async def test_mock_clear(mock_notification_service):
    await mock_notification_service.notify("Webhook signature mismatch", severity=80)
    assert len(mock_notification_service.get_notifications()) == 1

    mock_notification_service.clear()

    assert mock_notification_service.get_notifications() == []


@pytest.mark.asyncio
async def test_slack_without_webhook_url_skips(monkeypatch):
    service = SlackNotificationService(SlackSettings(webhook_url=""))
    session_cls = MagicMock()
    monkeypatch.setattr(
        "core.infrastructure.adapters.notifications.slack_notification_service.aiohttp.ClientSession",
        session_cls,
    )

    await service.notify("New Order: ORD-001191026")

    session_cls.assert_not_called()


@pytest.mark.asyncio
async def test_slack_message_uses_prefix_and_severity_color(monkeypatch):
    service = SlackNotificationService(
        SlackSettings(webhook_url="https://hooks.slack.test/T000", prefix="[SHOP]")
    )
    service._send_message = AsyncMock()

    await service.notify("Order Cancelled: ORD-001191026 by admin", severity=50)

    service._send_message.assert_awaited_once_with(
        "[SHOP] Order Cancelled: ORD-001191026 by admin", color="warning"
    )


@pytest.mark.asyncio
async def test_mock_email_history_is_bounded():
    notifier = MockEmailNotifier(history=3)
    orders = [MagicMock(order_number=f"ORD-00{n}191026") for n in range(1, 6)]

    for order in orders:
        await notifier.send_order_confirmation(order, "ama@example.com")

    assert [m["order_number"] for m in notifier.of_kind("order_confirmation")] == [
        "ORD-003191026",
        "ORD-004191026",
        "ORD-005191026",
    ]
