"""Tests for InMemoryEventBus."""

from decimal import Decimal

import pytest

from core.application.services.admin_alerts import AdminOrderAlertSubscriber
from core.domain.events import OrderCancelledEvent, OrderCreatedEvent, OrderStatusChangedEvent
from core.infrastructure.adapters.notifications.mock_notification_service import MockNotificationService
from core.infrastructure.event_bus import InMemoryEventBus


def created_event() -> OrderCreatedEvent:
    return OrderCreatedEvent(
        order_id="order-1",
        order_number="ORD-001191026",
        total=Decimal("200.00"),
        currency="GHS",
        payment_method="paystack",
    )


@pytest.mark.asyncio
async def test_event_bus_subscribe_and_publish():
    """Sync and async subscribers both receive the event."""
    bus = InMemoryEventBus()
    sync_received = []
    async_received = []

    async def async_handler(event):
        async_received.append(event)

    bus.subscribe(sync_received.append)
    bus.subscribe(async_handler)

    event = created_event()
    await bus.publish(event)

    assert sync_received == [event]
    assert async_received == [event]
    assert event.aggregate_id == "order-1"


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_affect_others():
    bus = InMemoryEventBus()
    received = []

    async def broken(event):
        raise RuntimeError("smtp down")

    bus.subscribe(broken)
    bus.subscribe(received.append)

    await bus.publish_all([created_event(), created_event()])

    assert len(received) == 2


@pytest.mark.asyncio
async def test_unsubscribe():
    bus = InMemoryEventBus()
    received = []
    bus.subscribe(received.append)
    bus.unsubscribe(received.append)

    await bus.publish(created_event())

    assert received == []


@pytest.mark.asyncio
async def test_admin_alert_subscriber_messages():
    notifications = MockNotificationService()
    bus = InMemoryEventBus()
    bus.subscribe(AdminOrderAlertSubscriber(notifications))

    await bus.publish_all(
        [
            created_event(),
            OrderStatusChangedEvent(order_id="order-1", previous_status="pending", new_status="shipped"),
            OrderCancelledEvent(
                order_id="order-1",
                order_number="ORD-001191026",
                cancelled_by="customer",
                reason="Ordered twice",
            ),
        ]
    )

    sent = notifications.get_notifications()
    assert [n["message"] for n in sent] == [
        "New Order: ORD-001191026 - GHS 200.00 via paystack",
        "Order Cancelled: ORD-001191026 by customer (Ordered twice)",
    ]
    assert sent[0]["severity"] == 30


@pytest.mark.asyncio
async def test_bus_keeps_no_event_history():
    bus = InMemoryEventBus()

    await bus.publish_all([created_event() for _ in range(3)])

    assert not hasattr(bus, "published")


@pytest.mark.asyncio
async def test_mock_notification_history_is_bounded():
    notifications = MockNotificationService(history=2)

    for number in range(5):
        await notifications.notify(f"alert {number}")

    assert [n["message"] for n in notifications.get_notifications()] == ["alert 3", "alert 4"]
