"""Event bus subscriber that alerts operators about order activity."""
import logging

from core.application.interfaces import INotificationService
from core.domain.events import DomainEvent, OrderCancelledEvent, OrderCreatedEvent


logger = logging.getLogger(__name__)


class AdminOrderAlertSubscriber:
    """Forwards new orders (and cancellations) to the operator channel."""

    __name__ = "AdminOrderAlertSubscriber"

    def __init__(self, notification_service: INotificationService):
        self.notification_service = notification_service

    async def __call__(self, event: DomainEvent) -> None:
        if isinstance(event, OrderCreatedEvent):
            await self.notification_service.notify(
                f"New Order: {event.order_number} - {event.currency} {event.total} "
                f"via {event.payment_method or 'unspecified'}",
                severity=30,
            )
        elif isinstance(event, OrderCancelledEvent):
            await self.notification_service.notify(
                f"Order Cancelled: {event.order_number} by {event.cancelled_by}"
                + (f" ({event.reason})" if event.reason else ""),
                severity=50,
            )
