"""
Notification dispatcher.

Decides whether an order email goes out (store toggles, recipient present)
and makes sure a failing mailer never fails the request that triggered it.
"""
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from core.application.interfaces import EmailResult, IEmailNotifier
from core.application.services.store_settings_service import StoreSettingsService
from core.domain.entities.customer import Customer
from core.domain.entities.order import Order
from core.domain.enums import OrderStatus
from core.settings.modules.notification_settings import NotificationSettings


logger = logging.getLogger(__name__)

MASTER_TOGGLE = "email_notifications_enabled"
CONFIRMATION_TOGGLE = "email_order_confirmation"
SHIPPED_TOGGLE = "email_order_shipped"
DELIVERED_TOGGLE = "email_order_delivered"

_STATUS_TOGGLES = {
    OrderStatus.SHIPPED: SHIPPED_TOGGLE,
    OrderStatus.DELIVERED: DELIVERED_TOGGLE,
}


def recipient_for(order: Order, customer: Optional[Customer] = None) -> Optional[str]:
    """Customer email, falling back to the email typed into the address."""
    if customer is not None and customer.email:
        return customer.email
    return order.shipping_address.email


class NotificationDispatcher:
    """Gatekeeper in front of the email notifier."""

    def __init__(
        self,
        email_notifier: IEmailNotifier,
        store_settings: StoreSettingsService,
        settings: Optional[NotificationSettings] = None,
    ):
        self.email_notifier = email_notifier
        self.store_settings = store_settings
        self.settings = settings or NotificationSettings()

    async def order_created(self, order: Order, recipient: Optional[str]) -> Dict[str, EmailResult]:
        """Customer confirmation plus the admin new-order email."""
        results = {
            "confirmation": await self._dispatch(
                "order confirmation",
                CONFIRMATION_TOGGLE,
                recipient,
                lambda to: self.email_notifier.send_order_confirmation(order, to),
            ),
            "admin": await self._dispatch(
                "admin order notification",
                None,
                self.settings.admin_email,
                lambda to: self.email_notifier.send_admin_order_notification(order, to),
            ),
        }
        return results

    async def status_changed(
        self, order: Order, recipient: Optional[str], previous_status: str
    ) -> EmailResult:
        return await self._dispatch(
            f"{order.status.value} status update",
            _STATUS_TOGGLES.get(order.status),
            recipient,
            lambda to: self.email_notifier.send_order_status_update(order, to, previous_status),
        )

    async def order_cancelled(
        self, order: Order, recipient: Optional[str], cancelled_by: str, reason: Optional[str]
    ) -> EmailResult:
        return await self._dispatch(
            "order cancellation",
            None,
            recipient,
            lambda to: self.email_notifier.send_order_cancellation(order, to, cancelled_by, reason),
        )

    async def order_updated(
        self, order: Order, recipient: Optional[str], changes: Dict[str, Any]
    ) -> EmailResult:
        return await self._dispatch(
            "order update",
            None,
            recipient,
            lambda to: self.email_notifier.send_order_update(order, to, changes),
        )

    async def _dispatch(
        self,
        label: str,
        toggle: Optional[str],
        recipient: Optional[str],
        send: Callable[[str], Awaitable[EmailResult]],
    ) -> EmailResult:
        try:
            if not await self._enabled(MASTER_TOGGLE):
                result = EmailResult.skip("Email notifications are disabled")
            elif toggle and not await self._enabled(toggle):
                result = EmailResult.skip(f"{toggle} is disabled")
            elif not recipient:
                result = EmailResult.skip("No recipient email")
            else:
                result = await send(recipient)
        except Exception as e:
            logger.error(f"❌ Failed to send {label} email: {e}", exc_info=True)
            return EmailResult.failed(str(e))

        if result.skipped:
            logger.info(f"{label} email skipped: {result.reason}")
        elif result.success:
            logger.info(f"✅ {label} email sent to {recipient}")
        else:
            logger.error(f"❌ {label} email failed: {result.reason}")
        return result

    async def _enabled(self, key: str) -> bool:
        return await self.store_settings.is_enabled(key, self.settings.default_for(key))
