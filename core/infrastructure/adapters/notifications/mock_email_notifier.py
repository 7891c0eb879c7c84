"""
Mock Email Notifier Implementation.

Records order emails instead of delivering them. Template rendering and SMTP
delivery live in the storefront's mail service.
"""
import logging
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from core.application.interfaces import EmailResult, IEmailNotifier
from core.domain.entities.order import Order


logger = logging.getLogger(__name__)

DEFAULT_HISTORY = 100


class MockEmailNotifier(IEmailNotifier):
    """Console email notifier; keeps the last ``history`` messages in ``sent``."""

    def __init__(self, history: int = DEFAULT_HISTORY):
        self.sent: Deque[Dict[str, Any]] = deque(maxlen=history)

    async def send_order_confirmation(self, order: Order, recipient: str) -> EmailResult:
        return self._record("order_confirmation", order, recipient)

    async def send_admin_order_notification(self, order: Order, recipient: str) -> EmailResult:
        return self._record("admin_order_notification", order, recipient)

    async def send_order_status_update(
        self, order: Order, recipient: str, previous_status: str
    ) -> EmailResult:
        return self._record(
            "order_status_update",
            order,
            recipient,
            previous_status=previous_status,
            new_status=order.status.value,
        )

    async def send_order_cancellation(
        self, order: Order, recipient: str, cancelled_by: str, reason: Optional[str]
    ) -> EmailResult:
        return self._record(
            "order_cancellation", order, recipient, cancelled_by=cancelled_by, reason=reason
        )

    async def send_order_update(
        self, order: Order, recipient: str, changes: Dict[str, Any]
    ) -> EmailResult:
        return self._record("order_update", order, recipient, changes=dict(changes))

    def of_kind(self, kind: str) -> List[Dict[str, Any]]:
        """Sent messages of one kind (for testing)."""
        return [message for message in self.sent if message["kind"] == kind]

    def _record(self, kind: str, order: Order, recipient: str, **details) -> EmailResult:
        self.sent.append(
            {
                "kind": kind,
                "recipient": recipient,
                "order_number": order.order_number,
                **details,
            }
        )
        logger.info(f"📧 {kind} email for {order.order_number} -> {recipient}")
        return EmailResult.sent()
