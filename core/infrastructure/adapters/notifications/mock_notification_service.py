"""
Mock Notification Service Implementation.

This simulates operator alerts for testing and local runs.
"""
import logging
from collections import deque
from typing import Deque, Dict, List

from core.application.interfaces import INotificationService


logger = logging.getLogger(__name__)

DEFAULT_HISTORY = 100


class MockNotificationService(INotificationService):
    """
    Mock implementation of notification service.

    Logs notifications instead of actually sending them and keeps the most
    recent ``history`` of them.
    """

    def __init__(self, history: int = DEFAULT_HISTORY):
        """Initialize mock notification service."""
        self.notifications_sent: Deque[Dict] = deque(maxlen=history)
        logger.info("MockNotificationService initialized (console logging)")

    async def notify(self, message: str, severity: int = 50) -> None:
        """
        Record a notification message.

        Args:
            message: Notification message
            severity: Severity level (0-100, higher = more critical)
        """
        self.notifications_sent.append({"message": message, "severity": severity})

        severity_emoji = "🔴" if severity >= 80 else "🟡" if severity >= 50 else "🟢"
        logger.info(f"{severity_emoji} 🔔 NOTIFICATION (severity={severity}): {message}")

    def get_notifications(self) -> List[Dict]:
        """Get the retained notifications, oldest first (for testing)."""
        return list(self.notifications_sent)

    def clear(self) -> None:
        """Clear notifications (for testing)."""
        self.notifications_sent.clear()
