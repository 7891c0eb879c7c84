"""Application layer interfaces."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.domain.entities.order import Order


@dataclass(frozen=True)
class EmailResult:
    """Outcome of one email attempt."""

    success: bool
    skipped: bool = False
    reason: Optional[str] = None

    @classmethod
    def sent(cls) -> "EmailResult":
        return cls(success=True)

    @classmethod
    def skip(cls, reason: str) -> "EmailResult":
        return cls(success=False, skipped=True, reason=reason)

    @classmethod
    def failed(cls, reason: str) -> "EmailResult":
        return cls(success=False, reason=reason)


class IEmailNotifier(ABC):
    """
    Interface for transactional order emails.

    Implementations render and deliver the message; they report the outcome
    instead of raising.
    """

    @abstractmethod
    async def send_order_confirmation(self, order: Order, recipient: str) -> EmailResult:
        """
        Send the order confirmation to the customer.

        Args:
            order: Created order
            recipient: Customer email address
        """
        pass

    @abstractmethod
    async def send_admin_order_notification(self, order: Order, recipient: str) -> EmailResult:
        """Notify the store admin mailbox about a new order."""
        pass

    @abstractmethod
    async def send_order_status_update(
        self, order: Order, recipient: str, previous_status: str
    ) -> EmailResult:
        """
        Tell the customer the order moved to a new status.

        Args:
            order: Order after the change
            recipient: Customer email address
            previous_status: Status before the change
        """
        pass

    @abstractmethod
    async def send_order_cancellation(
        self, order: Order, recipient: str, cancelled_by: str, reason: Optional[str]
    ) -> EmailResult:
        """Tell the customer the order was cancelled (by ``customer`` or ``admin``)."""
        pass

    @abstractmethod
    async def send_order_update(
        self, order: Order, recipient: str, changes: Dict[str, Any]
    ) -> EmailResult:
        """Tell the customer which order details an admin edited."""
        pass


class INotificationService(ABC):
    """
    Interface for notification service operations.

    This interface defines the contract for operator alerts,
    allowing different implementations (Slack, console, etc.)
    """

    @abstractmethod
    async def notify(self, message: str, severity: int = 50) -> None:
        """
        Send a generic notification message.

        Args:
            message: Notification message
            severity: Severity level (0-100, higher = more critical)
        """
        pass


class IPaymentGateway(ABC):
    """
    Interface for the payment gateway REST API.

    Amounts cross this boundary in minor units (pesewas).
    """

    @abstractmethod
    async def initialize_transaction(
        self,
        email: str,
        amount: int,
        reference: Optional[str] = None,
        callback_url: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Start a hosted checkout.

        Returns:
            Gateway ``data`` object (authorization_url, access_code, reference)

        Raises:
            PaymentGatewayError: If the gateway is unreachable or rejects the call
        """
        pass

    @abstractmethod
    async def verify_transaction(self, reference: str) -> Dict[str, Any]:
        """
        Fetch the final state of a charge.

        Returns:
            Gateway ``data`` object (status, amount, currency, paid_at, customer, metadata)

        Raises:
            PaymentGatewayError: If the gateway is unreachable or rejects the call
        """
        pass


__all__ = ["EmailResult", "IEmailNotifier", "INotificationService", "IPaymentGateway"]
