"""Repository interfaces for Order aggregate."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from ..entities.order import Order
from ..enums import OrderStatus, PaymentStatus


@dataclass(frozen=True)
class OrderFilter:
    """Criteria for listing orders."""

    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    user_id: Optional[str] = None
    has_discount: Optional[bool] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    search: Optional[str] = None


class OrderRepository(ABC):
    """Abstract repository for Order aggregate persistence."""

    @abstractmethod
    async def add(self, order: Order) -> None:
        """Insert a new order with its items.

        Args:
            order: Order aggregate to persist

        Raises:
            sqlalchemy.exc.IntegrityError: on duplicate order number or payment reference
        """
        pass

    @abstractmethod
    async def save(self, order: Order) -> None:
        """Persist changes to an existing order (items are immutable).

        Args:
            order: Order aggregate to persist
        """
        pass

    @abstractmethod
    async def find_by_id(self, order_id: str) -> Optional[Order]:
        """Retrieve order by unique identifier.

        Args:
            order_id: Order UUID

        Returns:
            Order if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_order_number(self, order_number: str) -> Optional[Order]:
        """Retrieve order by its human-readable number."""
        pass

    @abstractmethod
    async def find_by_payment_reference(self, reference: str) -> Optional[Order]:
        """Retrieve the order created for a payment reference."""
        pass

    @abstractmethod
    async def find_all(
        self, criteria: OrderFilter, page: int = 1, limit: int = 20
    ) -> Tuple[List[Order], int]:
        """List orders newest first.

        Args:
            criteria: Filters to apply
            page: 1-based page number
            limit: Page size

        Returns:
            Tuple of (orders on the page, total matching count)
        """
        pass

    @abstractmethod
    async def last_order_number_with_suffix(self, suffix: str) -> Optional[str]:
        """Most recently created order number ending with ``suffix`` (DDMMYY)."""
        pass
