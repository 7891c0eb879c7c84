"""Repository interfaces for discounts, transactions, customers, catalog and settings."""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Set

from ..entities.customer import Customer
from ..entities.discount import Discount
from ..entities.product import DealProduct
from ..entities.transaction import Transaction


class DiscountRepository(ABC):
    """Discount lookups and usage counting."""

    @abstractmethod
    async def find_by_code(self, code: str) -> Optional[Discount]:
        """Find a discount by normalized (upper-case) code, active or not."""
        pass

    @abstractmethod
    async def increment_usage(self, discount_id: str) -> bool:
        """Atomically consume one use if the usage limit allows it.

        Returns:
            True if the counter was incremented, False if the limit was reached
        """
        pass


class TransactionRepository(ABC):
    """Payment transaction persistence keyed by transaction reference."""

    @abstractmethod
    async def find_by_reference(self, reference: str) -> Optional[Transaction]:
        pass

    @abstractmethod
    async def find_by_order(self, order_id: str) -> List[Transaction]:
        pass

    @abstractmethod
    async def add(self, transaction: Transaction) -> None:
        """Insert a transaction (IntegrityError on duplicate reference)."""
        pass

    @abstractmethod
    async def save(self, transaction: Transaction) -> None:
        pass


class CustomerRepository(ABC):
    """Customer directory."""

    @abstractmethod
    async def find_by_id(self, customer_id: str) -> Optional[Customer]:
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[Customer]:
        """Case-insensitive email lookup."""
        pass

    @abstractmethod
    async def find_by_phone(self, phone: str) -> Optional[Customer]:
        pass

    @abstractmethod
    async def save(self, customer: Customer) -> None:
        """Insert or update."""
        pass


class ProductRepository(ABC):
    """Catalog stock operations."""

    @abstractmethod
    async def existing_ids(self, product_ids: Iterable[str]) -> Set[str]:
        """Subset of ``product_ids`` that are catalog products."""
        pass

    @abstractmethod
    async def decrement_stock(self, product_id: str, quantity: int) -> Optional[int]:
        """Atomically lower stock, floored at zero.

        Returns:
            New stock level, or None if the product does not exist
        """
        pass


class DealProductRepository(ABC):
    """Stock and snapshot source for non-catalog deal products."""

    @abstractmethod
    async def find_by_ids(self, ids: Iterable[str]) -> Dict[str, DealProduct]:
        pass

    @abstractmethod
    async def decrement_stock(self, deal_product_id: str, quantity: int) -> Optional[int]:
        """Atomically lower a tracked deal stock, floored at zero.

        Returns:
            New stock level, or None if the deal is unknown or untracked
        """
        pass


class StoreSettingsRepository(ABC):
    """Key/value store settings."""

    @abstractmethod
    async def load_all(self) -> Dict[str, str]:
        pass
