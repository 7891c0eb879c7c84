"""Repository interfaces (implemented in core.data)."""
from .order_repository import OrderFilter, OrderRepository
from .commerce_repositories import (
    CustomerRepository,
    DealProductRepository,
    DiscountRepository,
    ProductRepository,
    StoreSettingsRepository,
    TransactionRepository,
)

__all__ = [
    "CustomerRepository",
    "DealProductRepository",
    "DiscountRepository",
    "OrderFilter",
    "OrderRepository",
    "ProductRepository",
    "StoreSettingsRepository",
    "TransactionRepository",
]
