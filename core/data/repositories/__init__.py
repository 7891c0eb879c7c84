"""SQLAlchemy repository implementations."""
from .catalog_repository_impl import (
    SqlAlchemyDealProductRepository,
    SqlAlchemyProductRepository,
    SqlAlchemyStoreSettingsRepository,
)
from .customer_repository_impl import SqlAlchemyCustomerRepository
from .discount_repository_impl import SqlAlchemyDiscountRepository
from .order_repository_impl import SqlAlchemyOrderRepository
from .transaction_repository_impl import SqlAlchemyTransactionRepository

__all__ = [
    "SqlAlchemyCustomerRepository",
    "SqlAlchemyDealProductRepository",
    "SqlAlchemyDiscountRepository",
    "SqlAlchemyOrderRepository",
    "SqlAlchemyProductRepository",
    "SqlAlchemyStoreSettingsRepository",
    "SqlAlchemyTransactionRepository",
]
