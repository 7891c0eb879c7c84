"""Database models."""

from .base import Base
from .catalog_model import DealProductModel, ProductModel, StoreSettingModel
from .customer_model import CustomerModel
from .discount_model import DiscountModel
from .order_model import OrderItemModel, OrderModel
from .transaction_model import TransactionModel

__all__ = [
    "Base",
    "CustomerModel",
    "DealProductModel",
    "DiscountModel",
    "OrderItemModel",
    "OrderModel",
    "ProductModel",
    "StoreSettingModel",
    "TransactionModel",
]
