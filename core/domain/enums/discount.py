"""Discount enums."""
from enum import Enum


class DiscountType(str, Enum):
    """How a discount amount is computed."""

    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    FREE_SHIPPING = "free_shipping"


class DiscountAppliesTo(str, Enum):
    """Which part of the cart the discount base is taken from."""

    ALL = "all"
    PRODUCTS = "products"
    SHIPPING = "shipping"
    TOTAL = "total"
