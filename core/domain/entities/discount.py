"""
Discount entity and its typed rule variants.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from ..enums import DiscountAppliesTo, DiscountType
from ..exceptions import DiscountError


@dataclass(frozen=True)
class PercentageRule:
    """``percent`` of the base amount."""
    percent: Decimal


@dataclass(frozen=True)
class FixedAmountRule:
    """Flat ``amount`` off the base amount."""
    amount: Decimal


@dataclass(frozen=True)
class FreeShippingRule:
    """Waives the delivery fee."""


DiscountRule = Union[PercentageRule, FixedAmountRule, FreeShippingRule]


@dataclass
class Discount:
    """A discount code and the rules that gate it."""

    id: str
    code: str
    discount_type: str
    value: Decimal
    applies_to: DiscountAppliesTo = DiscountAppliesTo.ALL
    minimum_amount: Decimal = Decimal("0")
    maximum_discount: Optional[Decimal] = None
    is_active: bool = True
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    usage_limit: Optional[int] = None
    used_count: int = 0
    description: Optional[str] = None

    @staticmethod
    def normalize_code(code: str) -> str:
        return (code or "").strip().upper()

    @property
    def rule(self) -> DiscountRule:
        """
        Decode the stored type into its rule variant.

        Raises:
            DiscountError: UNSUPPORTED_TYPE for unknown discount types
        """
        if self.discount_type == DiscountType.PERCENTAGE.value:
            return PercentageRule(percent=self.value)
        if self.discount_type == DiscountType.FIXED_AMOUNT.value:
            return FixedAmountRule(amount=self.value)
        if self.discount_type == DiscountType.FREE_SHIPPING.value:
            return FreeShippingRule()
        raise DiscountError(
            f"Unsupported discount type: {self.discount_type}",
            code=DiscountError.UNSUPPORTED_TYPE,
        )

    @property
    def has_usage_limit(self) -> bool:
        # A limit of zero (or less) means unlimited.
        return self.usage_limit is not None and self.usage_limit > 0

    @property
    def usage_exhausted(self) -> bool:
        return self.has_usage_limit and self.used_count >= self.usage_limit

    @property
    def cap(self) -> Optional[Decimal]:
        """Maximum discount amount, if one is configured."""
        if self.maximum_discount is not None and self.maximum_discount > 0:
            return self.maximum_discount
        return None
