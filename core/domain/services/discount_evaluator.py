"""
Discount evaluation policy.

Pure: takes the discount record already looked up by code, the cart and the
current time; returns the granted amount or raises ``DiscountError``. Usage
is never consumed here.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..entities.discount import (
    Discount,
    FreeShippingRule,
    PercentageRule,
)
from ..enums import DiscountAppliesTo, DiscountType
from ..exceptions import DiscountError
from ..value_objects import ensure_utc, round2, utcnow

ZERO = Decimal("0")


@dataclass(frozen=True)
class CartSnapshot:
    """What the discount is evaluated against."""

    subtotal: Decimal
    delivery_fee: Decimal = ZERO
    items: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class DiscountResult:
    """Approved discount."""

    discount_id: str
    code: str
    discount_type: str
    applies_to: DiscountAppliesTo
    discount_amount: Decimal
    adjusted_delivery_fee: Decimal

    @property
    def is_free_shipping(self) -> bool:
        return self.discount_type == DiscountType.FREE_SHIPPING.value


class DiscountEvaluator:
    """Applies a discount's gating rules and computes its amount."""

    def evaluate(
        self,
        discount: Optional[Discount],
        cart: CartSnapshot,
        code: str = "",
        now: Optional[datetime] = None,
    ) -> DiscountResult:
        """
        Evaluate ``discount`` against ``cart``.

        Args:
            discount: Record found for the normalized code (None if unknown)
            cart: Cart subtotal, delivery fee and items
            code: Code as typed, used in the not-found message
            now: Evaluation time (defaults to current UTC time)

        Returns:
            DiscountResult with the amount and adjusted delivery fee

        Raises:
            DiscountError: with one of the DiscountError.* codes
        """
        if discount is None:
            raise DiscountError("Invalid discount code.", code=DiscountError.NOT_FOUND)
        if not discount.is_active:
            raise DiscountError(
                "This discount is no longer active.", code=DiscountError.INACTIVE
            )

        self._check_window(discount, now or utcnow())

        if discount.usage_exhausted:
            raise DiscountError(
                "This discount has reached its usage limit.",
                code=DiscountError.USAGE_LIMIT_REACHED,
            )

        subtotal = max(ZERO, cart.subtotal)
        delivery_fee = max(ZERO, cart.delivery_fee)
        base = self._base_amount(discount.applies_to, subtotal, delivery_fee)

        comparator = (
            delivery_fee if discount.applies_to == DiscountAppliesTo.SHIPPING else subtotal
        )
        minimum = discount.minimum_amount or ZERO
        if minimum > 0 and comparator < minimum:
            raise DiscountError(
                f"Discount requires a minimum order amount of {round2(minimum)}.",
                code=DiscountError.BELOW_MINIMUM,
            )

        amount, adjusted_fee = self._compute(discount, base, delivery_fee)

        if amount <= 0:
            if isinstance(discount.rule, FreeShippingRule):
                raise DiscountError(
                    "Discount cannot be applied because the order amount is zero.",
                    code=DiscountError.ZERO_BASE_AMOUNT,
                )
            raise DiscountError(
                "This discount cannot be applied to the current order.",
                code=DiscountError.NOT_APPLICABLE,
            )

        return DiscountResult(
            discount_id=discount.id,
            code=Discount.normalize_code(discount.code),
            discount_type=discount.discount_type,
            applies_to=discount.applies_to,
            discount_amount=amount,
            adjusted_delivery_fee=adjusted_fee,
        )

    @staticmethod
    def _check_window(discount: Discount, now: datetime) -> None:
        now = ensure_utc(now)
        valid_from = ensure_utc(discount.valid_from)
        valid_until = ensure_utc(discount.valid_until)
        if valid_from and now < valid_from:
            raise DiscountError(
                "This discount is not active yet.", code=DiscountError.NOT_YET_ACTIVE
            )
        if valid_until and now > valid_until:
            raise DiscountError("This discount has expired.", code=DiscountError.EXPIRED)

    @staticmethod
    def _base_amount(
        applies_to: DiscountAppliesTo, subtotal: Decimal, delivery_fee: Decimal
    ) -> Decimal:
        if applies_to == DiscountAppliesTo.SHIPPING:
            return delivery_fee
        if applies_to == DiscountAppliesTo.TOTAL:
            return subtotal + delivery_fee
        return subtotal

    @staticmethod
    def _compute(discount: Discount, base: Decimal, delivery_fee: Decimal):
        rule = discount.rule

        if isinstance(rule, FreeShippingRule):
            return round2(delivery_fee), Decimal("0.00")

        if base <= 0:
            raise DiscountError(
                "Discount cannot be applied because the order amount is zero.",
                code=DiscountError.ZERO_BASE_AMOUNT,
            )

        if isinstance(rule, PercentageRule):
            raw = base * rule.percent / Decimal("100")
        else:
            raw = rule.amount

        amount = min(raw, base)
        if discount.cap is not None:
            amount = min(amount, discount.cap)
        amount = max(ZERO, amount)
        return round2(amount), round2(delivery_fee)
