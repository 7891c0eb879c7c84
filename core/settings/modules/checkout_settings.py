from __future__ import annotations

from decimal import Decimal

from pydantic import Field

from core.settings.base import StorefrontBaseSettings


class CheckoutSettings(StorefrontBaseSettings):
    """
    Checkout policy.

    strict_discount_codes: fail checkout on an invalid discount code instead of
    placing the order without the discount.
    """

    currency: str = Field(default="GHS", alias="CHECKOUT_CURRENCY")
    strict_discount_codes: bool = Field(default=False, alias="CHECKOUT_STRICT_DISCOUNT_CODES")
    total_tolerance: Decimal = Field(default=Decimal("0.5"), alias="CHECKOUT_TOTAL_TOLERANCE")
    order_number_attempts: int = Field(default=3, alias="CHECKOUT_ORDER_NUMBER_ATTEMPTS")
