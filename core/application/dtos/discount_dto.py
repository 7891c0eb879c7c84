"""Application DTOs for discount codes."""

from decimal import Decimal
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from core.domain.enums import DiscountAppliesTo
from core.domain.services import DiscountResult


class ApplyDiscountRequest(BaseModel):
    """Cart the code is checked against."""

    code: str = Field(..., min_length=1, description="Discount code as typed")
    subtotal: Decimal = Field(..., ge=0, description="Cart product subtotal")
    delivery_fee: Decimal = Field(default=Decimal("0"), ge=0)
    items: List[Dict[str, Any]] = Field(default_factory=list)


class DiscountApplicationDTO(BaseModel):
    """Approved discount for the cart."""

    discount_id: str
    code: str
    type: str
    applies_to: DiscountAppliesTo
    discount_amount: Decimal
    adjusted_delivery_fee: Decimal
    message: str = "Discount applied successfully"

    model_config = {"frozen": True}

    @classmethod
    def from_result(cls, result: DiscountResult) -> "DiscountApplicationDTO":
        return cls(
            discount_id=result.discount_id,
            code=result.code,
            type=result.discount_type,
            applies_to=result.applies_to,
            discount_amount=result.discount_amount,
            adjusted_delivery_fee=result.adjusted_delivery_fee,
        )
