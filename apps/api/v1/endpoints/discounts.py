"""Discount endpoints for REST API."""

from fastapi import APIRouter, Depends

from core.application.dtos.discount_dto import ApplyDiscountRequest, DiscountApplicationDTO
from core.application.services.discount_service import DiscountApplicationService

from apps.api.deps import get_discount_service

router = APIRouter(prefix="/discounts", tags=["discounts"])


@router.post("/apply", response_model=DiscountApplicationDTO)
async def apply_discount(
    request: ApplyDiscountRequest,
    service: DiscountApplicationService = Depends(get_discount_service),
) -> DiscountApplicationDTO:
    """Check a code against the cart. The code is not consumed until checkout."""
    return await service.apply(request)
