"""Application service for discount codes."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.dtos.discount_dto import ApplyDiscountRequest, DiscountApplicationDTO
from core.data.uow import create_uow
from core.domain.entities.discount import Discount
from core.domain.exceptions import DiscountError
from core.domain.repositories import DiscountRepository
from core.domain.services import CartSnapshot, DiscountEvaluator, DiscountResult


logger = logging.getLogger(__name__)


async def evaluate_code(
    discounts: DiscountRepository,
    code: str,
    cart: CartSnapshot,
    evaluator: Optional[DiscountEvaluator] = None,
    now: Optional[datetime] = None,
) -> DiscountResult:
    """
    Look up ``code`` and evaluate it against ``cart``.

    Raises:
        DiscountError: when the code is unknown or does not apply
    """
    normalized = Discount.normalize_code(code)
    if not normalized:
        raise DiscountError("Invalid discount code.", code=DiscountError.NOT_FOUND)
    discount = await discounts.find_by_code(normalized)
    return (evaluator or DiscountEvaluator()).evaluate(discount, cart, code=code, now=now)


class DiscountApplicationService:
    """
    Checks a code against a cart without consuming it.

    Usage is only counted when an order is placed with the code.
    """

    def __init__(self, session_factory: async_sessionmaker, evaluator: Optional[DiscountEvaluator] = None) -> None:
        self._session_factory = session_factory
        self._evaluator = evaluator or DiscountEvaluator()

    async def apply(self, request: ApplyDiscountRequest) -> DiscountApplicationDTO:
        cart = CartSnapshot(
            subtotal=request.subtotal,
            delivery_fee=request.delivery_fee,
            items=list(request.items),
        )
        async with create_uow(self._session_factory) as uow:
            try:
                result = await evaluate_code(uow.discounts, request.code, cart, self._evaluator)
            except DiscountError as e:
                logger.info(f"Discount {request.code!r} rejected: {e.code}")
                raise

        logger.info(f"Discount {result.code} approved: {result.discount_amount}")
        return DiscountApplicationDTO.from_result(result)
