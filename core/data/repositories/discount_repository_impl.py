"""SQLAlchemy implementation of DiscountRepository."""

from typing import Optional

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities.discount import Discount
from core.domain.repositories import DiscountRepository

from ..mappers import DiscountMapper
from ..models.discount_model import DiscountModel


class SqlAlchemyDiscountRepository(DiscountRepository):
    """Discount lookups and the atomic usage counter."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_code(self, code: str) -> Optional[Discount]:
        result = await self._session.execute(
            select(DiscountModel).where(DiscountModel.code == Discount.normalize_code(code))
        )
        model = result.scalar_one_or_none()
        return DiscountMapper.to_domain(model) if model else None

    async def increment_usage(self, discount_id: str) -> bool:
        """Single conditional UPDATE, so concurrent checkouts cannot overshoot the limit."""
        result = await self._session.execute(
            update(DiscountModel)
            .where(
                DiscountModel.id == discount_id,
                or_(
                    DiscountModel.usage_limit.is_(None),
                    DiscountModel.usage_limit <= 0,
                    DiscountModel.used_count < DiscountModel.usage_limit,
                ),
            )
            .values(used_count=DiscountModel.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
