"""SQLAlchemy implementation of OrderRepository."""

from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities.order import Order
from core.domain.repositories.order_repository import OrderFilter, OrderRepository

from ..mappers import OrderMapper
from ..models.order_model import OrderModel


class SqlAlchemyOrderRepository(OrderRepository):
    """Concrete implementation of OrderRepository using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with SQLAlchemy session.

        Args:
            session: SQLAlchemy async session
        """
        self._session = session

    async def add(self, order: Order) -> None:
        """Insert order and items; flushes so constraint violations surface here.

        Args:
            order: Order domain aggregate
        """
        self._session.add(OrderMapper.to_persistence(order))
        await self._session.flush()  # Propagate to DB without committing

    async def save(self, order: Order) -> None:
        """Persist order changes.

        Args:
            order: Order domain aggregate
        """
        existing = await self._session.get(OrderModel, order.id)

        if existing:
            OrderMapper.update_persistence(order, existing)
        else:
            self._session.add(OrderMapper.to_persistence(order))

        await self._session.flush()

    async def find_by_id(self, order_id: str) -> Optional[Order]:
        """Retrieve order by unique identifier.

        Args:
            order_id: Order UUID

        Returns:
            Order if found, None otherwise
        """
        return await self._find_one(OrderModel.id == order_id)

    async def find_by_order_number(self, order_number: str) -> Optional[Order]:
        return await self._find_one(OrderModel.order_number == order_number)

    async def find_by_payment_reference(self, reference: str) -> Optional[Order]:
        return await self._find_one(OrderModel.payment_reference == reference)

    async def find_all(
        self, criteria: OrderFilter, page: int = 1, limit: int = 20
    ) -> Tuple[List[Order], int]:
        """List orders newest first with filters and pagination.

        Args:
            criteria: OrderFilter
            page: 1-based page number
            limit: Page size

        Returns:
            (orders, total matching count)
        """
        conditions = []
        if criteria.status is not None:
            conditions.append(OrderModel.status == criteria.status.value)
        if criteria.payment_status is not None:
            conditions.append(OrderModel.payment_status == criteria.payment_status.value)
        if criteria.user_id is not None:
            conditions.append(OrderModel.user_id == criteria.user_id)
        if criteria.has_discount is True:
            conditions.append(OrderModel.discount > 0)
        elif criteria.has_discount is False:
            conditions.append(OrderModel.discount == 0)
        if criteria.date_from is not None:
            conditions.append(OrderModel.created_at >= criteria.date_from)
        if criteria.date_to is not None:
            conditions.append(OrderModel.created_at <= criteria.date_to)
        if criteria.search:
            pattern = f"%{criteria.search.strip()}%"
            conditions.append(
                or_(
                    OrderModel.order_number.ilike(pattern),
                    OrderModel.discount_code.ilike(pattern),
                )
            )

        count_result = await self._session.execute(
            select(func.count()).select_from(OrderModel).where(*conditions)
        )
        total = count_result.scalar_one()

        result = await self._session.execute(
            select(OrderModel)
            .where(*conditions)
            .order_by(OrderModel.created_at.desc())
            .offset((max(page, 1) - 1) * limit)
            .limit(limit)
        )
        models = result.scalars().all()

        return [OrderMapper.to_domain(model) for model in models], total

    async def last_order_number_with_suffix(self, suffix: str) -> Optional[str]:
        result = await self._session.execute(
            select(OrderModel.order_number)
            .where(OrderModel.order_number.like(f"ORD-___{suffix}"))
            .order_by(OrderModel.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def _find_one(self, condition) -> Optional[Order]:
        result = await self._session.execute(select(OrderModel).where(condition))
        model = result.scalar_one_or_none()

        if not model:
            return None

        return OrderMapper.to_domain(model)
