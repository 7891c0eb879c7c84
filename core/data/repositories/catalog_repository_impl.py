"""SQLAlchemy implementations for catalog stock, deal products and store settings."""

from typing import Dict, Iterable, Optional, Set

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities.product import DealProduct
from core.domain.repositories import (
    DealProductRepository,
    ProductRepository,
    StoreSettingsRepository,
)

from ..mappers import DealProductMapper
from ..models.catalog_model import DealProductModel, ProductModel, StoreSettingModel


def _floored_decrement(column, quantity: int):
    # max(0, column - quantity), evaluated by the database against the current row
    return case((column > quantity, column - quantity), else_=0)


class SqlAlchemyProductRepository(ProductRepository):
    """Catalog products."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def existing_ids(self, product_ids: Iterable[str]) -> Set[str]:
        ids = {product_id for product_id in product_ids if product_id}
        if not ids:
            return set()
        result = await self._session.execute(
            select(ProductModel.id).where(ProductModel.id.in_(ids))
        )
        return set(result.scalars().all())

    async def decrement_stock(self, product_id: str, quantity: int) -> Optional[int]:
        result = await self._session.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(
                stock_quantity=_floored_decrement(ProductModel.stock_quantity, quantity),
                in_stock=case((ProductModel.stock_quantity > quantity, True), else_=False),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        stock = await self._session.execute(
            select(ProductModel.stock_quantity).where(ProductModel.id == product_id)
        )
        return stock.scalar_one()


class SqlAlchemyDealProductRepository(DealProductRepository):
    """Deal products (stock tracked only when stock_quantity is set)."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_ids(self, ids: Iterable[str]) -> Dict[str, DealProduct]:
        wanted = {deal_id for deal_id in ids if deal_id}
        if not wanted:
            return {}
        result = await self._session.execute(
            select(DealProductModel).where(DealProductModel.id.in_(wanted))
        )
        return {
            model.id: DealProductMapper.to_domain(model)
            for model in result.scalars().all()
        }

    async def decrement_stock(self, deal_product_id: str, quantity: int) -> Optional[int]:
        result = await self._session.execute(
            update(DealProductModel)
            .where(
                DealProductModel.id == deal_product_id,
                DealProductModel.stock_quantity.is_not(None),
            )
            .values(
                stock_quantity=_floored_decrement(DealProductModel.stock_quantity, quantity)
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        stock = await self._session.execute(
            select(DealProductModel.stock_quantity).where(
                DealProductModel.id == deal_product_id
            )
        )
        return stock.scalar_one()


class SqlAlchemyStoreSettingsRepository(StoreSettingsRepository):
    """Admin-editable key/value settings."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def load_all(self) -> Dict[str, str]:
        result = await self._session.execute(
            select(StoreSettingModel.key, StoreSettingModel.value)
        )
        return {key: value for key, value in result.all() if value is not None}
