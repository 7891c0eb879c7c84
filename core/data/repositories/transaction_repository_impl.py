"""SQLAlchemy implementation of TransactionRepository."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities.transaction import Transaction
from core.domain.repositories import TransactionRepository

from ..mappers import TransactionMapper
from ..models.transaction_model import TransactionModel


class SqlAlchemyTransactionRepository(TransactionRepository):
    """Transactions keyed by their unique reference."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_reference(self, reference: str) -> Optional[Transaction]:
        result = await self._session.execute(
            select(TransactionModel).where(
                TransactionModel.transaction_reference == reference
            )
        )
        model = result.scalar_one_or_none()
        return TransactionMapper.to_domain(model) if model else None

    async def find_by_order(self, order_id: str) -> List[Transaction]:
        result = await self._session.execute(
            select(TransactionModel)
            .where(TransactionModel.order_id == order_id)
            .order_by(TransactionModel.created_at)
        )
        return [TransactionMapper.to_domain(model) for model in result.scalars().all()]

    async def add(self, transaction: Transaction) -> None:
        """Insert; a duplicate reference raises IntegrityError at flush."""
        self._session.add(TransactionMapper.to_persistence(transaction))
        await self._session.flush()

    async def save(self, transaction: Transaction) -> None:
        existing = await self._session.get(TransactionModel, transaction.id)
        if existing:
            TransactionMapper.update_persistence(transaction, existing)
        else:
            self._session.add(TransactionMapper.to_persistence(transaction))
        await self._session.flush()
