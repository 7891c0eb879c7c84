"""Unit of Work pattern for atomic transactions."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.domain.value_objects import ExecutionID

from .repositories import (
    SqlAlchemyCustomerRepository,
    SqlAlchemyDealProductRepository,
    SqlAlchemyDiscountRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyProductRepository,
    SqlAlchemyStoreSettingsRepository,
    SqlAlchemyTransactionRepository,
)


class UnitOfWork:
    """
    Unit of Work pattern for atomic transactions.

    Responsibilities:
    1. Manage SQLAlchemy session lifecycle
    2. Propagate ExecutionID across all operations
    3. Atomic commit/rollback of all repository operations
    4. Savepoints for steps whose failure must not abort the whole unit
    5. Lazy initialization of repositories
    """

    def __init__(self, session_factory: async_sessionmaker) -> None:
        """Initialize Unit of Work.

        Args:
            session_factory: SQLAlchemy async session factory
        """
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None
        self._execution_id: Optional[ExecutionID] = None
        self._repositories: dict = {}

    async def __aenter__(self) -> "UnitOfWork":
        """Start transaction scope."""
        self._session = self._session_factory()
        self._execution_id = ExecutionID.generate()
        self._repositories = {}
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Rollback on exception; always close the session."""
        if exc_type is not None:
            await self._session.rollback()
        await self._session.close()

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork not initialized. Use async context manager.")
        return self._session

    @property
    def execution_id(self) -> ExecutionID:
        """Get current execution ID for tracing.

        Returns:
            ExecutionID value object
        """
        if self._execution_id is None:
            raise RuntimeError("UnitOfWork not initialized. Use async context manager.")
        return self._execution_id

    def _repository(self, repository_class):
        if repository_class not in self._repositories:
            self._repositories[repository_class] = repository_class(self.session)
        return self._repositories[repository_class]

    @property
    def orders(self) -> SqlAlchemyOrderRepository:
        return self._repository(SqlAlchemyOrderRepository)

    @property
    def transactions(self) -> SqlAlchemyTransactionRepository:
        return self._repository(SqlAlchemyTransactionRepository)

    @property
    def discounts(self) -> SqlAlchemyDiscountRepository:
        return self._repository(SqlAlchemyDiscountRepository)

    @property
    def customers(self) -> SqlAlchemyCustomerRepository:
        return self._repository(SqlAlchemyCustomerRepository)

    @property
    def products(self) -> SqlAlchemyProductRepository:
        return self._repository(SqlAlchemyProductRepository)

    @property
    def deal_products(self) -> SqlAlchemyDealProductRepository:
        return self._repository(SqlAlchemyDealProductRepository)

    @property
    def store_settings(self) -> SqlAlchemyStoreSettingsRepository:
        return self._repository(SqlAlchemyStoreSettingsRepository)

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        """Run a block in a SAVEPOINT; on error only that block is rolled back.

        The exception still propagates so the caller decides whether it is fatal.
        """
        async with self.session.begin_nested():
            yield

    async def commit(self) -> None:
        """Commit all pending changes."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Rollback all pending changes."""
        await self.session.rollback()


def create_uow(session_factory: async_sessionmaker) -> UnitOfWork:
    """Create a new Unit of Work instance.

    Args:
        session_factory: SQLAlchemy async session factory

    Returns:
        UnitOfWork instance
    """
    return UnitOfWork(session_factory)
