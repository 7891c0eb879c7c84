"""SQLAlchemy implementation of CustomerRepository."""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities.customer import Customer
from core.domain.repositories import CustomerRepository

from ..mappers import CustomerMapper
from ..models.customer_model import CustomerModel


class SqlAlchemyCustomerRepository(CustomerRepository):
    """Customer directory backed by the customers table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, customer_id: str) -> Optional[Customer]:
        model = await self._session.get(CustomerModel, customer_id)
        return CustomerMapper.to_domain(model) if model else None

    async def find_by_email(self, email: str) -> Optional[Customer]:
        return await self._first(func.lower(CustomerModel.email) == email.strip().lower())

    async def find_by_phone(self, phone: str) -> Optional[Customer]:
        return await self._first(CustomerModel.phone == phone.strip())

    async def save(self, customer: Customer) -> None:
        model = await self._session.get(CustomerModel, customer.id)
        if model is None:
            model = CustomerModel(id=customer.id)
            self._session.add(model)
        CustomerMapper.update_persistence(customer, model)
        await self._session.flush()

    async def _first(self, condition) -> Optional[Customer]:
        result = await self._session.execute(
            select(CustomerModel)
            .where(condition)
            .order_by(CustomerModel.created_at)
            .limit(1)
        )
        model = result.scalar_one_or_none()
        return CustomerMapper.to_domain(model) if model else None
