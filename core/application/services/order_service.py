"""Application service for order queries and public tracking."""

import logging
import re
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.actor import Actor
from core.application.dtos.order_dto import OrderDTO, OrderListDTO, TrackedOrderDTO
from core.data.uow import create_uow
from core.domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from core.domain.repositories.order_repository import OrderFilter


logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class OrderApplicationService:
    """
    Application service for reading orders.

    Responsibilities:
    - Scope listings to the caller (admins see everything)
    - Owner/admin checks for single-order reads
    - Email-verified public tracking
    """

    def __init__(self, session_factory: async_sessionmaker) -> None:
        """Initialize order application service.

        Args:
            session_factory: SQLAlchemy async session factory
        """
        self._session_factory = session_factory

    async def list_orders(
        self,
        actor: Actor,
        criteria: Optional[OrderFilter] = None,
        page: int = 1,
        limit: int = 20,
    ) -> OrderListDTO:
        """List orders newest first.

        Args:
            actor: Authenticated caller; non-admins only see their own orders
            criteria: Filters (the user_id filter is forced for non-admins)
            page: 1-based page number
            limit: Page size

        Returns:
            OrderListDTO
        """
        criteria = criteria or OrderFilter()
        if not actor.is_admin:
            criteria = OrderFilter(
                status=criteria.status,
                payment_status=criteria.payment_status,
                user_id=actor.id,
                has_discount=criteria.has_discount,
                date_from=criteria.date_from,
                date_to=criteria.date_to,
                search=criteria.search,
            )

        async with create_uow(self._session_factory) as uow:
            orders, total = await uow.orders.find_all(criteria, page=page, limit=limit)

        return OrderListDTO(
            orders=[OrderDTO.from_entity(order) for order in orders],
            total=total,
            page=page,
            limit=limit,
        )

    async def get_order(self, order_id: str, actor: Actor) -> OrderDTO:
        """Get an order the caller owns (or any order for admins).

        Raises:
            NotFoundError: unknown order
            AuthorizationError: caller is neither owner nor admin
        """
        async with create_uow(self._session_factory) as uow:
            order = await uow.orders.find_by_id(order_id)

        if order is None:
            raise NotFoundError("Order not found")
        if not actor.is_admin and not order.is_owned_by(actor.id):
            raise AuthorizationError("You are not authorized to view this order")
        return OrderDTO.from_entity(order)

    async def track_order(self, order_number: Optional[str], email: Optional[str]) -> TrackedOrderDTO:
        """Public lookup by order number, verified against the customer's email.

        Raises:
            ValidationError: order number or email missing, or email malformed
            NotFoundError: unknown order number
            AuthenticationError: email does not belong to the order
        """
        order_number = (order_number or "").strip()
        email = (email or "").strip().lower()
        if not order_number or not email:
            raise ValidationError("Order number and email are required")
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Invalid email format")

        async with create_uow(self._session_factory) as uow:
            order = await uow.orders.find_by_order_number(order_number.upper())
            if order is None:
                raise NotFoundError("Order not found")
            customer = (
                await uow.customers.find_by_id(order.customer_id) if order.customer_id else None
            )

        known = {
            address.lower()
            for address in (
                customer.email if customer is not None else None,
                order.shipping_address.email,
            )
            if address
        }
        if email not in known:
            logger.warning(f"⚠️ Tracking email mismatch for order {order_number}")
            raise AuthenticationError("Email does not match order records")

        return TrackedOrderDTO.from_entity(order)
