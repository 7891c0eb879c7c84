"""
Customer resolution.

Maps the identity signals of a checkout (customer id, user id, email, phone)
to the canonical customer record, creating it when none exists.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from core.application.actor import Actor
from core.domain.entities.customer import Customer
from core.domain.enums import CustomerSource
from core.domain.exceptions import CustomerNotFound
from core.domain.repositories import CustomerRepository


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomerHints:
    """Everything a request tells us about who is buying."""

    customer_id: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address_email: Optional[str] = None
    address_name: Optional[str] = None
    address_phone: Optional[str] = None
    actor: Optional[Actor] = None


class CustomerResolver:
    """Find-or-create the customer behind an order."""

    def __init__(self, customers: CustomerRepository):
        self.customers = customers

    async def resolve(self, hints: CustomerHints) -> Optional[Customer]:
        """
        Resolve the customer for an order.

        Args:
            hints: Identity signals from the request

        Returns:
            The linked customer, or None when there is neither email nor phone

        Raises:
            CustomerNotFound: an explicit customer_id does not exist
        """
        if hints.customer_id:
            customer = await self.customers.find_by_id(hints.customer_id)
            if customer is None:
                raise CustomerNotFound(hints.customer_id)
            return customer

        actor = hints.actor
        actor_owns_order = actor is not None and (
            not hints.user_id or hints.user_id == actor.id
        )

        email = hints.email
        if not email and actor_owns_order:
            email = actor.email
        if not email:
            email = hints.address_email
        email = email.strip().lower() if email else None

        phone = hints.phone or hints.address_phone
        if not phone and actor_owns_order:
            phone = actor.phone
        phone = phone.strip() if phone else None

        if not email and not phone:
            logger.info("No email or phone on order; skipping customer linkage")
            return None

        full_name = hints.full_name or hints.address_name
        if not full_name and actor_owns_order:
            full_name = actor.full_name

        customer = None
        if email:
            customer = await self.customers.find_by_email(email)
        if customer is None and phone:
            customer = await self.customers.find_by_phone(phone)

        if customer is not None:
            changed = customer.merge_contact(full_name=full_name, phone=phone, email=email)
            if hints.user_id:
                changed = customer.link_user(hints.user_id) or changed
            if changed:
                await self.customers.save(customer)
                logger.info(f"Updated customer {customer.id} from checkout details")
            return customer

        customer = Customer(
            email=email,
            full_name=full_name,
            phone=phone,
            user_id=hints.user_id,
            source=self._source_for(hints),
            created_by=actor.id if actor else None,
        )
        await self.customers.save(customer)
        logger.info(f"✅ Created customer {customer.id} ({customer.source.value})")
        return customer

    @staticmethod
    def _source_for(hints: CustomerHints) -> CustomerSource:
        if hints.user_id:
            return CustomerSource.REGISTERED
        if hints.actor is not None and hints.actor.is_admin:
            return CustomerSource.ADMIN_MANUAL_ORDER
        return CustomerSource.GUEST_CHECKOUT
