"""
Create Order Use Case.

The single place orders come into existence, whether the customer checked
out synchronously or the payment gateway called back.

Flow:
1. Validate items and delivery address
2. Resolve the customer
3. Evaluate the discount code and claim one use of it
4. Compute totals
5. Allocate an order number
6. Persist order + items
7. Decrement stock (best-effort, one savepoint per item)
8. Create or link the payment transaction
9. Commit, then publish events and send emails

Steps 2-8 share one database transaction, so a claimed discount use is
released again when the order does not commit.
"""
import logging
import time
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Set, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.commands import CreateOrderCommand
from core.application.services.customer_resolver import CustomerHints, CustomerResolver
from core.application.services.discount_service import evaluate_code
from core.application.services.notification_dispatcher import (
    NotificationDispatcher,
    recipient_for,
)
from core.data.uow import UnitOfWork, create_uow
from core.domain.entities.customer import Customer
from core.domain.entities.order import DealSnapshot, Order, OrderItem
from core.domain.entities.product import DealProduct
from core.domain.entities.transaction import Transaction
from core.domain.enums import PaymentProvider, PaymentStatus
from core.domain.event_bus import EventBus
from core.domain.exceptions import (
    DiscountError,
    DuplicatePaymentReference,
    InvalidDiscount,
    MissingAddress,
    MissingItems,
    PersistenceFailure,
    ValidationError,
)
from core.domain.services import (
    CartSnapshot,
    DiscountEvaluator,
    DiscountResult,
    OrderTotals,
    SanitizedItem,
    compute_subtotal,
    compute_totals,
    sanitize_items,
)
from core.domain.value_objects import (
    DeliveryOption,
    OrderNumber,
    ShippingAddress,
    round2,
    to_decimal,
    utcnow,
)
from core.settings.modules.checkout_settings import CheckoutSettings


logger = logging.getLogger(__name__)


class _OrderNumberTaken(Exception):
    """Another order grabbed the number between lookup and insert."""


def transaction_reference_for(order: Order) -> str:
    """Reference recorded for the order's payment."""
    return order.payment_reference or f"TXN-{order.id[:8]}"


def recipient_for_address(customer: Optional[Customer], address: ShippingAddress) -> Optional[str]:
    if customer is not None and customer.email:
        return customer.email
    return address.email


class CreateOrderUseCase:
    """
    Use case for placing an order.

    CRITICAL: handles money and stock. Everything up to the commit is atomic;
    only stock updates may fail without aborting the order.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        event_bus: EventBus,
        dispatcher: Optional[NotificationDispatcher] = None,
        checkout: Optional[CheckoutSettings] = None,
        evaluator: Optional[DiscountEvaluator] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize use case with dependencies.

        Args:
            session_factory: SQLAlchemy async session factory
            event_bus: Event Bus for publishing domain events
            dispatcher: Order email dispatcher (None disables emails)
            checkout: Checkout policy settings
            evaluator: Discount policy
            clock: Current UTC time (order number date, paid_at)
        """
        self._session_factory = session_factory
        self.event_bus = event_bus
        self.dispatcher = dispatcher
        self.checkout = checkout or CheckoutSettings()
        self.evaluator = evaluator or DiscountEvaluator()
        self._clock = clock

    async def execute(self, command: CreateOrderCommand) -> Order:
        """
        Place the order described by ``command``.

        Returns:
            The committed Order with its items

        Raises:
            MissingItems, MissingAddress, CustomerNotFound: invalid input
            InvalidDiscount, DiscountError: strict discount policy only
            InvalidTotal: computed total is not positive
            DuplicatePaymentReference: an order already exists for the reference
            PersistenceFailure: the order could not be stored
        """
        # ================================================================
        # STEP 1: Validate input
        # ================================================================
        if not command.items:
            logger.error("❌ Order creation failed: no order items provided")
            raise MissingItems()
        if not command.delivery_address:
            logger.error("❌ Order creation failed: no delivery address provided")
            raise MissingAddress()

        requested_number = self._requested_order_number(command)
        items = sanitize_items(command.items)
        subtotal = compute_subtotal(items)
        delivery_fee = round2(max(Decimal("0"), command.normalized_delivery_fee))

        if command.client_subtotal is not None and abs(round2(command.client_subtotal) - subtotal) > Decimal("0.01"):
            logger.warning(
                f"⚠️ Client subtotal {command.client_subtotal} differs from computed {subtotal}"
            )

        attempts = max(1, self.checkout.order_number_attempts)
        for attempt in range(1, attempts + 1):
            try:
                order, customer = await self._place(
                    command, items, subtotal, delivery_fee, attempt, requested_number
                )
                break
            except _OrderNumberTaken:
                logger.warning(f"⚠️ Order number collision (attempt {attempt}/{attempts}), retrying")
            except SQLAlchemyError as e:
                logger.error(f"❌ Order persistence failed: {e}", exc_info=True)
                raise PersistenceFailure("Failed to create order") from e
        else:
            raise PersistenceFailure("Could not allocate a unique order number")

        # ================================================================
        # STEP 9: Side effects (after commit, never fatal)
        # ================================================================
        await self._after_commit(order, customer)
        return order

    async def _place(
        self,
        command: CreateOrderCommand,
        items: List[SanitizedItem],
        subtotal: Decimal,
        delivery_fee: Decimal,
        attempt: int,
        requested_number: Optional[OrderNumber] = None,
    ) -> Tuple[Order, Optional[Customer]]:
        async with create_uow(self._session_factory) as uow:
            xid = uow.execution_id
            reference = command.payment_reference

            logger.info(
                f"[{xid}] 📦 Creating order ({command.source}): {len(items)} item(s), "
                f"payment={command.payment_method}, reference={reference}"
            )

            if reference and await uow.orders.find_by_payment_reference(reference):
                raise DuplicatePaymentReference(reference)

            # ============================================================
            # STEP 2: Resolve customer
            # ============================================================
            address = ShippingAddress.from_dict(command.delivery_address)
            customer = await CustomerResolver(uow.customers).resolve(
                self._customer_hints(command, address)
            )

            # ============================================================
            # STEP 3-4: Discount and totals
            # ============================================================
            discount = await self._evaluate_discount(uow, command, items, subtotal, delivery_fee)
            if discount is not None and not await self._consume_discount(uow, discount):
                discount = None
            totals = compute_totals(
                subtotal,
                delivery_fee,
                tax=to_decimal(command.tax, Decimal("0")),
                discount=discount,
                client_total=command.client_total,
                tolerance=self.checkout.total_tolerance,
            )
            logger.info(
                f"[{xid}] 💰 subtotal={totals.subtotal} discount={totals.discount} "
                f"tax={totals.tax} shipping={totals.shipping_fee} total={totals.total}"
            )

            # ============================================================
            # STEP 5-6: Order number, items, insert
            # ============================================================
            if requested_number is not None and attempt == 1:
                order_number = requested_number
            else:
                if requested_number is not None:
                    logger.warning(f"⚠️ Order number {requested_number} is taken, generating one")
                order_number = await self._next_order_number(uow, attempt)
            order_items = await self._build_items(uow, items)
            order = Order.create(
                customer_email=recipient_for_address(customer, address),
                currency=self.checkout.currency,
                order_number=order_number.value,
                customer_id=customer.id if customer else None,
                user_id=self._order_user_id(command),
                subtotal=totals.subtotal,
                discount=totals.discount,
                discount_code=discount.code if discount else None,
                tax=totals.tax,
                shipping_fee=totals.shipping_fee,
                total=totals.total,
                payment_method=command.payment_method,
                payment_reference=reference,
                payment_status=PaymentStatus.PAID if command.payment_confirmed else PaymentStatus.PENDING,
                shipping_address=self._shipping_address(address, command, totals),
                notes=command.notes,
                items=order_items,
            )

            try:
                await uow.orders.add(order)
            except IntegrityError:
                await uow.rollback()
                if reference and await uow.orders.find_by_payment_reference(reference):
                    raise DuplicatePaymentReference(reference)
                raise _OrderNumberTaken()
            logger.info(f"[{xid}] ✅ Order {order.order_number} inserted ({order.id})")

            if customer is not None:
                customer.record_order(self._clock())
                await uow.customers.save(customer)

            # ============================================================
            # STEP 7: Stock (best-effort)
            # ============================================================
            await self._decrement_stock(uow, order)

            # ============================================================
            # STEP 8: Payment transaction
            # ============================================================
            await self._record_transaction(uow, order, customer, address, command)

            await uow.commit()
            logger.info(f"[{xid}] ✅ Order {order.order_number} committed")
            return order, customer

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _customer_hints(self, command: CreateOrderCommand, address: ShippingAddress) -> CustomerHints:
        extra = address.extra
        name_parts = [extra.get("first_name"), extra.get("last_name")]
        address_name = (address.full_name or "").strip() or " ".join(
            part.strip() for part in name_parts if isinstance(part, str) and part.strip()
        )
        return CustomerHints(
            customer_id=command.customer_id,
            user_id=command.user_id,
            email=command.customer_email,
            full_name=command.customer_name,
            phone=command.customer_phone,
            address_email=address.email,
            address_name=address_name or None,
            address_phone=address.phone,
            actor=command.actor,
        )

    @staticmethod
    def _requested_order_number(command: CreateOrderCommand) -> Optional[OrderNumber]:
        if not command.order_number or not command.order_number.strip():
            return None
        try:
            return OrderNumber(command.order_number.strip().upper())
        except ValueError as e:
            raise ValidationError(str(e), code="INVALID_ORDER_NUMBER") from e

    @staticmethod
    def _order_user_id(command: CreateOrderCommand) -> Optional[str]:
        if command.user_id:
            return command.user_id
        # A signed-in customer checking out for themselves owns the order.
        if command.actor is not None and not command.actor.is_admin:
            return command.actor.id
        return None

    async def _evaluate_discount(
        self,
        uow: UnitOfWork,
        command: CreateOrderCommand,
        items: List[SanitizedItem],
        subtotal: Decimal,
        delivery_fee: Decimal,
    ) -> Optional[DiscountResult]:
        if not command.discount_code or not command.discount_code.strip():
            return None

        cart = CartSnapshot(
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            items=[{"product_id": item.product_id, "quantity": item.quantity} for item in items],
        )
        try:
            result = await evaluate_code(
                uow.discounts, command.discount_code, cart, self.evaluator, now=self._clock()
            )
        except DiscountError as e:
            if self.checkout.strict_discount_codes:
                logger.error(f"❌ Discount {command.discount_code!r} rejected: {e.message}")
                raise InvalidDiscount(e) from e
            logger.warning(
                f"⚠️ Invalid discount code {command.discount_code!r} ignored: {e.message}"
            )
            return None

        logger.info(f"✅ Discount {result.code} applied: {result.discount_amount} ({result.discount_type})")
        return result

    async def _next_order_number(self, uow: UnitOfWork, attempt: int) -> OrderNumber:
        today = self._clock().date()
        try:
            async with uow.savepoint():
                last = await uow.orders.last_order_number_with_suffix(OrderNumber.suffix_for(today))
        except SQLAlchemyError as e:
            logger.warning(f"⚠️ Order number lookup failed, using time-based sequence: {e}")
            return OrderNumber.build(int(time.time() * 1000) % 999 + 1, today)

        number = OrderNumber.next_after(last, today)
        if attempt > 1:
            sequence = (number.sequence + attempt - 2) % 999 + 1
            number = OrderNumber.build(sequence, today)
        return number

    async def _build_items(self, uow: UnitOfWork, items: List[SanitizedItem]) -> List[OrderItem]:
        catalog_ids: Set[str] = await uow.products.existing_ids(
            item.product_id for item in items if item.product_id
        )
        deal_products: Dict[str, DealProduct] = await uow.deal_products.find_by_ids(
            item.source_id for item in items if item.product_id not in catalog_ids
        )

        order_items = []
        for item in items:
            if item.product_id in catalog_ids:
                order_items.append(
                    OrderItem(
                        product_id=item.product_id,
                        product_name=item.product_name,
                        quantity=item.quantity,
                        unit_price=item.unit_price,
                        subtotal=item.subtotal,
                        variant_options=item.variant_options,
                    )
                )
                continue

            deal = deal_products.get(item.source_id)
            order_items.append(
                OrderItem(
                    product_id=None,
                    deal_product_id=item.source_id,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    subtotal=item.subtotal,
                    variant_options=item.variant_options,
                    deal_snapshot=self._deal_snapshot(item, deal),
                )
            )
        return order_items

    @staticmethod
    def _deal_snapshot(item: SanitizedItem, deal: Optional[DealProduct]) -> DealSnapshot:
        if deal is not None:
            return DealSnapshot(
                deal_product_id=deal.id,
                deal_id=deal.deal_id or item.deal_id,
                product_name=item.product_name,
                product_description=deal.description or item.description,
                image=deal.image or item.image,
                unit_price=item.unit_price,
                original_price=deal.original_price if deal.original_price is not None else item.original_price,
                discount_percentage=(
                    deal.discount_percentage
                    if deal.discount_percentage is not None
                    else item.discount_percentage
                ),
            )
        return DealSnapshot(
            deal_product_id=item.source_id,
            deal_id=item.deal_id,
            product_name=item.product_name,
            product_description=item.description,
            image=item.image,
            unit_price=item.unit_price,
            original_price=item.original_price,
            discount_percentage=item.discount_percentage,
        )

    @staticmethod
    def _shipping_address(
        address: ShippingAddress, command: CreateOrderCommand, totals: OrderTotals
    ) -> ShippingAddress:
        option = DeliveryOption.from_dict(command.delivery_option) or address.delivery_option
        if option is None:
            option = DeliveryOption(name="Standard", price=totals.adjusted_shipping_fee)
        return ShippingAddress(
            full_name=address.full_name,
            email=address.email,
            phone=address.phone,
            street=address.street,
            city=address.city,
            region=address.region,
            postal_code=address.postal_code,
            country=address.country,
            landmark=address.landmark,
            delivery_option=option,
            payment_reference=command.payment_reference or address.payment_reference,
            extra=dict(address.extra),
        )

    async def _decrement_stock(self, uow: UnitOfWork, order: Order) -> None:
        for item in order.items:
            try:
                async with uow.savepoint():
                    if item.is_catalog_item:
                        remaining = await uow.products.decrement_stock(item.product_id, item.quantity)
                        target = f"product {item.product_id}"
                    elif item.deal_product_id:
                        remaining = await uow.deal_products.decrement_stock(item.deal_product_id, item.quantity)
                        target = f"deal product {item.deal_product_id}"
                    else:
                        continue
            except SQLAlchemyError as e:
                logger.warning(
                    f"⚠️ Stock update failed for {item.product_name} on order {order.order_number}: {e}"
                )
                continue

            if remaining is not None:
                logger.info(f"📉 Stock for {target}: {remaining} left")

    async def _record_transaction(
        self,
        uow: UnitOfWork,
        order: Order,
        customer: Optional[Customer],
        address: ShippingAddress,
        command: CreateOrderCommand,
    ) -> Transaction:
        reference = transaction_reference_for(order)
        now = self._clock()
        snapshot = {
            "order_number": order.order_number,
            "items_count": len(order.items),
            "subtotal": str(order.subtotal),
            "discount": str(order.discount),
            "tax": str(order.tax),
            "shipping_fee": str(order.shipping_fee),
            "total": str(order.total),
            "source": command.source,
            **command.metadata,
        }

        try:
            transaction = await uow.transactions.find_by_reference(reference)
            if transaction is not None:
                if not transaction.link_order(order.id):
                    logger.warning(
                        f"⚠️ Transaction {reference} already linked to order "
                        f"{transaction.order_id}; leaving link unchanged"
                    )
                transaction.amount = order.total
                transaction.user_id = transaction.user_id or order.user_id
                transaction.payment_method = transaction.payment_method or order.payment_method
                transaction.metadata = {**transaction.metadata, **snapshot}
                transaction.mirror_payment_status(order.payment_status, now)
                await uow.transactions.save(transaction)
                logger.info(f"🔗 Linked transaction {reference} to order {order.order_number}")
                return transaction

            transaction = Transaction(
                transaction_reference=reference,
                amount=order.total,
                currency=self.checkout.currency,
                order_id=order.id,
                user_id=order.user_id,
                payment_method=order.payment_method,
                payment_provider=PaymentProvider.from_payment_method(order.payment_method),
                customer_email=recipient_for_address(customer, address),
                metadata=snapshot,
            )
            transaction.mirror_payment_status(order.payment_status, now)
            try:
                async with uow.savepoint():
                    await uow.transactions.add(transaction)
            except IntegrityError:
                # A concurrent delivery recorded the same reference first.
                raise DuplicatePaymentReference(reference)
        except SQLAlchemyError as e:
            logger.error(f"❌ Transaction record failed for {order.order_number}: {e}", exc_info=True)
            raise PersistenceFailure("Failed to record payment transaction") from e

        logger.info(f"✅ Transaction {reference} recorded ({transaction.status.value})")
        return transaction

    async def _consume_discount(self, uow: UnitOfWork, discount: DiscountResult) -> bool:
        """Claim one use of the code; False when the last use went to another order."""
        if await uow.discounts.increment_usage(discount.discount_id):
            return True
        if self.checkout.strict_discount_codes:
            raise InvalidDiscount(
                DiscountError(
                    "This discount has reached its usage limit.",
                    code=DiscountError.USAGE_LIMIT_REACHED,
                )
            )
        logger.warning(
            f"⚠️ Discount {discount.code} hit its usage limit while this order was placed; "
            f"continuing without it"
        )
        return False

    async def _after_commit(self, order: Order, customer: Optional[Customer]) -> None:
        events = order.pull_events()
        if events:
            await self.event_bus.publish_all(events)

        if self.dispatcher is not None:
            await self.dispatcher.order_created(order, recipient_for(order, customer))

