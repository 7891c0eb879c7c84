"""Static mappers for domain entities ↔ database models."""

from decimal import Decimal
from typing import Any, Optional

from core.domain.entities.customer import Customer
from core.domain.entities.discount import Discount
from core.domain.entities.order import DealSnapshot, Order, OrderItem
from core.domain.entities.product import DealProduct
from core.domain.entities.transaction import Transaction
from core.domain.enums import (
    CustomerSource,
    DiscountAppliesTo,
    OrderStatus,
    PaymentProvider,
    PaymentStatus,
    TransactionStatus,
)
from core.domain.value_objects import ShippingAddress, ensure_utc, to_decimal

from .models.catalog_model import DealProductModel
from .models.customer_model import CustomerModel
from .models.discount_model import DiscountModel
from .models.order_model import OrderItemModel, OrderModel
from .models.transaction_model import TransactionModel


def _money(value: Any) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0.00")


def _optional_money(value: Any) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


class OrderItemMapper:
    """Static mapper for OrderItem ↔ OrderItemModel transformation."""

    @staticmethod
    def to_domain(model: OrderItemModel) -> OrderItem:
        """Convert ORM model to domain entity.

        Args:
            model: OrderItemModel instance

        Returns:
            OrderItem domain entity
        """
        snapshot = None
        if model.deal_snapshot:
            data = model.deal_snapshot
            snapshot = DealSnapshot(
                deal_product_id=data.get("deal_product_id"),
                product_name=data.get("product_name") or model.product_name,
                unit_price=to_decimal(data.get("unit_price"), _money(model.unit_price)),
                deal_id=data.get("deal_id"),
                product_description=data.get("product_description"),
                image=data.get("image"),
                original_price=to_decimal(data.get("original_price")),
                discount_percentage=to_decimal(data.get("discount_percentage")),
                source=data.get("source") or "deal_product",
            )

        return OrderItem(
            id=model.id,
            product_id=model.product_id,
            deal_product_id=model.deal_product_id,
            product_name=model.product_name,
            quantity=model.quantity,
            unit_price=_money(model.unit_price),
            subtotal=_money(model.subtotal),
            variant_options=dict(model.variant_options or {}),
            deal_snapshot=snapshot,
        )

    @staticmethod
    def to_persistence(entity: OrderItem, order_id: str) -> OrderItemModel:
        """Convert domain entity to ORM model.

        Args:
            entity: OrderItem domain entity
            order_id: Owning order UUID

        Returns:
            OrderItemModel instance
        """
        return OrderItemModel(
            id=entity.id,
            order_id=order_id,
            product_id=entity.product_id,
            deal_product_id=entity.deal_product_id,
            product_name=entity.product_name,
            quantity=entity.quantity,
            unit_price=entity.unit_price,
            subtotal=entity.subtotal,
            variant_options=entity.variant_options or {},
            deal_snapshot=entity.deal_snapshot.to_dict() if entity.deal_snapshot else None,
        )


class OrderMapper:
    """Static mapper for Order ↔ OrderModel transformation with nested items."""

    @staticmethod
    def to_domain(model: OrderModel) -> Order:
        """Convert ORM model to domain aggregate (with nested items).

        Args:
            model: OrderModel instance

        Returns:
            Order domain aggregate
        """
        items = [OrderItemMapper.to_domain(item_model) for item_model in model.items]

        return Order(
            id=model.id,
            order_number=model.order_number,
            customer_id=model.customer_id,
            user_id=model.user_id,
            status=OrderStatus(model.status),
            payment_status=PaymentStatus(model.payment_status),
            subtotal=_money(model.subtotal),
            discount=_money(model.discount),
            discount_code=model.discount_code,
            tax=_money(model.tax),
            shipping_fee=_money(model.shipping_fee),
            total=_money(model.total),
            payment_method=model.payment_method,
            payment_reference=model.payment_reference,
            shipping_address=ShippingAddress.from_dict(model.shipping_address),
            notes=model.notes,
            tracking_number=model.tracking_number,
            items=items,
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
        )

    @staticmethod
    def to_persistence(entity: Order) -> OrderModel:
        """Convert domain aggregate to ORM model (with nested items).

        Args:
            entity: Order domain aggregate

        Returns:
            OrderModel instance
        """
        order_model = OrderModel(id=entity.id, order_number=entity.order_number)
        OrderMapper.update_persistence(entity, order_model)

        order_model.items = [
            OrderItemMapper.to_persistence(item, entity.id) for item in entity.items
        ]

        return order_model

    @staticmethod
    def update_persistence(entity: Order, model: OrderModel) -> OrderModel:
        """Update existing ORM model from domain entity (items are immutable).

        Args:
            entity: Order domain aggregate
            model: Existing OrderModel instance

        Returns:
            Updated OrderModel instance
        """
        model.customer_id = entity.customer_id
        model.user_id = entity.user_id
        model.status = entity.status.value
        model.payment_status = entity.payment_status.value
        model.subtotal = entity.subtotal
        model.discount = entity.discount
        model.discount_code = entity.discount_code
        model.tax = entity.tax
        model.shipping_fee = entity.shipping_fee
        model.total = entity.total
        model.payment_method = entity.payment_method
        model.payment_reference = entity.payment_reference
        model.shipping_address = entity.shipping_address.to_dict()
        model.notes = entity.notes
        model.tracking_number = entity.tracking_number
        model.created_at = entity.created_at
        model.updated_at = entity.updated_at
        return model


class TransactionMapper:
    """Static mapper for Transaction ↔ TransactionModel."""

    @staticmethod
    def to_domain(model: TransactionModel) -> Transaction:
        return Transaction(
            id=model.id,
            order_id=model.order_id,
            user_id=model.user_id,
            transaction_reference=model.transaction_reference,
            payment_method=model.payment_method,
            payment_provider=PaymentProvider(model.payment_provider),
            amount=_money(model.amount),
            currency=model.currency,
            status=TransactionStatus(model.status),
            payment_status=PaymentStatus(model.payment_status),
            customer_email=model.customer_email,
            metadata=dict(model.transaction_metadata or {}),
            initiated_at=ensure_utc(model.initiated_at),
            paid_at=ensure_utc(model.paid_at),
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
        )

    @staticmethod
    def to_persistence(entity: Transaction) -> TransactionModel:
        model = TransactionModel(id=entity.id)
        return TransactionMapper.update_persistence(entity, model)

    @staticmethod
    def update_persistence(entity: Transaction, model: TransactionModel) -> TransactionModel:
        model.order_id = entity.order_id
        model.user_id = entity.user_id
        model.transaction_reference = entity.transaction_reference
        model.payment_method = entity.payment_method
        model.payment_provider = entity.payment_provider.value
        model.amount = entity.amount
        model.currency = entity.currency
        model.status = entity.status.value
        model.payment_status = entity.payment_status.value
        model.customer_email = entity.customer_email
        model.transaction_metadata = entity.metadata
        model.initiated_at = entity.initiated_at
        model.paid_at = entity.paid_at
        model.created_at = entity.created_at
        model.updated_at = entity.updated_at
        return model


class DiscountMapper:
    """Discounts are read-only for this service."""

    @staticmethod
    def to_domain(model: DiscountModel) -> Discount:
        return Discount(
            id=model.id,
            code=model.code,
            description=model.description,
            discount_type=model.type,
            value=_money(model.value),
            applies_to=DiscountAppliesTo(model.applies_to or DiscountAppliesTo.ALL.value),
            minimum_amount=_money(model.minimum_amount),
            maximum_discount=_optional_money(model.maximum_discount),
            is_active=bool(model.is_active),
            valid_from=ensure_utc(model.valid_from),
            valid_until=ensure_utc(model.valid_until),
            usage_limit=model.usage_limit,
            used_count=model.used_count or 0,
        )


class CustomerMapper:
    """Static mapper for Customer ↔ CustomerModel."""

    @staticmethod
    def to_domain(model: CustomerModel) -> Customer:
        return Customer(
            id=model.id,
            user_id=model.user_id,
            email=model.email,
            full_name=model.full_name,
            phone=model.phone,
            source=CustomerSource(model.source),
            created_by=model.created_by,
            last_order_at=ensure_utc(model.last_order_at),
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
        )

    @staticmethod
    def update_persistence(entity: Customer, model: CustomerModel) -> CustomerModel:
        model.user_id = entity.user_id
        model.email = entity.email
        model.full_name = entity.full_name
        model.phone = entity.phone
        model.source = entity.source.value
        model.created_by = entity.created_by
        model.last_order_at = entity.last_order_at
        model.created_at = entity.created_at
        model.updated_at = entity.updated_at
        return model


class DealProductMapper:
    @staticmethod
    def to_domain(model: DealProductModel) -> DealProduct:
        return DealProduct(
            id=model.id,
            deal_id=model.deal_id,
            name=model.name,
            description=model.description,
            image=model.image,
            price=_money(model.price),
            original_price=_optional_money(model.original_price),
            discount_percentage=_optional_money(model.discount_percentage),
            stock_quantity=model.stock_quantity,
        )
