"""
Order total calculation.

Turns the loosely-shaped line items a storefront posts into sanitized lines
and derives the monetary breakdown stored on the order.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from ..exceptions import InvalidTotal
from ..value_objects import round2, to_decimal
from .discount_evaluator import DiscountResult

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
LINE_TOLERANCE = Decimal("0.01")
DEFAULT_ITEM_NAME = "Deal Product"


def _first(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None


def _clean_id(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class SanitizedItem:
    """A line item with every price field resolved."""

    product_id: Optional[str]
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    variant_options: Dict[str, Any] = field(default_factory=dict)
    source_id: Optional[str] = None
    deal_id: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    original_price: Optional[Decimal] = None
    discount_percentage: Optional[Decimal] = None


@dataclass(frozen=True)
class OrderTotals:
    """
    Monetary breakdown of an order.

    ``discount`` is the amount actually granted and ``shipping_fee`` the fee
    before any free-shipping waiver, so that
    ``total == subtotal - discount + tax + shipping_fee``.
    """

    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    shipping_fee: Decimal
    adjusted_shipping_fee: Decimal
    total: Decimal


def sanitize_item(raw: Dict[str, Any]) -> SanitizedItem:
    """
    Normalize one posted line item.

    Accepts both catalog (``product_id``/``unit_price``) and deal/cart
    (``id``/``price``/``original_price``) shapes. The line subtotal is always
    ``unit_price * quantity``; a client subtotal that disagrees is logged and
    replaced.
    """
    try:
        quantity = int(raw.get("quantity") or 1)
    except (TypeError, ValueError):
        quantity = 1
    if quantity <= 0:
        quantity = 1

    unit_price = to_decimal(_first(raw, "unit_price", "price", "original_price"), ZERO)
    unit_price = round2(max(ZERO, unit_price))
    subtotal = round2(unit_price * quantity)

    client_subtotal = to_decimal(_first(raw, "subtotal", "total_price"))
    if client_subtotal is not None and abs(client_subtotal - subtotal) > LINE_TOLERANCE:
        logger.warning(
            f"⚠️ Line subtotal mismatch for {raw.get('product_name') or raw.get('name')}: "
            f"client={client_subtotal}, computed={subtotal}"
        )

    variants = _first(raw, "variant_options", "selected_variants") or {}

    return SanitizedItem(
        product_id=_clean_id(_first(raw, "product_id", "id")),
        product_name=_first(raw, "product_name", "name") or DEFAULT_ITEM_NAME,
        quantity=quantity,
        unit_price=unit_price,
        subtotal=subtotal,
        variant_options=dict(variants) if isinstance(variants, dict) else {},
        source_id=_clean_id(_first(raw, "standalone_source_id", "deal_product_id", "id")),
        deal_id=_clean_id(raw.get("deal_id")),
        description=_first(raw, "product_description", "description"),
        image=_first(raw, "product_image", "thumbnail", "image"),
        original_price=to_decimal(_first(raw, "original_price", "price")),
        discount_percentage=to_decimal(raw.get("discount_percentage")),
    )


def sanitize_items(raw_items: Iterable[Dict[str, Any]]) -> List[SanitizedItem]:
    return [sanitize_item(raw) for raw in raw_items]


def compute_subtotal(items: Iterable[SanitizedItem]) -> Decimal:
    return round2(sum((item.subtotal for item in items), ZERO))


def compute_totals(
    subtotal: Decimal,
    delivery_fee: Decimal,
    tax: Decimal = ZERO,
    discount: Optional[DiscountResult] = None,
    client_total: Optional[Decimal] = None,
    tolerance: Decimal = Decimal("0.5"),
) -> OrderTotals:
    """
    Derive the order breakdown.

    Percentage and fixed discounts reduce the product subtotal (never below
    zero); free shipping is realized through the adjusted delivery fee. Tax is
    taken as already computed on the discounted base.

    Raises:
        InvalidTotal: if the resulting total is not positive
    """
    subtotal = round2(subtotal)
    delivery_fee = round2(max(ZERO, delivery_fee))
    tax = round2(max(ZERO, tax))

    granted = ZERO
    adjusted_fee = delivery_fee
    discounted_subtotal = subtotal
    if discount is not None and discount.is_free_shipping:
        granted = delivery_fee
        adjusted_fee = ZERO
    elif discount is not None:
        granted = min(discount.discount_amount, subtotal)
        adjusted_fee = discount.adjusted_delivery_fee
        discounted_subtotal = max(ZERO, subtotal - granted)

    total = round2(discounted_subtotal + tax + adjusted_fee)
    if total <= 0:
        raise InvalidTotal(total)

    if client_total is not None and abs(round2(client_total) - total) > tolerance:
        logger.warning(
            f"⚠️ Client total {client_total} differs from computed total {total}; "
            f"using computed value"
        )

    return OrderTotals(
        subtotal=subtotal,
        discount=round2(granted),
        tax=tax,
        shipping_fee=delivery_fee,
        adjusted_shipping_fee=round2(adjusted_fee),
        total=total,
    )
