"""
Order commands.

Inputs of the order creation workflow, independent of how they arrived
(checkout API or gateway webhook).
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from core.application.actor import Actor
from core.domain.value_objects import to_decimal


@dataclass
class CreateOrderCommand:
    """Command to place an order."""

    items: List[Dict[str, Any]]
    delivery_address: Optional[Dict[str, Any]]
    delivery_option: Optional[Dict[str, Any]] = None
    delivery_fee: Optional[Decimal] = None
    tax: Decimal = Decimal("0")
    client_subtotal: Optional[Decimal] = None
    client_total: Optional[Decimal] = None
    discount_code: Optional[str] = None
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    notes: Optional[str] = None
    order_number: Optional[str] = None

    # Identity hints
    user_id: Optional[str] = None
    customer_id: Optional[str] = None
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    actor: Optional[Actor] = None

    # Set by the webhook path once the gateway confirmed the charge
    payment_confirmed: bool = False
    source: str = "checkout"
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def normalized_delivery_fee(self) -> Decimal:
        """``delivery_fee``, else the delivery option price, else 0."""
        if self.delivery_fee is not None:
            return to_decimal(self.delivery_fee, Decimal("0"))
        return to_decimal((self.delivery_option or {}).get("price"), Decimal("0"))
