"""Shipping address value objects."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional

from .value_objects import round2, to_decimal

_ADDRESS_FIELDS = (
    "full_name",
    "email",
    "phone",
    "street",
    "city",
    "region",
    "postal_code",
    "country",
    "landmark",
)


@dataclass(frozen=True)
class DeliveryOption:
    """Delivery option chosen at checkout."""
    name: str = "Standard"
    price: Decimal = Decimal("0.00")

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "price": str(round2(self.price))}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["DeliveryOption"]:
        if not data:
            return None
        return cls(
            name=data.get("name") or "Standard",
            price=round2(to_decimal(data.get("price"), Decimal("0"))),
        )


@dataclass(frozen=True)
class ShippingAddress:
    """
    Structured delivery address stored on an order.

    Carries the chosen delivery option and the payment reference used at
    checkout. Keys the storefront sends that are not modelled here are kept
    in ``extra`` so nothing the customer typed is lost.
    """
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    landmark: Optional[str] = None
    delivery_option: Optional[DeliveryOption] = None
    payment_reference: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        for name in _ADDRESS_FIELDS:
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        data["delivery_option"] = (
            self.delivery_option.to_dict() if self.delivery_option else None
        )
        data["payment_reference"] = self.payment_reference
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ShippingAddress":
        data = dict(data or {})
        delivery_option = DeliveryOption.from_dict(data.pop("delivery_option", None))
        payment_reference = data.pop("payment_reference", None)
        known = {name: data.pop(name) for name in _ADDRESS_FIELDS if name in data}
        # Storefront forms use "address" / "state" for street / region.
        if "street" not in known and isinstance(data.get("address"), str):
            known["street"] = data.pop("address")
        if "region" not in known and isinstance(data.get("state"), str):
            known["region"] = data.pop("state")
        return cls(
            **known,
            delivery_option=delivery_option,
            payment_reference=payment_reference,
            extra=data,
        )
