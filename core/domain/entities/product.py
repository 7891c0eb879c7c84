"""Catalog read models used at checkout."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass
class Product:
    """Catalog product (only the fields checkout touches)."""

    id: str
    name: str
    price: Decimal
    stock_quantity: int = 0
    in_stock: bool = False


@dataclass
class DealProduct:
    """Standalone promotional product sold outside the catalog."""

    id: str
    name: str
    price: Decimal
    deal_id: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    original_price: Optional[Decimal] = None
    discount_percentage: Optional[Decimal] = None
    # None when the deal does not track stock.
    stock_quantity: Optional[int] = None
