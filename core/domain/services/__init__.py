"""Pure domain policies (no I/O)."""
from .discount_evaluator import CartSnapshot, DiscountEvaluator, DiscountResult
from .order_totals import (
    OrderTotals,
    SanitizedItem,
    compute_subtotal,
    compute_totals,
    sanitize_item,
    sanitize_items,
)

__all__ = [
    "CartSnapshot",
    "DiscountEvaluator",
    "DiscountResult",
    "OrderTotals",
    "SanitizedItem",
    "compute_subtotal",
    "compute_totals",
    "sanitize_item",
    "sanitize_items",
]
