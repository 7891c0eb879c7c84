"""Application commands."""
from .order_commands import CreateOrderCommand

__all__ = ["CreateOrderCommand"]
