"""Application use cases."""
from .create_order import CreateOrderUseCase, transaction_reference_for

__all__ = [
    "CreateOrderUseCase",
    "transaction_reference_for",
]
