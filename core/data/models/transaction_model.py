"""SQLAlchemy ORM model for payment transactions."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Numeric, String

from .base import Base


class TransactionModel(Base):
    """SQLAlchemy ORM model for transactions table."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=True, index=True)
    user_id = Column(String(36), nullable=True)
    # Idempotency key for gateway callbacks.
    transaction_reference = Column(String(128), unique=True, nullable=False)
    payment_method = Column(String(50), nullable=True)
    payment_provider = Column(String(20), nullable=False, default="other")
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="GHS")
    status = Column(String(20), nullable=False, default="pending")
    payment_status = Column(String(20), nullable=False, default="pending")
    customer_email = Column(String(255), nullable=True)
    # "metadata" is reserved on declarative classes
    transaction_metadata = Column("metadata", JSON, nullable=True)
    initiated_at = Column(DateTime(timezone=True), nullable=False)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
