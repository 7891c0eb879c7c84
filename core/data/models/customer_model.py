"""SQLAlchemy ORM model for customers."""

from sqlalchemy import Column, DateTime, String

from .base import Base


class CustomerModel(Base):
    """SQLAlchemy ORM model for customers table."""

    __tablename__ = "customers"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=True, index=True)
    email = Column(String(255), nullable=True, index=True)
    full_name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True, index=True)
    source = Column(String(30), nullable=False, default="guest_checkout")
    created_by = Column(String(36), nullable=True)
    last_order_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
