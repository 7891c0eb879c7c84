"""SQLAlchemy ORM model for discount codes."""

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text

from .base import Base


class DiscountModel(Base):
    """SQLAlchemy ORM model for discounts table."""

    __tablename__ = "discounts"

    id = Column(String(36), primary_key=True)
    # Stored upper-case.
    code = Column(String(64), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    type = Column(String(20), nullable=False)
    value = Column(Numeric(12, 2), nullable=False, default=0)
    minimum_amount = Column(Numeric(12, 2), nullable=False, default=0)
    maximum_discount = Column(Numeric(12, 2), nullable=True)
    applies_to = Column(String(20), nullable=False, default="all")
    is_active = Column(Boolean, nullable=False, default=True)
    valid_from = Column(DateTime(timezone=True), nullable=True)
    valid_until = Column(DateTime(timezone=True), nullable=True)
    usage_limit = Column(Integer, nullable=True)
    used_count = Column(Integer, nullable=False, default=0)
