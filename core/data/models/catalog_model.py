"""SQLAlchemy ORM models for catalog products, deal products and store settings."""

from sqlalchemy import Boolean, Column, Integer, Numeric, String, Text

from .base import Base


class ProductModel(Base):
    """Catalog products (checkout only reads ids and adjusts stock)."""

    __tablename__ = "products"

    id = Column(String(36), primary_key=True)
    name = Column(String(500), nullable=False)
    price = Column(Numeric(12, 2), nullable=False, default=0)
    stock_quantity = Column(Integer, nullable=False, default=0)
    in_stock = Column(Boolean, nullable=False, default=False)


class DealProductModel(Base):
    """Standalone deal products that live outside the catalog."""

    __tablename__ = "deal_products"

    id = Column(String(64), primary_key=True)
    deal_id = Column(String(36), nullable=True, index=True)
    name = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    image = Column(String(1000), nullable=True)
    price = Column(Numeric(12, 2), nullable=False, default=0)
    original_price = Column(Numeric(12, 2), nullable=True)
    discount_percentage = Column(Numeric(5, 2), nullable=True)
    stock_quantity = Column(Integer, nullable=True)


class StoreSettingModel(Base):
    """Key/value settings edited from the admin dashboard."""

    __tablename__ = "store_settings"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=True)
