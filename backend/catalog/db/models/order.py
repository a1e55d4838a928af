"""SQLAlchemy models for orders and their line items."""

from sqlalchemy import Column, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.types import DateTime

from catalog.db.base import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False, index=True)
    order_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False, index=True)
    # Null quantities count as zero in aggregates
    quantity = Column(Integer)
    unit_price = Column(Numeric(12, 2), nullable=False, default=0)
