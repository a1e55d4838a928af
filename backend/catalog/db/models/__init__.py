"""Database models package."""
from catalog.db.models.order import Order, OrderItem
from catalog.db.models.product import Product

__all__ = ["Product", "Order", "OrderItem"]
