"""Persistence access for product aggregates."""

from __future__ import annotations

from sqlalchemy.orm import Session

from catalog.db.models.product import Product


class ProductRepository:
    """Thin wrapper around a Session for create/read/update by id."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, product: Product) -> Product:
        self.session.add(product)
        self.session.flush()
        return product

    def get(self, product_id: str) -> Product | None:
        return self.session.get(Product, product_id)
