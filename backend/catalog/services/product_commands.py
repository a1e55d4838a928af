"""Write-side operations on products (create, edit, activation, stock)."""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal, InvalidOperation
import logging
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catalog.core.exceptions import InvalidArgument, ProductNotFound, StorageUnavailable
from catalog.db.models.product import Product
from catalog.db.repository import ProductRepository

logger = logging.getLogger(__name__)

R = TypeVar("R")


def _clean_name(name: str | None) -> str:
    if name is None or not name.strip():
        raise InvalidArgument("Product name is required")
    return name.strip()


def _clean_price(price: Decimal | int | float | str) -> Decimal:
    try:
        value = Decimal(str(price))
    except InvalidOperation as e:
        raise InvalidArgument(f"Invalid price: {price!r}") from e
    if not value.is_finite() or value < 0:
        raise InvalidArgument("Price cannot be negative")
    return value.quantize(Decimal("0.01"))


def _clean_stock(stock_quantity: int) -> int:
    if stock_quantity < 0:
        raise InvalidArgument("Stock quantity cannot be negative")
    return stock_quantity


def _commit(db: Session, action: str, work: Callable[[], R]) -> R:
    """Run ``work`` and commit, rolling back on any failure."""
    try:
        result = work()
        db.commit()
        return result
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error during {action}: {e}", exc_info=True)
        raise StorageUnavailable(f"Failed to {action}") from e
    except Exception:
        db.rollback()
        raise


def _require(repo: ProductRepository, product_id: str) -> Product:
    product = repo.get(product_id)
    if product is None:
        raise ProductNotFound(product_id)
    return product


def create_product(
    db: Session,
    *,
    name: str,
    price: Decimal | int | float | str,
    stock_quantity: int = 0,
    description: str | None = None,
) -> Product:
    """Validate and persist a new, active product."""
    product = Product(
        name=_clean_name(name),
        description=(description or "").strip(),
        price=_clean_price(price),
        stock_quantity=_clean_stock(stock_quantity),
        active=True,
    )
    repo = ProductRepository(db)
    _commit(db, "create product", lambda: repo.add(product))
    db.refresh(product)
    logger.info(f"Created product {product.id} ({product.name})")
    return product


def update_product(
    db: Session,
    product_id: str,
    *,
    name: str | None = None,
    description: str | None = None,
    price: Decimal | int | float | str | None = None,
) -> Product:
    """Apply a partial update; omitted fields keep their current values."""
    repo = ProductRepository(db)

    def apply() -> Product:
        product = _require(repo, product_id)
        if name is not None:
            product.name = _clean_name(name)
        if description is not None:
            product.description = description.strip()
        if price is not None:
            product.price = _clean_price(price)
        return product

    product = _commit(db, f"update product {product_id}", apply)
    db.refresh(product)
    logger.info(f"Updated product {product_id}")
    return product


def set_product_active(db: Session, product_id: str, active: bool) -> Product:
    repo = ProductRepository(db)

    def apply() -> Product:
        product = _require(repo, product_id)
        product.active = active
        return product

    product = _commit(db, f"change status of product {product_id}", apply)
    db.refresh(product)
    logger.info(f"Product {product_id} {'activated' if active else 'deactivated'}")
    return product


def adjust_stock(db: Session, product_id: str, delta: int) -> Product:
    """Add ``delta`` (may be negative) to the stock; the result cannot drop below zero."""
    repo = ProductRepository(db)

    def apply() -> Product:
        product = _require(repo, product_id)
        new_quantity = product.stock_quantity + delta
        if new_quantity < 0:
            raise InvalidArgument(
                f"Insufficient stock for product {product_id}: "
                f"have {product.stock_quantity}, requested {-delta}"
            )
        product.stock_quantity = new_quantity
        return product

    product = _commit(db, f"adjust stock of product {product_id}", apply)
    db.refresh(product)
    logger.info(f"Adjusted stock of product {product_id} by {delta}")
    return product
