"""Read-side queries for products: paged search, detail and top sellers."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime, time, timedelta
from decimal import Decimal
import logging

from sqlalchemy import func, select, text
from sqlalchemy.engine import Connection, Engine, Row
from sqlalchemy.exc import SQLAlchemyError

from catalog.core.config import Settings
from catalog.core.exceptions import InvalidArgument, StorageUnavailable
from catalog.db.models.order import Order, OrderItem
from catalog.db.models.product import Product
from catalog.services.filters import search_predicate
from catalog.services.read_models import (
    PageRequest,
    PageResult,
    ProductDetail,
    ProductSummary,
    TopSellingProduct,
)

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = (
    Product.id.label("id"),
    Product.name.label("name"),
    Product.description.label("description"),
    Product.price.label("price"),
    Product.stock_quantity.label("stock_quantity"),
    Product.active.label("active"),
)

CENTS = Decimal("0.01")


def _to_money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENTS)


def _summary_from_row(row: Row) -> ProductSummary:
    return ProductSummary(
        id=row.id,
        name=row.name,
        description=row.description or "",
        price=_to_money(row.price),
        stock_quantity=int(row.stock_quantity or 0),
        active=bool(row.active),
    )


def _range_bounds(start: date, end: date) -> tuple[datetime, datetime, bool]:
    """Turn an inclusive [start, end] range into datetime bounds.

    Returns (lower, upper, upper_is_exclusive). Plain dates cover whole days,
    so the upper bound becomes midnight after ``end`` and is exclusive.
    """
    lower = start if isinstance(start, datetime) else datetime.combine(start, time.min)
    if isinstance(end, datetime):
        return lower, end, False
    return lower, datetime.combine(end + timedelta(days=1), time.min), True


class ProductQueries:
    """Query executor for product reads.

    Each call acquires a connection from ``engine``, runs its statements in a
    single transaction and releases the connection before returning, so an
    instance holds no per-call state and can be shared across threads.
    """

    def __init__(self, engine: Engine, settings: Settings) -> None:
        self._engine = engine
        self._max_page_size = settings.max_page_size
        self._timeout_ms = settings.query_timeout_ms
        self._isolation_level = settings.read_isolation_level

    @contextmanager
    def _read_transaction(self) -> Iterator[Connection]:
        try:
            with self._engine.connect() as conn:
                dialect = conn.dialect.name
                # SQLite transactions are already serializable
                if self._isolation_level and dialect != "sqlite":
                    conn.execution_options(isolation_level=self._isolation_level)
                with conn.begin():
                    if self._timeout_ms and dialect == "postgresql":
                        conn.execute(
                            text(f"SET LOCAL statement_timeout = {int(self._timeout_ms)}")
                        )
                    yield conn
        except SQLAlchemyError as e:
            logger.error(f"Product read query failed: {e}", exc_info=True)
            raise StorageUnavailable("Product store is unavailable") from e

    def _effective_page_size(self, page_size: int) -> int:
        if page_size <= 0:
            raise InvalidArgument(f"page_size must be positive, got {page_size}")
        if page_size > self._max_page_size:
            logger.warning(
                f"Requested page_size {page_size} capped to {self._max_page_size}"
            )
            return self._max_page_size
        return page_size

    def paginate(self, request: PageRequest) -> PageResult[ProductSummary]:
        """Return one page of products ordered by name plus the total match count."""
        page_size = self._effective_page_size(request.page_size)
        if request.page < 1:
            raise InvalidArgument(f"page must be >= 1, got {request.page}")
        skip = (request.page - 1) * page_size

        count_stmt = select(func.count()).select_from(Product)
        page_stmt = (
            select(*SUMMARY_COLUMNS)
            .order_by(Product.name.asc(), Product.id.asc())
            .offset(skip)
            .limit(page_size)
        )
        predicate = search_predicate(request.search_term)
        if predicate is not None:
            count_stmt = count_stmt.where(predicate)
            page_stmt = page_stmt.where(predicate)

        with self._read_transaction() as conn:
            total = conn.scalar(count_stmt) or 0
            rows = conn.execute(page_stmt).all() if skip < total else []

        logger.debug(
            f"Paginated products page={request.page} page_size={page_size} "
            f"search={request.search_term!r} total={total} returned={len(rows)}"
        )
        return PageResult(
            items=tuple(_summary_from_row(row) for row in rows),
            total=total,
            page=request.page,
            page_size=page_size,
        )

    def get_detail(self, product_id: str) -> ProductDetail | None:
        """Return a product with its order count and units sold, or None."""
        total_orders = (
            select(func.count(Order.id))
            .where(Order.product_id == Product.id)
            .scalar_subquery()
        )
        total_units_sold = (
            select(func.coalesce(func.sum(func.coalesce(OrderItem.quantity, 0)), 0))
            .where(OrderItem.product_id == Product.id)
            .scalar_subquery()
        )
        stmt = select(
            *SUMMARY_COLUMNS,
            Product.created_at.label("created_at"),
            Product.updated_at.label("updated_at"),
            total_orders.label("total_orders"),
            total_units_sold.label("total_units_sold"),
        ).where(Product.id == product_id)

        with self._read_transaction() as conn:
            row = conn.execute(stmt).first()

        if row is None:
            logger.debug(f"Product {product_id} not found")
            return None
        summary = _summary_from_row(row)
        return ProductDetail(
            id=summary.id,
            name=summary.name,
            description=summary.description,
            price=summary.price,
            stock_quantity=summary.stock_quantity,
            active=summary.active,
            created_at=row.created_at,
            updated_at=row.updated_at,
            total_orders=int(row.total_orders or 0),
            total_units_sold=int(row.total_units_sold or 0),
        )

    def top_sellers(self, start: date, end: date, limit: int) -> list[TopSellingProduct]:
        """Best-selling products by units sold within the inclusive date range.

        Ties on quantity fall back to name, then id.
        """
        if limit <= 0:
            raise InvalidArgument(f"limit must be positive, got {limit}")
        lower, upper, upper_exclusive = _range_bounds(start, end)
        if lower > upper or (upper_exclusive and lower == upper):
            raise InvalidArgument(f"start {start} is after end {end}")

        line_quantity = func.coalesce(OrderItem.quantity, 0)
        total_quantity = func.coalesce(func.sum(line_quantity), 0).label("total_quantity")
        total_revenue = func.coalesce(
            func.sum(line_quantity * OrderItem.unit_price), 0
        ).label("total_revenue")
        in_range = (
            Order.order_date < upper if upper_exclusive else Order.order_date <= upper
        )
        stmt = (
            select(
                Product.id.label("id"),
                Product.name.label("name"),
                total_quantity,
                total_revenue,
            )
            .select_from(OrderItem)
            .join(Order, Order.id == OrderItem.order_id)
            .join(Product, Product.id == OrderItem.product_id)
            .where(Order.order_date >= lower, in_range)
            .group_by(Product.id, Product.name)
            .order_by(total_quantity.desc(), Product.name.asc(), Product.id.asc())
            .limit(limit)
        )

        with self._read_transaction() as conn:
            rows = conn.execute(stmt).all()

        return [
            TopSellingProduct(
                id=row.id,
                name=row.name,
                total_quantity=int(row.total_quantity or 0),
                total_revenue=_to_money(row.total_revenue),
            )
            for row in rows
        ]
