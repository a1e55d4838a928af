"""Immutable result shapes returned by the product read queries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ProductSummary:
    id: str
    name: str
    description: str
    price: Decimal
    stock_quantity: int
    active: bool


@dataclass(frozen=True, slots=True)
class ProductDetail:
    """Summary fields plus order aggregates for a single product."""

    id: str
    name: str
    description: str
    price: Decimal
    stock_quantity: int
    active: bool
    created_at: datetime | None
    updated_at: datetime | None
    total_orders: int
    total_units_sold: int


@dataclass(frozen=True, slots=True)
class TopSellingProduct:
    id: str
    name: str
    total_quantity: int
    total_revenue: Decimal


@dataclass(frozen=True, slots=True, kw_only=True)
class PageRequest:
    page: int = 1
    page_size: int
    search_term: str | None = None


@dataclass(frozen=True, slots=True)
class PageResult(Generic[T]):
    """A single page of items plus the size of the whole filtered result."""

    items: tuple[T, ...]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        # ceil(total / page_size) without floats
        return -(-self.total // self.page_size)
