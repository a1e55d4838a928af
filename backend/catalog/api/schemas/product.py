"""Pydantic models describing Product payloads."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    price: Decimal = Field(..., ge=0)
    stock_quantity: int = Field(0, ge=0)


class ProductUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    price: Decimal | None = Field(None, ge=0)


class StockAdjustment(BaseModel):
    delta: int = Field(..., description="Units to add (positive) or remove (negative)")


class ProductRead(BaseModel):
    id: str
    name: str
    description: str
    price: Decimal
    stock_quantity: int
    active: bool

    model_config = {"from_attributes": True}


class ProductDetailRead(ProductRead):
    created_at: datetime | None = None
    updated_at: datetime | None = None
    total_orders: int
    total_units_sold: int


class TopSellerRead(BaseModel):
    id: str
    name: str
    total_quantity: int
    total_revenue: Decimal

    model_config = {"from_attributes": True}


class ProductListResponse(BaseModel):
    items: list[ProductRead]
    total: int
    page: int
    page_size: int
    total_pages: int
