"""Product listing, reporting and editing endpoints."""

from __future__ import annotations

from datetime import date
import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from catalog.api.dependencies.providers import get_product_queries, get_session
from catalog.api.schemas.product import (
    ProductCreate,
    ProductDetailRead,
    ProductListResponse,
    ProductRead,
    ProductUpdate,
    StockAdjustment,
    TopSellerRead,
)
from catalog.core.config import get_settings
from catalog.core.exceptions import (
    InvalidArgument,
    ProductNotFound,
    StorageUnavailable,
)
from catalog.services import product_commands
from catalog.services.product_queries import ProductQueries
from catalog.services.read_models import PageRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _raise_http(exc: Exception, action: str) -> NoReturn:
    """Translate catalog errors into HTTP responses."""
    if isinstance(exc, InvalidArgument):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if isinstance(exc, ProductNotFound):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found") from exc
    if isinstance(exc, StorageUnavailable):
        logger.error(f"Storage unavailable while trying to {action}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Failed to {action}",
        ) from exc
    logger.error(f"Unexpected error while trying to {action}: {exc}", exc_info=True)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred",
    ) from exc


@router.get(
    "/",
    summary="List products with search and pagination",
    response_model=ProductListResponse,
)
def list_products(
    page: int = Query(1, description="Page number (1-indexed)"),
    page_size: int | None = Query(None, description="Items per page"),
    search_term: str | None = Query(
        None, description="Case-insensitive match on name or description"
    ),
    queries: ProductQueries = Depends(get_product_queries),
) -> ProductListResponse:
    """Return a page of products ordered by name, with the total match count."""
    if page_size is None:
        page_size = get_settings().default_page_size
    try:
        result = queries.paginate(
            PageRequest(page=page, page_size=page_size, search_term=search_term)
        )
    except Exception as e:
        _raise_http(e, "retrieve products")

    return ProductListResponse(
        items=[ProductRead.model_validate(item) for item in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )


@router.get(
    "/top-sellers",
    summary="Best-selling products within a date range",
    response_model=list[TopSellerRead],
)
def top_sellers(
    start: date = Query(..., description="First day of the range (inclusive)"),
    end: date = Query(..., description="Last day of the range (inclusive)"),
    limit: int = Query(10, description="Maximum number of products"),
    queries: ProductQueries = Depends(get_product_queries),
) -> list[TopSellerRead]:
    try:
        sellers = queries.top_sellers(start, end, limit)
    except Exception as e:
        _raise_http(e, "retrieve top sellers")
    return [TopSellerRead.model_validate(s) for s in sellers]


@router.get(
    "/{product_id}",
    summary="Product detail with order aggregates",
    response_model=ProductDetailRead,
)
def get_product(
    product_id: str,
    queries: ProductQueries = Depends(get_product_queries),
) -> ProductDetailRead:
    try:
        detail = queries.get_detail(product_id)
    except Exception as e:
        _raise_http(e, "retrieve product")
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return ProductDetailRead.model_validate(detail)


@router.post(
    "/",
    summary="Create a product",
    status_code=status.HTTP_201_CREATED,
    response_model=ProductRead,
)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_session),
) -> ProductRead:
    try:
        product = product_commands.create_product(
            db,
            name=payload.name,
            description=payload.description,
            price=payload.price,
            stock_quantity=payload.stock_quantity,
        )
    except Exception as e:
        _raise_http(e, "create product")
    return ProductRead.model_validate(product)


@router.put(
    "/{product_id}",
    summary="Update existing product",
    response_model=ProductRead,
)
def update_product(
    product_id: str,
    payload: ProductUpdate,
    db: Session = Depends(get_session),
) -> ProductRead:
    """Only updates provided fields (partial update)."""
    try:
        product = product_commands.update_product(
            db,
            product_id,
            name=payload.name,
            description=payload.description,
            price=payload.price,
        )
    except Exception as e:
        _raise_http(e, "update product")
    return ProductRead.model_validate(product)


@router.post("/{product_id}/activate", summary="Activate product", response_model=ProductRead)
def activate_product(product_id: str, db: Session = Depends(get_session)) -> ProductRead:
    try:
        product = product_commands.set_product_active(db, product_id, True)
    except Exception as e:
        _raise_http(e, "activate product")
    return ProductRead.model_validate(product)


@router.post("/{product_id}/deactivate", summary="Deactivate product", response_model=ProductRead)
def deactivate_product(product_id: str, db: Session = Depends(get_session)) -> ProductRead:
    try:
        product = product_commands.set_product_active(db, product_id, False)
    except Exception as e:
        _raise_http(e, "deactivate product")
    return ProductRead.model_validate(product)


@router.post("/{product_id}/stock", summary="Adjust stock quantity", response_model=ProductRead)
def adjust_stock(
    product_id: str,
    payload: StockAdjustment,
    db: Session = Depends(get_session),
) -> ProductRead:
    try:
        product = product_commands.adjust_stock(db, product_id, payload.delta)
    except Exception as e:
        _raise_http(e, "adjust stock")
    return ProductRead.model_validate(product)
