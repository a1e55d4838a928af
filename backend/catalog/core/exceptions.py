"""Error taxonomy shared by the query executor, commands and HTTP layer."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for product catalog errors."""


class InvalidArgument(CatalogError, ValueError):
    """Raised when a caller supplies an out-of-range or malformed argument."""


class StorageUnavailable(CatalogError):
    """Raised when the backing store cannot be reached or a statement fails."""


class ProductNotFound(CatalogError):
    """Raised by write-side commands when the product id matches no row.

    Read lookups return ``None`` instead of raising this.
    """

    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id
