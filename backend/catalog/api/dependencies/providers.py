"""FastAPI dependencies for database sessions and the product query executor."""

from collections.abc import Generator
from functools import lru_cache

from sqlalchemy.orm import Session

from catalog.core.config import get_settings
from catalog.db.session import get_db, get_engine
from catalog.services.product_queries import ProductQueries


def get_session() -> Generator[Session, None, None]:
    """Yield a managed SQLAlchemy session for write endpoints."""
    yield from get_db()


@lru_cache
def get_product_queries() -> ProductQueries:
    """Shared, stateless query executor bound to the process engine."""
    return ProductQueries(get_engine(), get_settings())
