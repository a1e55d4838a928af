"""
Shared fixtures: a file-backed SQLite catalog, seeding helpers, and a
TestClient wired to it through dependency overrides.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from catalog.api.dependencies.providers import get_product_queries, get_session
from catalog.core.config import Settings, get_settings
from catalog.db.models.order import Order, OrderItem
from catalog.db.models.product import Product
from catalog.db.session import build_engine, get_engine, get_session_factory, init_db
from catalog.main import app
from catalog.services.product_queries import ProductQueries


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'catalog.db'}"


@pytest.fixture
def settings(database_url):
    return Settings(
        _env_file=None,
        database_url=database_url,
        max_page_size=50,
        query_timeout_ms=1000,
        read_isolation_level=None,
    )


@pytest.fixture
def engine(settings):
    engine = build_engine(settings.database_url)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def queries(engine, settings):
    return ProductQueries(engine, settings)


@pytest.fixture
def session(engine):
    db = Session(engine)
    yield db
    db.close()


@pytest.fixture
def seed(engine):
    """Seeding helpers that commit in short-lived sessions and return ids."""

    class Seeder:
        def product(
            self,
            name: str,
            description: str = "",
            price: str = "10.00",
            stock_quantity: int = 5,
            active: bool = True,
        ) -> str:
            with Session(engine, expire_on_commit=False) as db:
                product = Product(
                    name=name,
                    description=description,
                    price=Decimal(price),
                    stock_quantity=stock_quantity,
                    active=active,
                )
                db.add(product)
                db.commit()
                return product.id

        def order(
            self,
            product_id: str,
            quantity: int | None,
            unit_price: str = "10.00",
            order_date: datetime | None = None,
        ) -> int:
            with Session(engine, expire_on_commit=False) as db:
                order = Order(
                    product_id=product_id,
                    order_date=order_date or datetime(2024, 3, 15, 12, 0),
                )
                db.add(order)
                db.flush()
                db.add(
                    OrderItem(
                        order_id=order.id,
                        product_id=product_id,
                        quantity=quantity,
                        unit_price=Decimal(unit_price),
                    )
                )
                db.commit()
                return order.id

    return Seeder()


@pytest.fixture
def client(engine, queries):
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    def override_session():
        db = factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_product_queries] = lambda: queries
    app.dependency_overrides[get_session] = override_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def process_engine(monkeypatch, database_url):
    """Point the process-wide settings and engine at the test database."""
    monkeypatch.setenv("DATABASE_URL", database_url)
    get_settings.cache_clear()
    get_engine.cache_clear()
    get_session_factory.cache_clear()
    yield get_engine()
    get_engine().dispose()
    get_settings.cache_clear()
    get_engine.cache_clear()
    get_session_factory.cache_clear()
