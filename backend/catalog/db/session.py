"""Engine and session factory configuration."""

from __future__ import annotations

from collections.abc import Generator
from functools import lru_cache
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from catalog.core.config import get_settings
from catalog.db.base import Base

logger = logging.getLogger(__name__)


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _enable_sqlite_transactions(engine: Engine) -> None:
    """Let SQLAlchemy emit BEGIN itself so reads share one SQLite transaction.

    pysqlite only opens a transaction before DML, which would leave a count and
    the following page SELECT on separate snapshots. The built-in lower() is
    also replaced, since SQLite only folds ASCII and searches use lower() LIKE.
    """

    @event.listens_for(engine, "connect")
    def _configure_pysqlite(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine with pool settings suited to the target dialect.

    PostgreSQL gets a pre-pinged, recycled QueuePool with keepalives so stale
    connections surface as reconnects instead of query failures. SQLite (used
    for local runs and tests) shares one connection across threads when the
    database lives in memory.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, echo=echo, future=True, **kwargs)
        _enable_sqlite_transactions(engine)
        return engine

    return create_engine(
        database_url,
        echo=echo,
        future=True,
        pool_pre_ping=True,  # Test connections before using
        pool_recycle=1800,  # Recycle connections after 30 minutes
        pool_size=5,
        max_overflow=10,
        connect_args={
            "connect_timeout": 10,
            "keepalives": 1,
            "keepalives_idle": 30,
            "keepalives_interval": 10,
            "keepalives_count": 5,
        },
    )


@lru_cache
def get_engine() -> Engine:
    """Process-wide engine built from settings on first use."""
    settings = get_settings()
    return build_engine(settings.database_url, echo=settings.database_echo)


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False)


def init_db(engine: Engine | None = None) -> None:
    """Create missing tables. Safe to call multiple times."""
    engine = engine or get_engine()
    # Import models so their tables are registered on the metadata
    import catalog.db.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info(f"Database tables ensured on {engine.url.render_as_string(hide_password=True)}")


def get_db() -> Generator[Session, None, None]:
    """Yield a transactional session for request lifecycles."""
    db = get_session_factory()()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
