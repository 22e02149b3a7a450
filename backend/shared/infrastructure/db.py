"""
Database configuration and session management.
Uses SQLAlchemy 2.0 patterns.

The engine and session factory are created once per process; every request
gets its own Session through ``get_db`` and hands it to the domain services.
"""

from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from shared.config.settings import settings, DATABASE_URL


def _engine_options(url: str) -> dict[str, Any]:
    """Pool and timeout options for the configured backend."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": 30,  # Wait max 30s for connection from pool
        "pool_recycle": 1800,  # Recycle connections after 30 minutes
        "connect_args": {"connect_timeout": 10},
    }


engine = create_engine(
    DATABASE_URL,
    echo=False,  # Set to True for SQL logging in development
    **_engine_options(DATABASE_URL),
)

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    Usage:
        @router.get("/orders")
        def list_orders(db: Session = Depends(get_db)):
            return OrderQueryService(db).list_orders()

    The session is automatically closed after the request completes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside of FastAPI.

    Usage:
        with get_db_context() as db:
            InventoryService(db).get_low_stock_alerts()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transactional(db: Session) -> Iterator[Session]:
    """
    Run a block of writes as one atomic unit.

    Commits when the block finishes, rolls back everything written inside it
    when any exception escapes, then re-raises.

    Usage:
        with transactional(db):
            db.add(order)
            table.status = TableStatus.OCCUPIED
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
