"""Database configuration, session management and the unit-of-work helper."""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .core.config import settings
from .exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url


def is_postgresql(url: str = DATABASE_URL) -> bool:
    """Check if the configured database is PostgreSQL."""
    return url.startswith("postgresql")


def make_engine(url: str) -> Engine:
    """Create an engine with database-specific tuning."""
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

        # SQLite defaults foreign_keys to OFF; folder/file cascades depend on it.
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=True,
    )


engine = make_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind: Engine = engine) -> None:
    """Create any missing tables. Existing tables are left untouched."""
    from . import models  # noqa: F401  registers the mappers on Base

    Base.metadata.create_all(bind=bind)


def get_db():
    """Dependency for FastAPI routes to get database session.

    Rolls back the transaction on unhandled exceptions so that the
    connection is returned to the pool in a clean state.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def storage_guard(db: Session, operation: str) -> Iterator[Session]:
    """Translate database failures into ``StorageUnavailableError``.

    The session is rolled back before the error propagates. No retry.
    """
    try:
        yield db
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to %s: %s", operation, e, extra={"operation": operation})
        raise StorageUnavailableError(f"Failed to {operation}", original_error=e) from e


@contextmanager
def unit_of_work(db: Session, operation: str) -> Iterator[Session]:
    """Run one atomic mutation: commit on success, roll back on any error.

    Structural changes and their ledger delta must be made inside the same
    block. Domain errors propagate unchanged after the rollback.
    """
    with storage_guard(db, operation):
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
