"""Main FastAPI application."""

import logging
import re
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .api import vault_router
from .core.config import settings, ConfigurationError, Environment
from .core.logging_config import setup_logging
from .database import engine, get_db, init_db, is_postgresql, DATABASE_URL
from .exceptions import VaultException
from .middleware.exception_handler import request_validation_handler, vault_exception_handler
from .middleware.request_context import RequestContextMiddleware

VERSION = "1.0.0"

# Setup logging first
setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)


def _mask_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:***@', url)


def _validate_database_connection() -> None:
    """Test that the database is reachable. Exits with clear message on failure."""
    masked = _mask_url(DATABASE_URL)
    logger.info(f"Connecting to database: {masked}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")
    except SQLAlchemyError as e:
        if is_postgresql():
            logger.critical(
                "PostgreSQL connection failed.\n"
                f"  DATABASE_URL: {masked}\n"
                "  Check that PostgreSQL is running and DATABASE_URL is correct.\n"
                f"  Error: {e}"
            )
        else:
            logger.critical(
                "SQLite database error.\n"
                f"  DATABASE_URL: {masked}\n"
                "  Check that the directory exists and is writable.\n"
                f"  Error: {e}"
            )
        raise SystemExit(1) from e


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the vault API."""
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    if settings.environment == Environment.DEVELOPMENT and not settings.auth_enabled:
        logger.warning(
            "SECURITY: Authentication is disabled (AUTH_ENABLED=false). "
            "Every request shares the 'anonymous' vault."
        )

    _validate_database_connection()
    init_db(engine)

    logger.info(
        "Vault API started | env=%s | db=%s | auth=%s | default_limit=%d",
        settings.environment.value,
        "PostgreSQL" if is_postgresql() else "SQLite",
        "enabled" if settings.auth_enabled else "disabled",
        settings.default_storage_limit_bytes,
    )

    yield


app = FastAPI(
    title="Vault API",
    description=(
        "Per-user storage vault: a folder/file metadata tree with byte quota "
        "accounting and a protected system folder.\n\n"
        "**Authentication:** When `AUTH_ENABLED=true`, every vault endpoint requires a "
        "`Bearer` token issued by the auth service. When `AUTH_ENABLED=false` all "
        "requests act as the `anonymous` identity."
    ),
    version=VERSION,
    lifespan=lifespan,
)

# Middleware stack (outermost first: CORS wraps request context).
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(VaultException, vault_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

app.include_router(vault_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "Vault API",
        "version": VERSION,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check returning database status, uptime and vault count.

    Never raises: returns degraded status on DB failure so load balancers
    can still probe without receiving 5xx.
    """
    db_status = "ok"
    vault_count = 0
    try:
        db.execute(text("SELECT 1"))
        vault_count = db.execute(text("SELECT COUNT(*) FROM vaults")).scalar() or 0
    except SQLAlchemyError as e:
        logger.warning("Health check database probe failed: %s", e)
        db.rollback()
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": VERSION,
        "vault_count": vault_count,
    }
