"""Shared test fixtures for the vault test suite.

Tests run against a throwaway SQLite database file (foreign keys enabled,
so folder/file cascades behave as in production). Every test starts from
freshly created tables. Set TEST_DATABASE_URL to run against PostgreSQL.
"""

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="vault-test-")

# Force auth off and use the test database before any app imports.
os.environ["DATABASE_URL"] = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite:///{_DB_DIR}/vault_test.db",
)
os.environ["AUTH_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"

import pytest
from fastapi.testclient import TestClient

from vault_api.database import Base, SessionLocal, engine, get_db, init_db
from vault_api.main import app
from vault_api.core.config import settings
from vault_api.core.token_factory import encode_token
from vault_api.models import Vault
from vault_api.services import FileRegistryService, FolderTreeService, VaultService


@pytest.fixture(autouse=True)
def _fresh_schema():
    """Recreate all tables before each test for isolation."""
    Base.metadata.drop_all(bind=engine)
    init_db(engine)
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def session_factory():
    """Session factory for tests that need one session per thread."""
    return SessionLocal


@pytest.fixture()
def client(db):
    """FastAPI TestClient with the DB dependency overridden to use the test session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    """Build bearer headers for an identity, signed with the configured secret."""

    def _headers(owner_id: str = "test-user") -> dict:
        token = encode_token(owner_id, settings.jwt_secret_key)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def vault(db):
    """A provisioned vault for 'user-1' with the default limit."""
    return VaultService(db).resolve_vault("user-1")


@pytest.fixture()
def folders(db):
    return FolderTreeService(db)


@pytest.fixture()
def files(db):
    return FileRegistryService(db)


def storage_used(db, vault_id: int) -> int:
    """Read storage_used straight from the database, bypassing the identity map."""
    db.expire_all()
    return db.get(Vault, vault_id).storage_used
