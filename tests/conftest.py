"""
Test configuration and fixtures for the Health Wallet API.

- Fresh in-memory SQLite database per test (TEST_DATABASE_URL overrides it)
- Upload directory under pytest's tmp_path
- TestClient with database, file store and auth provider overrides
- Authenticated client fixtures using bearer tokens
"""

import os
from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.config import Settings
from app.database import Database, get_db
from app.main import create_app
from app.models import User
from app.services.auth import LocalAuthProvider
from app.services.auth.dependencies import get_auth_provider
from app.services.file_service import FileService, get_file_service
from tests.factories import bearer, create_user


# =============================================================================
# Settings and Services
# =============================================================================


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        database_url=os.environ.get("TEST_DATABASE_URL", "sqlite://"),
        upload_dir=str(tmp_path / "uploads"),
        jwt_secret_key="test-secret-key",
        log_level="WARNING",
    )


@pytest.fixture
def database(test_settings: Settings) -> Generator[Database, None, None]:
    """Database with all tables created, dropped again after the test."""
    database = Database(test_settings.database_url)
    database.create_all()

    yield database

    database.drop_all()
    database.dispose()


@pytest.fixture
def db(database: Database) -> Generator[Session, None, None]:
    """Session shared by the test and the app under test."""
    session = database.session()

    yield session

    session.close()


@pytest.fixture
def file_service(test_settings: Settings) -> FileService:
    return FileService(
        upload_dir=test_settings.upload_dir,
        max_upload_bytes=test_settings.max_upload_bytes,
    )


@pytest.fixture
def auth_provider(test_settings: Settings) -> LocalAuthProvider:
    return LocalAuthProvider(test_settings)


# =============================================================================
# TestClient Fixtures
# =============================================================================


@pytest.fixture
def app(
    test_settings: Settings,
    db: Session,
    file_service: FileService,
    auth_provider: LocalAuthProvider,
) -> Generator[FastAPI, None, None]:
    """Application wired to the test database, file store and auth provider."""
    application = create_app(test_settings)

    def override_get_db():
        try:
            yield db
        finally:
            pass  # Don't close - managed by db fixture

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_file_service] = lambda: file_service
    application.dependency_overrides[get_auth_provider] = lambda: auth_provider

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Unauthenticated TestClient."""
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# Authentication Fixtures
# =============================================================================


@pytest.fixture
def test_user(db: Session) -> User:
    """Create a test user."""
    return create_user(
        db, email="testuser@example.com", password="testpassword123", name="Test User"
    )


@pytest.fixture
def other_user(db: Session) -> User:
    """A second user, for ownership and sharing tests."""
    return create_user(
        db, email="other@example.com", password="otherpassword123", name="Other User"
    )


@pytest.fixture
def auth_headers(test_user: User, auth_provider: LocalAuthProvider) -> dict:
    """Authorization header for test_user."""
    return bearer(auth_provider, test_user)


@pytest.fixture
def other_headers(other_user: User, auth_provider: LocalAuthProvider) -> dict:
    """Authorization header for other_user."""
    return bearer(auth_provider, other_user)


@pytest.fixture
def auth_client(app: FastAPI, auth_headers: dict) -> Generator[TestClient, None, None]:
    """
    Authenticated TestClient for test_user.

    Separate instance from ``client`` so headers don't leak between them.
    """
    with TestClient(app) as test_client:
        test_client.headers.update(auth_headers)
        yield test_client
