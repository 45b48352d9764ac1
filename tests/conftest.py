"""Pytest configuration and fixtures."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from app.core.security import CallerIdentity, TokenVerifier, create_access_token
from app.core.settings import Settings
from app.main import create_app
from app.repositories.saved_book_store import InMemorySavedBookStore
from app.services.book_service import BookOwnershipService

TEST_SECRET = "test-secret-key-for-pytest"


@pytest.fixture
def test_settings():
    """Settings with a known secret and the in-memory store."""
    return Settings(
        SECRET_KEY=TEST_SECRET,
        STORE_BACKEND="memory",
        CORS_ORIGINS="http://localhost:3000",
    )


@pytest.fixture
def store():
    return InMemorySavedBookStore()


@pytest.fixture
def service(store):
    return BookOwnershipService(store)


@pytest.fixture
def verifier():
    return TokenVerifier(TEST_SECRET)


@pytest.fixture
def caller():
    return CallerIdentity(owner_id="u1")


@pytest.fixture
def other_caller():
    return CallerIdentity(owner_id="u2")


@pytest.fixture
def make_token():
    """Factory for bearer tokens signed with the test secret."""
    def _make(owner_id="u1", secret=TEST_SECRET, expires_delta=None, **kwargs):
        return create_access_token(
            owner_id,
            secret,
            expires_delta=expires_delta or timedelta(minutes=5),
            **kwargs,
        )
    return _make


@pytest.fixture
def auth_headers(make_token):
    def _headers(owner_id="u1"):
        return {"Authorization": f"Bearer {make_token(owner_id)}"}
    return _headers


@pytest.fixture
def client(test_settings, store):
    """Test client running the app lifespan against the in-memory store."""
    app = create_app(settings=test_settings, store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def test_secret():
    return TEST_SECRET
