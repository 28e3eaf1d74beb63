"""
Pytest fixtures and configuration for StockLedger tests

This file provides shared fixtures that can be used across all test modules.
Everything runs against the in-memory storage backend; the PostgreSQL
backend is tested with a mocked psycopg2 connection.
"""
import os
from datetime import datetime, timedelta, timezone

import pytest

TEST_AUTH_SECRET = "test-secret-for-stockledger"

# Must be set before stockledger.core.config builds its settings
os.environ["AUTH_SECRET"] = TEST_AUTH_SECRET
os.environ["STORAGE_BACKEND"] = "memory"

from fastapi.testclient import TestClient
from jose import jwt

from stockledger.core.storage import get_storage
from stockledger.domain.product import ProductCreate
from stockledger.main import app
from stockledger.repositories.product_repository import ProductRepository
from stockledger.services.transaction_coordinator import TransactionCoordinator
from stockledger.services.undo_coordinator import UndoCoordinator
from stockledger.storage.memory import InMemoryStorageAdapter


def make_token(user_id, secret=TEST_AUTH_SECRET, expires_in=timedelta(hours=1), **claims):
    """Mint a signed JWT the way the auth provider would"""
    payload = {
        "uid": user_id,
        "email": f"{user_id}@example.com",
        "iat": datetime.now(timezone.utc),
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def storage():
    """
    Fresh in-memory storage for each test

    No backoff sleeps, generous deadline.
    """
    return InMemoryStorageAdapter(max_attempts=5, retry_delay=0, default_timeout=5.0)


@pytest.fixture
def user_id():
    return "user-a"


@pytest.fixture
def other_user_id():
    return "user-b"


@pytest.fixture
def create_product(storage, user_id):
    """
    Factory creating a product in a namespace

    Usage:
        product = create_product(quantity=10)
    """
    def _create(quantity=10, name="Phone Charger", owner=None, **fields):
        repo = ProductRepository(storage, owner or user_id)
        return repo.create(ProductCreate(name=name, quantity=quantity, **fields))

    return _create


@pytest.fixture
def seller(storage):
    return TransactionCoordinator(storage)


@pytest.fixture
def undoer(storage):
    return UndoCoordinator(storage)


@pytest.fixture
def client(storage):
    """
    API client wired to the test's storage

    Clears dependency overrides afterwards.
    """
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(user_id):
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def other_auth_headers(other_user_id):
    return {"Authorization": f"Bearer {make_token(other_user_id)}"}


@pytest.fixture
def token_factory():
    """The make_token helper, for tests that need custom claims"""
    return make_token
