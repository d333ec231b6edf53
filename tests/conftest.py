import os

# Settings are read at import time; provide test values before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-expense-tracker")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from expense_tracker.database import get_db
from expense_tracker.models.base import Base
from expense_tracker.config import settings
# Import all model classes to ensure they're registered with SQLAlchemy
from expense_tracker.models.user import User
from expense_tracker.models.transaction import Transaction
# Import FastAPI app AFTER model imports
from expense_tracker.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session, tmp_path, monkeypatch):
    """FastAPI test client with test database and a throwaway uploads dir"""
    monkeypatch.setattr(settings, "UPLOADS_DIR", str(tmp_path / "uploads"))

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(
    user_id: str = "test-user-123",
    role: str | None = "user",
    phone: str | None = None,
    expired: bool = False,
) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        role: Value of the 'role' claim (omitted when None)
        phone: Optional 'phone' claim
        expired: If True, create expired token

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": user_id, "exp": exp, "iat": datetime.now(UTC)}
    if role is not None:
        payload["role"] = role
    if phone is not None:
        payload["phone"] = phone

    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_headers():
    """Factory for Authorization headers with arbitrary claims"""

    def _make(user_id: str = "test-user-123", **claims) -> dict:
        return bearer(create_test_token(user_id=user_id, **claims))

    return _make


@pytest.fixture
def auth_headers(make_headers):
    """Authorization headers for the default regular user"""
    return make_headers()


@pytest.fixture
def user_a_headers(make_headers):
    """Authorization headers for user A"""
    return make_headers("user-a", phone="+77010000001")


@pytest.fixture
def user_b_headers(make_headers):
    """Authorization headers for user B"""
    return make_headers("user-b", phone="+77010000002")


@pytest.fixture
def admin_headers(make_headers):
    """Authorization headers for an administrator"""
    return make_headers("admin-1", role="admin", phone="+77019999999")


@pytest.fixture
def create_transaction(client):
    """Create a transaction through the API and return its JSON"""

    def _create(headers: dict, **fields) -> dict:
        payload = {
            "amount": 1000,
            "type": "expense",
            "category": "food",
            "transaction_date": "2024-01-05T12:00:00+00:00",
        }
        payload.update(fields)
        response = client.post("/api/transactions", headers=headers, json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
