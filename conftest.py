import os
from uuid import uuid4

import pytest

# Set test environment variables before the app reads its settings
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret-that-is-long-enough-for-hs256"

from fastapi.testclient import TestClient  # noqa: E402

from app.database.database import Base, SessionLocal, engine, get_db, init_db  # noqa: E402
from app.main import app  # noqa: E402
from app.modules.auth.models import UserRole  # noqa: E402
from app.modules.auth.utils import create_access_token  # noqa: E402


@pytest.fixture
def db_session():
    """Fresh in-memory schema per test."""
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """A test client sharing the test's database session."""
    app.dependency_overrides[get_db] = lambda: db_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def customer_id():
    return uuid4()


@pytest.fixture
def other_customer_id():
    return uuid4()


@pytest.fixture
def admin_id(db_session):
    user_id = uuid4()
    db_session.add(UserRole(user_id=user_id, role="admin"))
    db_session.commit()
    return user_id


def _headers(user_id, full_name=None):
    token = create_access_token(str(user_id), email=f"{user_id.hex[:8]}@example.com", full_name=full_name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(customer_id):
    return _headers(customer_id, full_name="Budi Santoso")


@pytest.fixture
def other_auth_headers(other_customer_id):
    return _headers(other_customer_id)


@pytest.fixture
def admin_headers(admin_id):
    return _headers(admin_id, full_name="Admin SEA")


@pytest.fixture
def sample_subscription_data():
    return {
        "name": "Budi Santoso",
        "phone": "081234567890",
        "plan_id": "protein",
        "meal_types": ["breakfast", "dinner"],
        "delivery_days": ["monday", "wednesday", "friday"],
        "allergies": "Peanuts",
    }
