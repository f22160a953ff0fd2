"""
Pytest configuration for user service tests.

Points the service at a throwaway SQLite database and a known signing secret
before any application module is imported.
"""
import os
import tempfile

_db_dir = tempfile.mkdtemp(prefix="user_service_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["JWT_SECRET"] = "test-secret-0123456789abcdef0123456789"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from otp_auth.otp_auth.user_service.main import app  # noqa: E402
from otp_auth.otp_auth.user_service.db import Base, engine, SessionLocal  # noqa: E402
from otp_auth.otp_auth.user_service.models import OTPCode  # noqa: E402

TEST_SECRET = os.environ["JWT_SECRET"]
STRONG_PASSWORD = "Abc123!@"


@pytest.fixture(autouse=True)
def reset_database():
    # Drop all tables and recreate them before each test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


@pytest.fixture
def client():
    # Function scoped so session cookies never leak between tests
    with TestClient(app) as c:
        yield c


def latest_code(email: str) -> str:
    db = SessionLocal()
    try:
        otp = (
            db.query(OTPCode)
            .filter(OTPCode.email == email)
            .order_by(OTPCode.created_at.desc())
            .first()
        )
        return otp.code
    finally:
        db.close()


def signup_payload(email="a@b.com", otp="0000", **overrides):
    payload = {
        "name": "Al",
        "email": email,
        "phone": "1234567890",
        "password": STRONG_PASSWORD,
        "otp": otp,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def registered_user(client):
    """Run send-email + sign-up and return the created user's JSON."""
    email = "registered@example.com"
    assert client.post("/user/send-email", json={"email": email}).status_code == 200
    resp = client.post("/user/sign-up", json=signup_payload(email=email, otp=latest_code(email)))
    assert resp.status_code == 200
    client.cookies.clear()
    return resp.json()["data"]
