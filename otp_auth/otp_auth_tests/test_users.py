from otp_auth.otp_auth.user_service.db import SessionLocal
from otp_auth.otp_auth.user_service.models import OTPCode, User

from .conftest import STRONG_PASSWORD, latest_code, signup_payload


def test_send_email_then_sign_up(client):
    send = client.post("/user/send-email", json={"email": "a@b.com"})
    assert send.status_code == 200
    assert send.json() == {"message": "OTP sent successfully"}

    resp = client.post("/user/sign-up", json=signup_payload(otp=latest_code("a@b.com")))
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Sign up successful"
    assert body["data"]["email"] == "a@b.com"
    assert body["data"]["name"] == "Al"
    assert body["data"]["phone"] == "1234567890"
    # Password hash never leaves the service
    assert "password" not in body["data"]

    assert "token" in resp.cookies
    set_cookie = resp.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "samesite=lax" in set_cookie
    assert "path=/" in set_cookie
    assert f"max-age={7 * 24 * 60 * 60}" in set_cookie


def test_sign_up_creates_one_user_and_consumes_all_codes(client):
    email = "multi@example.com"
    for _ in range(3):
        assert client.post("/user/send-email", json={"email": email}).status_code == 200
    code = latest_code(email)

    resp = client.post("/user/sign-up", json=signup_payload(email=email, otp=code))
    assert resp.status_code == 200

    db = SessionLocal()
    try:
        users = db.query(User).filter(User.email == email).all()
        assert len(users) == 1
        # Stored password is a hash, not the submitted plaintext
        assert users[0].password != STRONG_PASSWORD
        codes = db.query(OTPCode).filter(OTPCode.email == email).all()
        assert len(codes) == 3
        assert all(c.is_used for c in codes)
    finally:
        db.close()


def test_sign_up_rejects_wrong_otp(client):
    email = "wrong@example.com"
    client.post("/user/send-email", json={"email": email})
    code = latest_code(email)
    wrong = "0000" if code != "0000" else "1111"

    resp = client.post("/user/sign-up", json=signup_payload(email=email, otp=wrong))
    assert resp.status_code == 422
    assert resp.json()["message"] == "Invalid OTP code either used or expired"

    db = SessionLocal()
    try:
        assert db.query(User).filter(User.email == email).count() == 0
        # A failed attempt does not burn the outstanding code
        assert db.query(OTPCode).filter(OTPCode.email == email, OTPCode.is_used.is_(False)).count() == 1
    finally:
        db.close()


def test_sign_up_rejects_code_issued_for_other_email(client):
    client.post("/user/send-email", json={"email": "owner@example.com"})
    code = latest_code("owner@example.com")

    resp = client.post("/user/sign-up", json=signup_payload(email="thief@example.com", otp=code))
    assert resp.status_code == 422
    assert resp.json()["message"] == "Invalid OTP code either used or expired"


def test_sign_up_existing_email_wins_over_otp_check(client, registered_user):
    email = registered_user["email"]

    # Valid fresh code
    client.post("/user/send-email", json={"email": email})
    resp = client.post("/user/sign-up", json=signup_payload(email=email, otp=latest_code(email)))
    assert resp.status_code == 422
    assert resp.json()["message"] == "Email already exists"

    # No matching code at all
    resp = client.post("/user/sign-up", json=signup_payload(email=email, otp="9999"))
    assert resp.status_code == 422
    assert resp.json()["message"] == "Email already exists"


def test_reused_otp_is_rejected(client):
    email = "reuse@example.com"
    client.post("/user/send-email", json={"email": email})
    code = latest_code(email)

    first = client.post("/user/sign-up", json=signup_payload(email=email, otp=code))
    assert first.status_code == 200

    # Remove the user so only the OTP check can stop the second attempt
    db = SessionLocal()
    try:
        db.query(User).filter(User.email == email).delete()
        db.commit()
    finally:
        db.close()

    second = client.post("/user/sign-up", json=signup_payload(email=email, otp=code))
    assert second.status_code == 422
    assert second.json()["message"] == "Invalid OTP code either used or expired"


def test_sign_up_validation_errors(client):
    resp = client.post(
        "/user/sign-up",
        json={"name": "A", "email": "not-an-email", "phone": "123", "password": "abc12345", "otp": "12"},
    )
    assert resp.status_code == 422
    body = resp.json()
    assert body["message"] == "Invalid body"
    details = body["details"]
    assert details["name"] == "Name must be at least 2 characters"
    assert details["phone"] == "Phone number must be at least 10 digits"
    assert details["password"] == "Password must contain at least one uppercase letter"
    assert details["otp"] == "OTP must be a 4 digit code"
    assert "email" in details


def test_sign_up_missing_fields(client):
    resp = client.post("/user/sign-up", json={"email": "a@b.com"})
    assert resp.status_code == 422
    details = resp.json()["details"]
    for field in ("name", "phone", "password", "otp"):
        assert field in details


def test_sign_in_success(client, registered_user):
    resp = client.post("/user/sign-in", json={"email": registered_user["email"], "password": STRONG_PASSWORD})
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Login successful"
    assert body["data"]["id"] == registered_user["id"]
    assert "password" not in body["data"]
    assert "token" in resp.cookies


def test_sign_in_wrong_password(client, registered_user):
    resp = client.post("/user/sign-in", json={"email": registered_user["email"], "password": "Wrong123!@"})
    assert resp.status_code == 422
    assert resp.json()["message"] == "Invalid email or password"
    assert "token" not in resp.cookies


def test_sign_in_unknown_email(client):
    resp = client.post("/user/sign-in", json={"email": "ghost@example.com", "password": STRONG_PASSWORD})
    assert resp.status_code == 422
    assert resp.json()["message"] == "Invalid email or password"


def test_sign_in_never_compares_plaintext(client):
    # A row holding a plaintext password must not match that plaintext
    db = SessionLocal()
    try:
        db.add(User(name="Legacy", email="legacy@example.com", phone="1234567890", password=STRONG_PASSWORD))
        db.commit()
    finally:
        db.close()

    resp = client.post("/user/sign-in", json={"email": "legacy@example.com", "password": STRONG_PASSWORD})
    assert resp.status_code == 422
    assert resp.json()["message"] == "Invalid email or password"


def test_sign_in_validates_password_policy(client):
    resp = client.post("/user/sign-in", json={"email": "a@b.com", "password": "short"})
    assert resp.status_code == 422
    assert resp.json()["details"]["password"] == "Password must be at least 8 characters"


def test_send_email_rejects_invalid_address(client):
    resp = client.post("/user/send-email", json={"email": "nope"})
    assert resp.status_code == 422
    assert "email" in resp.json()["details"]


def test_send_email_keeps_earlier_codes_valid(client):
    email = "twice@example.com"
    client.post("/user/send-email", json={"email": email})
    first_code = latest_code(email)
    client.post("/user/send-email", json={"email": email})

    resp = client.post("/user/sign-up", json=signup_payload(email=email, otp=first_code))
    assert resp.status_code == 200
