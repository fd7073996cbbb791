"""
Tests for KYC authentication endpoints
"""
import pytest
from fastapi.testclient import TestClient
from nxtbeings.core.config import settings
from nxtbeings.core.database import SessionLocal
from nxtbeings.core.security import create_access_token
from nxtbeings.main import app
from nxtbeings.models import Applicant, Recruiter
from nxtbeings.services.otp_service import OtpService
from nxtbeings.services.otp_store import OtpKey, OtpStore, UserRole

PHONE = "+15551234567"


@pytest.fixture
def client(gateway, clock):
    app.state.otp_service = OtpService(
        store=OtpStore(),
        gateway=gateway,
        clock=clock,
        code_factory=lambda: "482913",
    )
    with TestClient(app) as test_client:
        yield test_client

    db = SessionLocal()
    try:
        db.query(Applicant).delete()
        db.query(Recruiter).delete()
        db.commit()
    finally:
        db.close()


APPLICANT = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
    "password": "secret123",
    "currentRole": "Engineer",
    "yearsOfExperience": 5,
    "preferredWorkType": ["full-time", "remote-only"],
}

RECRUITER = {
    "firstName": "Grace",
    "lastName": "Hopper",
    "email": "grace@example.com",
    "password": "secret123",
    "currentRole": "Talent Lead",
    "company": {"name": "Acme", "industry": "Software", "size": "medium"},
    "department": "People",
}


def register(client, user_type="applicant", **overrides):
    body = dict(APPLICANT if user_type == "applicant" else RECRUITER, **overrides)
    return client.post(f"/api/auth/register/{user_type}", json=body)


def create_user(client, user_type="applicant"):
    response = register(client, user_type)
    assert response.status_code == 201
    return response.json()["user"]["id"]


def login(client, email="ada@example.com", password="secret123", user_type="applicant"):
    return client.post(
        "/api/auth/login",
        json={"email": email, "password": password, "userType": user_type},
    )


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def send(client, phone=PHONE, user_type="applicant"):
    return client.post("/api/auth/kyc/send-otp", json={"phone": phone, "userType": user_type})


def verify(client, user_id, otp="482913", phone=PHONE, user_type="applicant"):
    return client.post(
        "/api/auth/kyc/verify-otp",
        json={"phone": phone, "userType": user_type, "otp": otp, "userId": user_id},
    )


def test_health_check(client):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root_endpoint(client):
    """Test root endpoint"""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "message" in data
    assert data["version"] == "1.0"


def test_send_otp(client, gateway):
    """Test OTP request is stored and dispatched"""
    response = send(client)
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "OTP sent successfully for KYC verification"
    assert data["phone"] == PHONE
    assert data["userType"] == "applicant"
    assert data["expiresIn"] == 300
    assert gateway.sent == [(PHONE, "Your NxtBeings verification code is 482913")]


def test_send_otp_trims_phone(client):
    """Phone is trimmed before use"""
    response = send(client, phone="  " + PHONE + "  ")
    assert response.status_code == 200
    assert response.json()["phone"] == PHONE


def test_send_otp_invalid_phone(client):
    """Test OTP request with invalid phone"""
    response = send(client, phone="123")
    assert response.status_code == 400
    assert response.json()["errors"][0]["param"] == "phone"


def test_send_otp_invalid_user_type(client):
    """Only applicants and recruiters can verify"""
    response = send(client, user_type="admin")
    assert response.status_code == 400
    assert response.json()["errors"][0]["param"] == "userType"


def test_send_otp_delivery_failure(client, gateway):
    """Delivery failure is a 500 but the code can still be verified"""
    gateway.fail = True
    user_id = create_user(client)

    response = send(client)
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to send OTP"

    assert verify(client, user_id).status_code == 200


def test_verify_otp_applicant(client):
    """Accepted code marks the applicant KYC verified"""
    user_id = create_user(client)
    send(client)

    response = verify(client, user_id)
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "KYC verification completed successfully"
    assert data["user"]["id"] == user_id
    assert data["user"]["phone"] == PHONE
    assert data["user"]["phoneVerified"] == True
    assert data["user"]["isKYCVerified"] == True
    assert data["user"]["userType"] == "applicant"

    db = SessionLocal()
    try:
        user = db.get(Applicant, user_id)
        assert user.is_kyc_verified == True
    finally:
        db.close()


def test_verify_otp_recruiter(client):
    """Recruiters verify against their own role key"""
    user_id = create_user(client, "recruiter")
    send(client, user_type="recruiter")
    response = verify(client, user_id, user_type="recruiter")
    assert response.status_code == 200
    assert response.json()["user"]["userType"] == "recruiter"


def test_verify_otp_is_single_use(client):
    """Second verification with the same code is not found"""
    user_id = create_user(client)
    send(client)
    assert verify(client, user_id).status_code == 200

    response = verify(client, user_id)
    assert response.status_code == 400
    assert response.json()["detail"] == "OTP not found or expired"


def test_verify_otp_wrong_code(client):
    """Wrong codes report invalid, then too many attempts"""
    user_id = create_user(client)
    send(client)

    details = [verify(client, user_id, otp="000000").json()["detail"] for _ in range(3)]
    assert details == [
        "Invalid OTP",
        "Invalid OTP",
        "Too many attempts. Please request a new OTP",
    ]
    assert verify(client, user_id).json()["detail"] == "OTP not found or expired"


def test_verify_otp_expired(client, clock):
    """Expired code is rejected"""
    user_id = create_user(client)
    send(client)
    clock.advance(301)

    response = verify(client, user_id)
    assert response.status_code == 400
    assert response.json()["detail"] == "OTP has expired"


def test_verify_otp_bad_format(client):
    """Code must be exactly six digits"""
    response = verify(client, 1, otp="12345")
    assert response.status_code == 400
    assert response.json()["errors"][0]["param"] == "otp"

    response = verify(client, 1, otp="12345a")
    assert response.status_code == 400


def test_verify_otp_missing_user_id(client):
    """userId is required"""
    response = client.post(
        "/api/auth/kyc/verify-otp",
        json={"phone": PHONE, "userType": "applicant", "otp": "482913"},
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["param"] == "userId"


def test_verify_otp_unknown_user(client):
    """Unknown user is 404 and the code is used up"""
    send(client)
    response = verify(client, 9999)
    assert response.status_code == 404
    assert app.state.otp_service.pending(PHONE, "applicant") == False


def test_otp_feature_disabled(client, monkeypatch):
    """Endpoints are closed when OTP is disabled"""
    monkeypatch.setattr(settings, "FEATURE_OTP_ENABLED", False)
    assert send(client).status_code == 403


def test_verify_otp_rejects_non_ascii_digits(client):
    """Codes in other digit scripts fail validation without using an attempt"""
    send(client)
    response = verify(client, 1, otp="٤٨٢٩١٣")
    assert response.status_code == 400
    assert response.json()["errors"][0]["param"] == "otp"

    record = app.state.otp_service.store.get(OtpKey(PHONE, UserRole.APPLICANT))
    assert record.attempts == 0


def test_register_applicant(client):
    """Applicant registration returns a token and the new user"""
    response = register(client, email="Ada@Example.com")
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Applicant registered successfully"
    assert data["token"]
    user = data["user"]
    assert user["email"] == "ada@example.com"
    assert user["userType"] == "applicant"
    assert user["avatar"] == "AL"
    assert user["isKYCVerified"] == False

    db = SessionLocal()
    try:
        applicant = db.get(Applicant, user["id"])
        assert applicant.preferred_work_type == ["full-time"]
        assert applicant.password_hash != "secret123"
    finally:
        db.close()


def test_register_recruiter(client):
    """Recruiter registration carries the company"""
    response = register(client, "recruiter")
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Recruiter registered successfully"
    assert data["user"]["userType"] == "recruiter"
    assert data["user"]["company"] == {"name": "Acme", "industry": "Software", "size": "medium"}


def test_register_duplicate_email(client):
    """Email must be unique per account type"""
    create_user(client)
    response = register(client)
    assert response.status_code == 400
    assert response.json()["detail"] == "User with this email already exists"


def test_register_validation(client):
    """Short names and passwords are rejected"""
    response = register(client, firstName=" A ")
    assert response.status_code == 400
    assert response.json()["errors"][0]["param"] == "firstName"

    response = register(client, password="123")
    assert response.status_code == 400
    assert response.json()["errors"][0]["param"] == "password"

    response = register(client, "recruiter", company={"name": "Acme", "industry": "IT", "size": "huge"})
    assert response.status_code == 400


def test_login(client):
    """Correct credentials return a token"""
    create_user(client)
    response = login(client)
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["token"]
    assert data["user"]["email"] == "ada@example.com"


def test_login_invalid_credentials(client):
    """Wrong password, wrong account type and unknown email look the same"""
    create_user(client)
    for response in (
        login(client, password="wrong-password"),
        login(client, user_type="recruiter"),
        login(client, email="nobody@example.com"),
    ):
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid credentials"


def test_validate_token(client):
    """A valid token resolves to the user"""
    token = register(client).json()["token"]
    response = client.get("/api/auth/validate", headers=bearer(token))
    assert response.status_code == 200
    assert response.json()["message"] == "Token validated successfully"
    assert response.json()["user"]["email"] == "ada@example.com"

    response = client.get("/api/auth/me", headers=bearer(token))
    assert response.status_code == 200
    assert response.json()["user"]["userType"] == "applicant"


def test_validate_token_errors(client):
    """Missing, malformed and expired tokens are 401"""
    response = client.get("/api/auth/validate")
    assert response.status_code == 401
    assert response.json()["detail"] == "No token provided"

    response = client.get("/api/auth/validate", headers=bearer("not-a-token"))
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"

    user_id = create_user(client)
    expired = create_access_token(user_id, "applicant", expires_minutes=-1)
    response = client.get("/api/auth/me", headers=bearer(expired))
    assert response.status_code == 401
    assert response.json()["detail"] == "Token expired"


def test_validate_token_unknown_or_inactive_user(client):
    """Deleted users are 404 and deactivated users are 401"""
    response = client.get("/api/auth/me", headers=bearer(create_access_token(9999, "applicant")))
    assert response.status_code == 404

    user_id = create_user(client)
    db = SessionLocal()
    try:
        db.get(Applicant, user_id).is_active = False
        db.commit()
    finally:
        db.close()

    response = client.get("/api/auth/me", headers=bearer(create_access_token(user_id, "applicant")))
    assert response.status_code == 401
    assert response.json()["detail"] == "User account is deactivated"


def test_kyc_flow_reflected_in_me(client):
    """Verified phone shows up on the user's profile"""
    data = register(client).json()
    send(client)
    assert verify(client, data["user"]["id"]).status_code == 200

    user = client.get("/api/auth/me", headers=bearer(data["token"])).json()["user"]
    assert user["phone"] == PHONE
    assert user["isKYCVerified"] == True
