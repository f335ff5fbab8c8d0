"""
Integration tests for authentication, profile and health endpoints
"""
import pytest
from knowledge_base.models.user import User
from knowledge_base.services.auth import create_access_token, is_allowed_email


@pytest.mark.unit
class TestEmailDomain:
    @pytest.mark.parametrize("email,allowed", [
        ("ola@inbound.no", True),
        ("  Kari@Inbound.NO ", True),
        ("ola@gmail.com", False),
        ("ola@inbound.no.evil.com", False),
        ("", False),
        (None, False),
    ])
    def test_is_allowed_email(self, email, allowed):
        assert is_allowed_email(email) is allowed


@pytest.mark.integration
class TestSignup:
    """Test account creation"""

    def test_signup(self, client):
        response = client.post(
            "/auth/signup",
            json={"email": "New.Person@inbound.no", "password": "supersecret", "full_name": "New Person"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "new.person@inbound.no"
        assert data["role"] == "member"
        assert "password_hash" not in data

    def test_other_domain_forbidden(self, client):
        response = client.post(
            "/auth/signup",
            json={"email": "someone@gmail.com", "password": "supersecret", "full_name": "Someone"},
        )

        assert response.status_code == 403

    def test_duplicate_email(self, client, member_user):
        response = client.post(
            "/auth/signup",
            json={"email": "member@inbound.no", "password": "supersecret", "full_name": "Copy"},
        )

        assert response.status_code == 409

    def test_short_password(self, client):
        response = client.post(
            "/auth/signup",
            json={"email": "short@inbound.no", "password": "short", "full_name": "Short"},
        )

        assert response.status_code == 400
        assert "password" in response.json()["detail"]["errors"]


@pytest.mark.integration
class TestLogin:
    """Test login, logout and the request gate"""

    def test_login_sets_cookie(self, client, member_user, db_session):
        response = client.post("/auth/login", data={"username": "member@inbound.no", "password": "password123"})

        assert response.status_code == 200
        assert response.json()["token_type"] == "bearer"
        assert "access_token" in response.cookies
        db_session.expire_all()
        assert db_session.get(User, member_user.id).last_login_at is not None

    def test_cookie_authenticates(self, client, member_user):
        client.post("/auth/login", data={"username": "member@inbound.no", "password": "password123"})

        response = client.get("/auth/me")

        assert response.status_code == 200
        assert response.json()["email"] == "member@inbound.no"

    def test_wrong_password(self, client, member_user):
        response = client.post("/auth/login", data={"username": "member@inbound.no", "password": "nope-nope"})

        assert response.status_code == 401

    def test_other_domain_rejected_at_login(self, client):
        response = client.post("/auth/login", data={"username": "someone@gmail.com", "password": "password123"})

        assert response.status_code == 403

    def test_gate_rejects_outside_domain(self, client, db_session, password_hash):
        outsider = User(email="legacy@partner.com", password_hash=password_hash, full_name="Legacy", role="member")
        db_session.add(outsider)
        db_session.commit()
        token = create_access_token({"sub": outsider.email, "role": outsider.role})

        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 403

    def test_invalid_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 401

    def test_logout(self, client, member_headers):
        response = client.post("/auth/logout", headers=member_headers)

        assert response.status_code == 200

    def test_change_password(self, client, member_headers):
        response = client.post(
            "/auth/change-password",
            json={"old_password": "password123", "new_password": "new-password", "confirm_password": "new-password"},
            headers=member_headers,
        )
        assert response.status_code == 200

        login = client.post("/auth/login", data={"username": "member@inbound.no", "password": "new-password"})
        assert login.status_code == 200


@pytest.mark.integration
class TestProfile:
    """Test profile endpoints"""

    def test_get_profile(self, client, member_headers):
        response = client.get("/api/profile", headers=member_headers)

        assert response.status_code == 200
        assert response.json()["full_name"] == "Mona Member"

    def test_update_profile(self, client, member_headers):
        response = client.patch(
            "/api/profile",
            json={"full_name": "  Mona M.  ", "avatar_url": "https://cdn.inbound.no/mona.png"},
            headers=member_headers,
        )

        assert response.status_code == 200
        assert response.json()["full_name"] == "Mona M."
        assert response.json()["avatar_url"] == "https://cdn.inbound.no/mona.png"

    def test_unsafe_avatar_rejected(self, client, member_headers):
        response = client.patch(
            "/api/profile",
            json={"full_name": "Mona", "avatar_url": "javascript:alert(1)"},
            headers=member_headers,
        )

        assert response.status_code == 400


@pytest.mark.integration
class TestHealth:
    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == "ok"
