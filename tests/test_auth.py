"""
Tests for /api/auth: registration, login, token refresh, profile and
password changes.
"""
from datetime import timedelta

from app.core.security import create_access_token, create_refresh_token

BASE_URL = "/api/auth"

NEW_USER = {
    "email": "dana@trackzen.com",
    "password": "s3cret-pass",
    "firstName": "Dana",
    "lastName": "Lee",
    "department": "Engineering",
    "dateOfBirth": "1994-07-02",
}


class TestRegister:
    def test_creates_employee_and_returns_tokens(self, client):
        r = client.post(f"{BASE_URL}/register", json=NEW_USER)
        assert r.status_code == 201
        data = r.json()["data"]
        assert data["token"]
        assert data["refreshToken"]
        assert data["user"]["email"] == "dana@trackzen.com"
        assert data["user"]["role"] == "employee"
        assert data["user"]["dateOfBirth"] == "1994-07-02"
        assert "hashedPassword" not in data["user"]

    def test_duplicate_email(self, client):
        client.post(f"{BASE_URL}/register", json=NEW_USER)
        r = client.post(f"{BASE_URL}/register", json=NEW_USER)
        assert r.status_code == 409
        assert r.json() == {"success": False, "error": "User already exists with this email"}

    def test_short_password(self, client):
        r = client.post(f"{BASE_URL}/register", json={**NEW_USER, "password": "short"})
        assert r.status_code == 422
        fields = [d["field"] for d in r.json()["details"]]
        assert "password" in fields

    def test_cannot_choose_role_or_manager(self, client, make_user):
        manager = make_user(role="manager")
        r = client.post(
            f"{BASE_URL}/register",
            json={**NEW_USER, "role": "admin", "managerId": manager.id},
        )
        assert r.status_code == 201
        user = r.json()["data"]["user"]
        assert user["role"] == "employee"
        assert user["managerId"] is None

    def test_self_registered_user_cannot_reach_admin_routes(self, client):
        token = client.post(
            f"{BASE_URL}/register", json={**NEW_USER, "role": "admin"}
        ).json()["data"]["token"]
        r = client.get("/api/users", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 403


class TestLogin:
    def test_valid_credentials(self, client, make_user):
        make_user(email="erin@trackzen.com", password="password123")
        r = client.post(f"{BASE_URL}/login", json={"email": "erin@trackzen.com", "password": "password123"})
        assert r.status_code == 200
        assert r.json()["data"]["user"]["email"] == "erin@trackzen.com"

    def test_wrong_password(self, client, make_user):
        make_user(email="erin@trackzen.com")
        r = client.post(f"{BASE_URL}/login", json={"email": "erin@trackzen.com", "password": "nope"})
        assert r.status_code == 401
        assert r.json() == {"success": False, "error": "Invalid credentials"}

    def test_inactive_user(self, client, make_user):
        make_user(email="gone@trackzen.com", is_active=False)
        r = client.post(f"{BASE_URL}/login", json={"email": "gone@trackzen.com", "password": "password123"})
        assert r.status_code == 401

    def test_token_works_for_profile(self, client, make_user):
        make_user(email="erin@trackzen.com", first_name="Erin")
        token = client.post(
            f"{BASE_URL}/login", json={"email": "erin@trackzen.com", "password": "password123"}
        ).json()["data"]["token"]
        r = client.get(f"{BASE_URL}/profile", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 200
        assert r.json()["data"]["firstName"] == "Erin"


class TestTokens:
    def test_refresh_issues_new_pair(self, client, make_user):
        user = make_user()
        r = client.post(f"{BASE_URL}/refresh", json={"refreshToken": create_refresh_token({"sub": str(user.id)})})
        assert r.status_code == 200
        assert r.json()["data"]["user"]["id"] == user.id

    def test_access_token_is_not_a_refresh_token(self, client, make_user):
        user = make_user()
        r = client.post(f"{BASE_URL}/refresh", json={"refreshToken": create_access_token({"sub": str(user.id)})})
        assert r.status_code == 401

    def test_refresh_token_cannot_authenticate(self, client, make_user):
        user = make_user()
        token = create_refresh_token({"sub": str(user.id)})
        r = client.get(f"{BASE_URL}/profile", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401

    def test_expired_token(self, client, make_user):
        user = make_user()
        token = create_access_token({"sub": str(user.id)}, expires_delta=timedelta(minutes=-1))
        r = client.get(f"{BASE_URL}/profile", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401
        assert r.json()["error"] == "Invalid or expired token"

    def test_token_for_deleted_user(self, client):
        token = create_access_token({"sub": "999"})
        r = client.get(f"{BASE_URL}/profile", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401
        assert r.json()["error"] == "Could not validate credentials"


class TestChangePassword:
    def test_changes_password(self, client, make_user, auth_headers):
        user = make_user(email="erin@trackzen.com")
        r = client.post(
            f"{BASE_URL}/change-password",
            json={"currentPassword": "password123", "newPassword": "another-pass"},
            headers=auth_headers(user),
        )
        assert r.status_code == 200
        assert r.json()["message"] == "Password updated successfully"

        login = client.post(f"{BASE_URL}/login", json={"email": "erin@trackzen.com", "password": "another-pass"})
        assert login.status_code == 200

    def test_wrong_current_password(self, client, make_user, auth_headers):
        user = make_user()
        r = client.post(
            f"{BASE_URL}/change-password",
            json={"currentPassword": "wrong-one", "newPassword": "another-pass"},
            headers=auth_headers(user),
        )
        assert r.status_code == 400
        assert r.json()["error"] == "Current password is incorrect"

    def test_same_password(self, client, make_user, auth_headers):
        user = make_user()
        r = client.post(
            f"{BASE_URL}/change-password",
            json={"currentPassword": "password123", "newPassword": "password123"},
            headers=auth_headers(user),
        )
        assert r.status_code == 400
        assert r.json()["error"] == "New password must be different"
