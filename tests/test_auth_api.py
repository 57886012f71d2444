"""
API tests for registration, login and token handling.
"""

from lifelog.auth import create_access_token, hash_password, verify_password


class TestPasswords:
    """Tests for password hashing helpers."""

    def test_hash_and_verify(self):
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong", hashed)

    def test_malformed_hash_does_not_raise(self):
        assert verify_password("secret123", "not-a-hash") is False


class TestRegister:
    """Tests for POST /api/auth/register."""

    def test_register_returns_token_and_user(self, client):
        response = client.post(
            "/api/auth/register",
            json={"email": "Ana@Example.com", "password": "secret123", "name": "Ana"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["token"]
        assert data["user"]["email"] == "ana@example.com"
        assert "password_hash" not in data["user"]

    def test_register_creates_default_settings(self, client, auth_headers):
        settings = client.get("/api/settings", headers=auth_headers).json()["settings"]
        assert settings["ai_depth"] == "medium"
        assert settings["theme"] == "system"
        assert settings["has_api_key"] is False

    def test_duplicate_email(self, client, register_user):
        register_user()
        response = client.post(
            "/api/auth/register",
            json={"email": "ana@example.com", "password": "another1", "name": "Ana 2"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Email already registered"

    def test_short_password(self, client):
        response = client.post(
            "/api/auth/register",
            json={"email": "x@example.com", "password": "123", "name": "X"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Password must be at least 6 characters"

    def test_missing_fields(self, client):
        response = client.post("/api/auth/register", json={"email": "x@example.com"})
        assert response.status_code == 400
        assert response.json()["error"] == "Email, password and name are required"


class TestLogin:
    """Tests for POST /api/auth/login and GET /api/auth/me."""

    def test_login_and_me(self, client, register_user):
        register_user()

        response = client.post(
            "/api/auth/login", json={"email": "ANA@example.com", "password": "secret123"}
        )

        assert response.status_code == 200
        token = response.json()["token"]
        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["user"]["name"] == "Ana"

    def test_wrong_password(self, client, register_user):
        register_user()
        response = client.post(
            "/api/auth/login", json={"email": "ana@example.com", "password": "nope123"}
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials"}

    def test_missing_credentials(self, client):
        response = client.post("/api/auth/login", json={"email": "ana@example.com"})
        assert response.status_code == 400

    def test_invalid_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token"}

    def test_token_for_unknown_user(self, client):
        token = create_access_token(4242)
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json() == {"error": "User not found"}
