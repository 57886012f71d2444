"""
Shared fixtures: an in-memory SQLite database with the system tags seeded,
a TestClient bound to it, and helpers for registering users and faking
DeepSeek responses.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lifelog.database import get_db, get_engine, init_db
from lifelog.main import app


@pytest.fixture
def engine():
    engine = get_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register_user(client):
    """Register an account and return its Authorization header."""
    def _register(email="ana@example.com", password="secret123", name="Ana"):
        response = client.post(
            "/api/auth/register",
            json={"email": email, "password": password, "name": name},
        )
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}
    return _register


@pytest.fixture
def auth_headers(register_user):
    return register_user()


@pytest.fixture
def with_api_key(client, auth_headers):
    response = client.patch(
        "/api/settings",
        json={"deepseek_api_key": "sk-test-key-1234"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    return auth_headers


@pytest.fixture
def fake_completion():
    """Build a stand-in for requests.post's return value."""
    def _build(content=None, status_code=200, body=None):
        response = MagicMock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 300
        response.text = "error body"
        if body is None:
            body = {"choices": [{"message": {"content": content}}]}
        response.json.return_value = body
        return response
    return _build
