import sys
from pathlib import Path

import pytest


BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


BOOTSTRAP_TOKEN = "test-bootstrap"
PASSWORD = "password123"


@pytest.fixture()
def app_client(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ENV", "testing")
    monkeypatch.setenv("MONGODB_URI", "mongomock://localhost")
    monkeypatch.setenv("DB_NAME", "hiring_test")
    monkeypatch.setenv("BOOTSTRAP_TOKEN", BOOTSTRAP_TOKEN)
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("APP_TIMEZONE", "UTC")

    # Prevent accidental pollution from any existing env config.
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.delenv("CORS_ORIGINS", raising=False)

    from hiretrack import create_app
    from hiretrack.db import reset_client_for_tests
    from hiretrack.middlewares.security import reset_rate_limits_for_tests

    reset_client_for_tests()
    reset_rate_limits_for_tests()

    app = create_app()
    app.testing = True

    with app.test_client() as client:
        yield app, client

    reset_client_for_tests()


def bootstrap_and_login(client, email: str = "recruiter@example.com") -> str:
    res = client.post(
        "/api/v1/auth/bootstrap",
        headers={"X-Bootstrap-Token": BOOTSTRAP_TOKEN},
        json={"email": email, "password": PASSWORD, "name": "Rita Recruiter"},
    )
    assert res.status_code == 201
    return login(client, email)


def login(client, email: str) -> str:
    res = client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    assert res.status_code == 200
    return res.get_json()["data"]["access_token"]


def invite(client, token: str, *, email: str, role: str, name: str = "Someone") -> str:
    res = client.post(
        "/api/v1/users",
        headers=auth_header(token),
        json={"email": email, "password": PASSWORD, "role": role, "name": name},
    )
    assert res.status_code == 201
    return res.get_json()["data"]["_id"]


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def recruiter(app_client):
    app, client = app_client
    token = bootstrap_and_login(client)
    return app, client, token
