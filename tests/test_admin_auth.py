from datetime import timedelta

import pytest

from donation_api.db.base_class import utcnow
from donation_api.models.admin_session import AdminSession

from conftest import ADMIN_PASSWORD, seed


def test_login_returns_session_token(client):
    response = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})

    assert response.status_code == 200
    data = response.json()
    assert len(data["token"]) == 36
    assert data["expires_at"].endswith("Z")


def test_wrong_password(client):
    response = client.post("/api/admin/login", json={"password": "tebakan"})
    assert response.status_code == 401
    assert response.json()["error"] == "INVALID_CREDENTIALS"


@pytest.mark.parametrize("body", [{}, {"password": ""}])
def test_missing_password(client, body):
    response = client.post("/api/admin/login", json=body)
    assert response.status_code == 400
    assert response.json()["error"] == "MISSING_REQUIRED_FIELD"


def test_login_disabled_without_configured_password(client, app):
    app.state.settings.admin_password = None
    response = client.post("/api/admin/login", json={"password": "anything"})
    assert response.status_code == 401


def test_token_grants_access(client, admin_headers):
    response = client.get("/api/admin/disbursements", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Bearer not-a-real-token"},
        {"Authorization": "Token abc"},
        {"Authorization": "Bearer"},
        {"Authorization": "Bearer expired-token"},
    ],
)
def test_rejected_tokens_look_the_same(client, SessionLocal, headers):
    seed(SessionLocal, AdminSession(token="expired-token", expires_at=utcnow() - timedelta(minutes=1)))

    for path in ("/api/admin/disbursements", "/api/admin/grafana-config"):
        response = client.get(path, headers=headers)
        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "UNAUTHORIZED"
        assert body["message"] == "Unauthorized access"
