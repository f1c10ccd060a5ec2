import pytest
from fastapi import APIRouter
from fastapi.testclient import TestClient

from backend.app import main as app_main
from community.config import Settings
from community.security import SecurityConfigError


def test_health_endpoints(test_app_client):
    client, _ = test_app_client

    assert client.get("/health").json() == {"status": "ok"}

    ready = client.get("/health/ready")
    assert ready.status_code == 200
    assert ready.json()["checks"]["database"] is True


def test_request_id_is_echoed_or_generated(test_app_client):
    client, _ = test_app_client

    resp = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["x-request-id"] == "abc-123"

    resp = client.get("/health", headers={"X-Request-ID": "bad id with spaces"})
    assert resp.headers["x-request-id"] != "bad id with spaces"
    assert len(resp.headers["x-request-id"]) == 36


def test_oversized_request_is_rejected(test_app_client):
    client, _ = test_app_client

    resp = client.post(
        "/api/v1/auth/login",
        content=b"{}",
        headers={"Content-Type": "application/json", "Content-Length": str(100 * 1024 * 1024)},
    )
    assert resp.status_code == 413


def test_unknown_route_uses_error_shape(test_app_client):
    client, _ = test_app_client

    resp = client.get("/api/v1/nowhere")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Not Found", "status_code": 404}


def test_unhandled_errors_are_opaque(test_app_client):
    client, _ = test_app_client
    router = APIRouter()

    @router.get("/boom")
    def boom():
        raise RuntimeError("database password is hunter2")

    client.app.include_router(router)

    resp = TestClient(client.app, raise_server_exceptions=False).get("/boom")
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error", "status_code": 500}
    assert "hunter2" not in resp.text


def test_startup_validation_fails_on_production_config_errors(monkeypatch):
    strict = Settings(
        JWT_SECRET_KEY="k" * 48,
        STRICT_SECURITY=True,
        CORS_ALLOWED_ORIGINS="http://localhost:5173",
    )
    monkeypatch.setattr(app_main, "settings", strict)

    with pytest.raises(SecurityConfigError) as exc_info:
        app_main.validate_security_on_startup()
    assert any("localhost" in error for error in exc_info.value.errors)


def test_startup_validation_passes_with_only_warnings(monkeypatch):
    monkeypatch.setattr(app_main, "settings", Settings(JWT_SECRET_KEY="k" * 48))

    assert app_main.validate_security_on_startup() is True
