"""Tests for health endpoints."""

from unittest.mock import patch

from fastapi.testclient import TestClient


def test_root_health_check(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


def test_api_health_check(client: TestClient, api_prefix: str):
    response = client.get(f"{api_prefix}/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["uptime_seconds"] >= 0


async def test_db_health_degraded_when_pool_fails(async_client, api_prefix: str):
    with patch(
        "stockledger.infrastructure.storage.sqlite.get_connection",
        side_effect=RuntimeError("unable to open database file"),
    ):
        response = await async_client.get(f"{api_prefix}/health/db")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["database"].startswith("error:")


def test_unknown_path_returns_404(client: TestClient):
    response = client.get("/api/nope")
    assert response.status_code == 404
    assert response.json()["error_code"] == "NOT_FOUND"


def test_request_id_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert response.headers["X-Response-Time"].endswith("ms")
