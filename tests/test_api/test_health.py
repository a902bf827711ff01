"""
Tests for health, metrics and auth endpoints.
"""

import pytest
from httpx import AsyncClient

from app.services.metrics import MetricsCollector, normalize_path


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test health check endpoint returns OK status."""
    response = await client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"


@pytest.mark.asyncio
async def test_root_endpoint(client: AsyncClient):
    """Test root endpoint returns API info."""
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["api"] == "/api"
    assert "version" in data


@pytest.mark.asyncio
async def test_metrics_json(client: AsyncClient, seeded_tags):
    await client.get("/api/tags")

    response = await client.get("/api/metrics")

    assert response.status_code == 200
    data = response.json()
    assert data["totalRequests"] >= 1
    assert data["content"]["tags"] == len(seeded_tags)


@pytest.mark.asyncio
async def test_metrics_prometheus(client: AsyncClient):
    await client.get("/api/tags")

    response = await client.get("/api/metrics/prometheus")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "animal_share_http_requests_total" in response.text
    assert 'animal_share_rows_total{table="posts"}' in response.text


@pytest.mark.asyncio
async def test_auth_user(client: AsyncClient, auth_headers):
    response = await client.get("/api/auth/user", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "alice"
    assert data["email"] == "alice@example.com"
    assert data["firstName"] == "Alice"


@pytest.mark.asyncio
async def test_auth_user_anonymous(client: AsyncClient):
    response = await client.get("/api/auth/user")

    assert response.status_code == 401


def test_normalize_path_replaces_uuids():
    path = "/api/posts/0f8fad5b-d9cb-469f-a165-70867728950e"

    assert normalize_path(path) == "/api/posts/{id}"
    assert normalize_path("/api/tags") == "/api/tags"


def test_collector_counts_errors():
    collector = MetricsCollector()
    collector.record_request("GET", "/api/posts", 200, 0.01)
    collector.record_request("GET", "/api/posts", 404, 0.02)

    metrics = collector.get_metrics()

    assert metrics["totalRequests"] == 2
    assert metrics["totalErrors"] == 1
    assert metrics["errorRate"] == 0.5
    assert metrics["avgResponseTimeMs"]["GET /api/posts"] == 15.0


@pytest.mark.asyncio
async def test_login_with_email_of_other_account(client: AsyncClient, db_session, make_user):
    """A new subject whose email is already registered can still use the API."""
    existing = await make_user("old-sub")
    existing.email = "alice@example.com"
    await db_session.flush()

    response = await client.get("/api/posts", headers={"Authorization": "Bearer alice"})

    assert response.status_code == 200

    response = await client.get("/api/auth/user", headers={"Authorization": "Bearer alice"})

    assert response.status_code == 200
    assert response.json()["id"] == "alice"
    assert response.json()["email"] is None
