"""Service Endpoints & Error Boundary: metadata, health, unmatched routes, 5xx mapping.

Design Decisions:
    - Store failures simulated with fake executors swapped in through get_db,
      so no real database outage is needed
    - Unhandled-exception tests use raise_app_exceptions=False: Starlette re-raises
      after the catch-all handler has produced the response
"""

import logging

import pytest
from httpx import ASGITransport, AsyncClient

from app.config import Settings
from app.core.errors import ServiceUnavailableError
from app.infrastructure.database import get_db
from app.main import app


class _UnavailableStore:
    async def query(self, statement):
        raise ServiceUnavailableError()

    async def health_check(self) -> bool:
        return False


class _BrokenStore:
    async def query(self, statement):
        raise RuntimeError("cursor exploded")

    async def health_check(self) -> bool:
        return True


@pytest.fixture
async def client_with_store():
    """Factory: test client whose executor is the given fake."""
    clients = []

    async def _make(store):
        app.dependency_overrides[get_db] = lambda: store
        c = AsyncClient(
            transport=ASGITransport(app=app, raise_app_exceptions=False),
            base_url="http://test",
        )
        clients.append(c)
        return c

    yield _make
    for c in clients:
        await c.aclose()
    app.dependency_overrides.clear()


async def test_root_lists_endpoints(client):
    res = await client.get("/")
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert "GET /api/books" in body["endpoints"]
    assert "sortBy" in body["queryParams"]


async def test_health_reports_connected(client):
    res = await client.get("/health")
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["status"] == "OK"
    assert body["database"] == "connected"
    assert body["timestamp"]


async def test_health_reports_disconnected(client_with_store):
    client = await client_with_store(_UnavailableStore())
    res = await client.get("/health")
    assert res.status_code == 200
    assert res.json()["database"] == "disconnected"


async def test_unmatched_route_is_404(client):
    res = await client.get("/api/authors")
    assert res.status_code == 404
    body = res.json()
    assert body["success"] is False
    assert body["error"] == "Route not found"
    assert body["path"] == "/api/authors"
    assert body["method"] == "GET"
    assert body["timestamp"]


async def test_unmatched_method_is_404(client):
    res = await client.post("/health")
    assert res.status_code == 404
    assert res.json()["method"] == "POST"


async def test_store_unavailable_is_503(client_with_store):
    client = await client_with_store(_UnavailableStore())
    res = await client.get("/api/books")
    assert res.status_code == 503
    body = res.json()
    assert body["success"] is False
    assert body["error"] == "Database is unavailable"


async def test_validation_happens_before_store_access(client_with_store):
    client = await client_with_store(_UnavailableStore())
    res = await client.post("/api/books", json={})
    assert res.status_code == 400


async def test_unexpected_error_shows_message_outside_production(client_with_store):
    client = await client_with_store(_BrokenStore())
    res = await client.get("/api/books/1")
    assert res.status_code == 500
    body = res.json()
    assert body["success"] is False
    assert body["error"] == "cursor exploded"
    assert "Traceback" not in res.text


async def test_unexpected_error_is_generic_in_production(client_with_store, monkeypatch):
    monkeypatch.setattr(
        "app.api.error_handlers.get_settings",
        lambda: Settings(environment="production"),
    )
    client = await client_with_store(_BrokenStore())
    res = await client.get("/api/books/1")
    assert res.status_code == 500
    assert res.json()["error"] == "Internal server error"


async def test_request_log_records_unhandled_500(client_with_store, caplog):
    client = await client_with_store(_BrokenStore())
    with caplog.at_level(logging.INFO, logger="app.main"):
        res = await client.get("/api/books/1")
    assert res.status_code == 500
    [record] = [r for r in caplog.records if r.name == "app.main"]
    assert record.status_code == 500
    assert record.method == "GET"
    assert record.path == "/api/books/1"


async def test_request_log_records_handled_status(client, caplog):
    with caplog.at_level(logging.INFO, logger="app.main"):
        await client.get("/api/books/999")
    [record] = [r for r in caplog.records if r.name == "app.main"]
    assert record.status_code == 404
