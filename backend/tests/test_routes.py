"""
IP Reverser: API Endpoint Tests
=================================

What:  End-to-end tests of the HTTP surface over an in-memory record store.
How:   HTTPX AsyncClient with ASGITransport; no server, no database.

What we test:
    ✅ GET / reverses the header-derived address and stores it
    ✅ GET / maps invalid input and storage failures to an opaque 500
    ✅ GET /ips lists records newest first, honours ?limit
    ✅ GET /health reports liveness regardless of the store
    ✅ GET /health/store follows the store's health
    ✅ Request ID and security headers on every response
"""

import pytest
from httpx import ASGITransport, AsyncClient

from ipreverser import main
from ipreverser.exceptions import StartupError
from ipreverser.main import create_app
from ipreverser.services.record_store import InMemoryRecordStore


class TestReverseEndpoint:

    @pytest.mark.asyncio
    async def test_reverses_forwarded_for(self, test_client, memory_store):
        response = await test_client.get("/", headers={"X-Forwarded-For": "1.2.3.4"})

        assert response.status_code == 200
        body = response.json()
        assert body["originalIP"] == "1.2.3.4"
        assert body["reversedIP"] == "4.3.2.1"
        assert "1.2.3.4 reversed is 4.3.2.1" in body["message"]
        assert body["timestamp"]
        assert len(memory_store) == 1

    @pytest.mark.asyncio
    async def test_real_ip_header(self, test_client):
        response = await test_client.get("/", headers={"X-Real-IP": "192.168.1.100"})

        assert response.status_code == 200
        assert response.json()["originalIP"] == "192.168.1.100"
        assert response.json()["reversedIP"] == "100.1.168.192"

    @pytest.mark.asyncio
    async def test_forwarded_for_chain_takes_first(self, test_client):
        response = await test_client.get(
            "/", headers={"X-Forwarded-For": "8.8.8.8, 192.168.1.1"}
        )

        assert response.json()["originalIP"] == "8.8.8.8"
        assert response.json()["reversedIP"] == "8.8.8.8"

    @pytest.mark.asyncio
    async def test_no_headers_uses_transport_address(self, test_app):
        transport = ASGITransport(app=test_app, client=("203.0.113.9", 51000))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["originalIP"] == "203.0.113.9"
        assert response.json()["reversedIP"] == "9.113.0.203"

    @pytest.mark.asyncio
    async def test_timestamp_matches_stored_record(self, test_client, memory_store):
        response = await test_client.get("/", headers={"X-Client-IP": "10.0.0.1"})

        [record] = await memory_store.list_recent()
        assert response.json()["timestamp"].startswith(
            record.created_at.isoformat()[:19]
        )

    @pytest.mark.asyncio
    async def test_invalid_address_is_opaque_500(self, test_client, memory_store):
        response = await test_client.get("/", headers={"X-Forwarded-For": "invalid-ip"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal server error",
            "message": "Failed to process IP address",
        }
        assert len(memory_store) == 0

    @pytest.mark.asyncio
    async def test_storage_failure_is_opaque_500(self, test_client, memory_store):
        memory_store.healthy = False

        response = await test_client.get("/", headers={"X-Forwarded-For": "1.2.3.4"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal server error",
            "message": "Failed to process IP address",
        }
        assert "unavailable" not in response.text


class TestListEndpoint:

    @pytest.mark.asyncio
    async def test_empty_list(self, test_client):
        response = await test_client.get("/ips")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_lists_newest_first(self, test_client):
        for ip in ("1.1.1.1", "2.2.2.2", "3.3.3.3"):
            await test_client.get("/", headers={"X-Forwarded-For": ip})

        response = await test_client.get("/ips")

        assert response.status_code == 200
        records = response.json()
        assert [r["original_ip"] for r in records] == ["3.3.3.3", "2.2.2.2", "1.1.1.1"]
        assert set(records[0]) == {"id", "original_ip", "reversed_ip", "created_at"}

    @pytest.mark.asyncio
    async def test_limit_query_parameter(self, test_client):
        for ip in ("1.1.1.1", "2.2.2.2", "3.3.3.3"):
            await test_client.get("/", headers={"X-Forwarded-For": ip})

        response = await test_client.get("/ips", params={"limit": 2})

        assert [r["original_ip"] for r in response.json()] == ["3.3.3.3", "2.2.2.2"]

    @pytest.mark.asyncio
    async def test_invalid_limit_rejected(self, test_client):
        response = await test_client.get("/ips", params={"limit": 0})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_store_failure_is_500(self, test_client, memory_store):
        memory_store.healthy = False

        response = await test_client.get("/ips")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch records"}


class TestHealthEndpoints:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["uptime"] >= 0
        assert body["timestamp"]

    @pytest.mark.asyncio
    async def test_health_ignores_store(self, test_client, memory_store):
        memory_store.healthy = False

        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_store_health_connected(self, test_client):
        response = await test_client.get("/health/store")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": "connected"}

    @pytest.mark.asyncio
    async def test_store_health_disconnected(self, test_client, memory_store):
        memory_store.healthy = False

        response = await test_client.get("/health/store")

        assert response.status_code == 503
        assert response.json() == {"status": "unhealthy", "database": "disconnected"}


class TestMiddleware:

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/health")
        assert response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_security_headers(self, test_client):
        response = await test_client.get("/")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "SAMEORIGIN"


class TestLifespan:

    @pytest.mark.asyncio
    async def test_startup_initializes_store(self, test_settings):
        store = InMemoryRecordStore()
        app = create_app(settings=test_settings, record_store=store)

        async with app.router.lifespan_context(app):
            assert store.initialized is True

    @pytest.mark.asyncio
    async def test_startup_failure_propagates(self, test_settings):
        app = create_app(settings=test_settings, record_store=InMemoryRecordStore(healthy=False))

        with pytest.raises(StartupError):
            async with app.router.lifespan_context(app):
                pass


class TestRun:

    def test_serves_without_server_header(self, monkeypatch, test_settings):
        calls = []
        monkeypatch.setattr(main, "get_settings", lambda: test_settings)
        monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))

        main.run()

        [kwargs] = calls
        assert kwargs["server_header"] is False
        assert kwargs["port"] == test_settings.port
