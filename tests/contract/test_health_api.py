"""Contract tests for the health probes and the API root."""

import pytest
from httpx import AsyncClient

from mirotrak.services import database
from mirotrak.services.database import DatabaseManager


@pytest.mark.contract
class TestHealthContract:
    """Contract tests for /v1 probes."""

    async def test_liveness(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/v1/liveness")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    async def test_readiness_without_database(
        self, api_client: AsyncClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(database, "_db_manager", None)

        response = await api_client.get("/v1/readiness")

        assert response.status_code == 503
        assert response.json()["checks"]["database"] == "not_initialized"

    async def test_readiness_and_health_with_database(
        self,
        api_client: AsyncClient,
        db_manager: DatabaseManager,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(database, "_db_manager", db_manager)

        readiness = await api_client.get("/v1/readiness")
        health = await api_client.get("/v1/health")

        assert readiness.status_code == 200
        assert readiness.json() == {"status": "ready", "checks": {"database": "healthy"}}
        assert health.json()["status"] == "healthy"
        assert health.json()["checks"]["database"]["type"] == "sqlite"

    async def test_request_id_is_echoed(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/v1/liveness", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    async def test_root(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "MiroTrak"
