"""Contract tests for the database export/import endpoints."""

import pytest
from httpx import AsyncClient

from mirotrak.models.clients import ClientDB


@pytest.mark.contract
class TestDatabaseContract:
    """Contract tests for /api/database."""

    async def test_tables(self, api_client: AsyncClient, sample_client: ClientDB) -> None:
        response = await api_client.get("/api/database/tables")

        assert response.status_code == 200
        tables = {table["name"]: table for table in response.json()}
        assert set(tables) == {"clients", "ai_photos", "subscriptions", "events", "prompts"}
        assert tables["clients"] == {"name": "clients", "label": "Clients", "count": 1}

    async def test_export_json_download(
        self, api_client: AsyncClient, sample_client: ClientDB
    ) -> None:
        response = await api_client.get("/api/database/export/json")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert 'filename="database-export-' in response.headers["content-disposition"]
        snapshot = response.json()
        assert snapshot["version"] == "1.0"
        assert snapshot["data"]["clients"][0]["clientName"] == "TechCorp Solutions"

    async def test_export_csv(self, api_client: AsyncClient, sample_client: ClientDB) -> None:
        response = await api_client.get("/api/database/export/csv/clients")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.content.startswith("\ufeff".encode())
        assert '"TechCorp Solutions"' in response.text

    async def test_export_excel(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/api/database/export/excel/prompts")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        # XLSX files are zip archives
        assert response.content.startswith(b"PK")

    @pytest.mark.parametrize("path", ["csv/settings", "csv/users", "excel/users"])
    async def test_unsupported_table(self, api_client: AsyncClient, path: str) -> None:
        response = await api_client.get(f"/api/database/export/{path}")

        assert response.status_code == 400
        assert response.json() == {"message": "Table non supportée"}

    async def test_import_round_trip(
        self, api_client: AsyncClient, sample_client: ClientDB
    ) -> None:
        snapshot = (await api_client.get("/api/database/export/json")).json()
        await api_client.post("/api/clients", json={"clientName": "Intrus"})

        response = await api_client.post("/api/database/import/json", json=snapshot)

        assert response.status_code == 200
        assert response.json() == {
            "message": "Import réussi",
            "imported": {
                "clients": 1,
                "aiPhotos": 0,
                "subscriptions": 0,
                "settings": 0,
                "events": 0,
                "prompts": 0,
            },
        }
        clients = (await api_client.get("/api/clients")).json()
        assert [client["clientName"] for client in clients] == ["TechCorp Solutions"]

    @pytest.mark.parametrize("value", [5, "clients", {"id": 1}])
    async def test_import_skips_non_list_arrays(
        self, api_client: AsyncClient, sample_client: ClientDB, value
    ) -> None:
        response = await api_client.post(
            "/api/database/import/json", json={"data": {"clients": value}}
        )

        assert response.status_code == 200
        assert response.json()["imported"]["clients"] == 0
        assert (await api_client.get("/api/clients")).json() == []

    @pytest.mark.parametrize("body", [{}, {"data": "nope"}, {"version": "1.0"}])
    async def test_import_invalid_format(self, api_client: AsyncClient, body: dict) -> None:
        response = await api_client.post("/api/database/import/json", json=body)

        assert response.status_code == 400
        assert response.json() == {"message": "Format de données invalide"}

    async def test_import_failure_keeps_existing_data(
        self, api_client: AsyncClient, sample_client: ClientDB
    ) -> None:
        response = await api_client.post(
            "/api/database/import/json",
            json={"data": {"clients": [{"id": 5}]}},
        )

        assert response.status_code == 400
        assert response.json() == {"message": "Erreur lors de l'import"}
        assert len((await api_client.get("/api/clients")).json()) == 1

    async def test_heavy_rate_limit(self, api_client: AsyncClient) -> None:
        statuses = [
            (await api_client.get("/api/database/tables")).status_code for _ in range(6)
        ]

        assert statuses == [200] * 5 + [429]

        response = await api_client.get("/api/database/tables")
        assert response.headers["Retry-After"] == "12"
        assert response.json()["limit"] == "heavy"
        assert (await api_client.get("/api/clients")).status_code == 200
