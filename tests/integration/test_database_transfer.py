"""Integration tests for whole-database export and import against SQLite."""

import csv
import io
from datetime import date, datetime, timezone

import pytest
from openpyxl import load_workbook
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mirotrak.models.calendar import EventDB
from mirotrak.models.clients import ClientDB, SubscriptionDB
from mirotrak.models.library import AiPhotoDB, PromptDB
from mirotrak.models.settings import SettingDB
from mirotrak.services.database_transfer import (
    EXPORT_VERSION,
    MERGED_TABLES,
    REPLACED_TABLES,
    DatabaseTransfer,
    ImportFailedError,
    ImportFormatError,
    UnsupportedTableError,
)


async def populate(session: AsyncSession) -> None:
    """Insert one or two rows in every dashboard table."""
    acme = ClientDB(
        client_name="ACME",
        email="contact@acme.example",
        budget=12000.5,
        start_date=date(2026, 1, 5),
        attachments=[{"name": "brief.pdf"}],
    )
    globex = ClientDB(client_name="Globex", status="Terminé", progress=100)
    session.add_all([acme, globex])
    await session.flush()

    session.add_all(
        [
            SubscriptionDB(
                client_id=acme.id,
                name="Hébergement",
                cost=12.5,
                billing_cycle="mensuel",
                start_date=date(2026, 1, 1),
            ),
            EventDB(
                title="Kick-off",
                start=datetime(2026, 2, 1, 9, 30, tzinfo=timezone.utc),
                client="ACME",
            ),
            PromptDB(title="Relance", category="Marketing", content="Bonjour, je reviens vers vous"),
            AiPhotoDB(name="Logo", image_url="https://img.example/logo.png", image_prompt="a logo"),
            SettingDB(key="theme", value="dark", type="string"),
        ]
    )
    await session.commit()


async def count(session: AsyncSession, model) -> int:
    return await session.scalar(select(func.count()).select_from(model))


@pytest.mark.integration
class TestExport:
    """Integration tests for the JSON, CSV and XLSX exporters."""

    async def test_snapshot_shape(self, async_db_session: AsyncSession) -> None:
        await populate(async_db_session)

        snapshot = await DatabaseTransfer(async_db_session).export_snapshot()

        assert snapshot["version"] == EXPORT_VERSION
        assert "exportDate" in snapshot
        assert list(snapshot["data"]) == [
            "clients", "aiPhotos", "subscriptions", "settings", "events", "prompts",
        ]
        assert len(snapshot["data"]["clients"]) == 2
        assert len(snapshot["data"]["settings"]) == 1

    async def test_rows_are_camel_case(self, async_db_session: AsyncSession) -> None:
        await populate(async_db_session)

        snapshot = await DatabaseTransfer(async_db_session).export_snapshot()
        subscription = snapshot["data"]["subscriptions"][0]
        photo = snapshot["data"]["aiPhotos"][0]

        assert subscription["billingCycle"] == "mensuel"
        assert subscription["startDate"] == "2026-01-01"
        assert "createdAt" in subscription and "created_at" not in subscription
        assert photo["imageUrl"] == "https://img.example/logo.png"
        assert photo["videoPrompt"] is None

    async def test_rows_are_newest_first(self, async_db_session: AsyncSession) -> None:
        await populate(async_db_session)

        snapshot = await DatabaseTransfer(async_db_session).export_snapshot()
        clients = snapshot["data"]["clients"]

        assert [client["id"] for client in clients] == sorted(
            (client["id"] for client in clients), reverse=True
        )

    async def test_export_json_filename(self, async_db_session: AsyncSession) -> None:
        filename, content = await DatabaseTransfer(async_db_session).export_json()

        assert filename.startswith("database-export-")
        assert filename.endswith(".json")
        assert '"version": "1.0"' in content

    async def test_csv_export(self, async_db_session: AsyncSession) -> None:
        await populate(async_db_session)

        filename, content = await DatabaseTransfer(async_db_session).export_csv("ai_photos")

        assert filename.startswith("ai_photos-export-")
        assert content.startswith("\ufeff")
        lines = content[1:].splitlines()
        assert lines[0] == '"id","name","imagePrompt","videoPrompt","imageUrl","createdAt","updatedAt"'

        rows = list(csv.DictReader(io.StringIO(content[1:])))
        assert rows[0]["name"] == "Logo"
        assert rows[0]["videoPrompt"] == ""
        assert lines[1].split(",")[3] == '""'

    async def test_csv_rejects_unknown_table(self, async_db_session: AsyncSession) -> None:
        transfer = DatabaseTransfer(async_db_session)

        with pytest.raises(UnsupportedTableError):
            await transfer.export_csv("settings")

        with pytest.raises(UnsupportedTableError):
            await transfer.export_csv("users")

    async def test_excel_export(self, async_db_session: AsyncSession) -> None:
        await populate(async_db_session)

        filename, content = await DatabaseTransfer(async_db_session).export_excel("clients")

        assert filename.endswith(".xlsx")
        worksheet = load_workbook(io.BytesIO(content)).active
        assert worksheet.title == "Clients"
        assert worksheet["B1"].value == "Nom du client"
        assert worksheet["B1"].font.bold is True
        assert worksheet["B1"].fill.fgColor.rgb == "FF21262D"
        assert worksheet.column_dimensions["D"].width == 30
        assert worksheet.max_row == 3

    async def test_list_tables(self, async_db_session: AsyncSession) -> None:
        await populate(async_db_session)

        tables = await DatabaseTransfer(async_db_session).list_tables()

        assert {table["name"]: table["count"] for table in tables} == {
            "clients": 2,
            "ai_photos": 1,
            "subscriptions": 1,
            "events": 1,
            "prompts": 1,
        }
        assert next(t for t in tables if t["name"] == "prompts")["label"] == "Bibliothèque Prompts"


@pytest.mark.integration
class TestImport:
    """Integration tests for the transactional importer."""

    async def test_round_trip(self, async_db_session: AsyncSession) -> None:
        await populate(async_db_session)
        transfer = DatabaseTransfer(async_db_session)
        snapshot = await transfer.export_snapshot()

        # Diverge from the snapshot before restoring it
        async_db_session.add(ClientDB(client_name="Intrus"))
        prompt = await async_db_session.scalar(select(PromptDB))
        await async_db_session.delete(prompt)
        await async_db_session.commit()

        imported = await transfer.import_snapshot(snapshot)
        restored = await transfer.export_snapshot()

        assert restored["data"] == snapshot["data"]
        assert imported == {
            "clients": 2,
            "aiPhotos": 1,
            "subscriptions": 1,
            "settings": 1,
            "events": 1,
            "prompts": 1,
        }

    async def test_failure_rolls_back_everything(self, async_db_session: AsyncSession) -> None:
        await populate(async_db_session)
        transfer = DatabaseTransfer(async_db_session)
        before = await transfer.export_snapshot()

        broken = {
            "data": {
                "clients": [{"id": 1, "clientName": "Seul client"}],
                "subscriptions": [
                    {
                        "id": 1,
                        "clientId": 999,
                        "name": "Orpheline",
                        "cost": 5,
                        "billingCycle": "mensuel",
                        "startDate": "2026-01-01",
                    }
                ],
            }
        }

        with pytest.raises(ImportFailedError):
            await transfer.import_snapshot(broken)

        after = await transfer.export_snapshot()
        assert after["data"] == before["data"]

    async def test_invalid_row_rolls_back(self, async_db_session: AsyncSession) -> None:
        await populate(async_db_session)
        transfer = DatabaseTransfer(async_db_session)

        with pytest.raises(ImportFailedError):
            await transfer.import_snapshot({"data": {"prompts": [{"title": "sans id"}]}})

        assert await count(async_db_session, ClientDB) == 2
        assert await count(async_db_session, PromptDB) == 1

    async def test_sequences_follow_imported_ids(self, async_db_session: AsyncSession) -> None:
        snapshot = {
            "data": {
                "clients": [
                    {"id": 10, "clientName": "Dix"},
                    {"id": 20, "clientName": "Vingt"},
                ]
            }
        }
        await DatabaseTransfer(async_db_session).import_snapshot(snapshot)

        client = ClientDB(client_name="Suivant")
        async_db_session.add(client)
        await async_db_session.commit()

        assert client.id == 21

    async def test_absent_fields_take_column_defaults(self, async_db_session: AsyncSession) -> None:
        await DatabaseTransfer(async_db_session).import_snapshot(
            {"data": {"clients": [{"id": 3, "clientName": "Minimal"}]}}
        )

        client = await async_db_session.get(ClientDB, 3)
        assert client.country == "France"
        assert client.status == "En cours"
        assert client.progress == 0
        assert client.created_at is not None

    async def test_settings_are_merged_not_replaced(self, async_db_session: AsyncSession) -> None:
        async_db_session.add_all(
            [
                SettingDB(id=1, key="theme", value="dark"),
                SettingDB(id=2, key="local_only", value="keep-me"),
            ]
        )
        await async_db_session.commit()

        await DatabaseTransfer(async_db_session).import_snapshot(
            {
                "data": {
                    "settings": [
                        {"id": 7, "key": "theme", "value": "light", "type": "string"},
                        {"id": 1, "key": "currency", "value": "EUR"},
                        {"id": 50, "key": "language", "value": "fr"},
                    ]
                }
            }
        )

        result = await async_db_session.scalars(
            select(SettingDB).execution_options(populate_existing=True)
        )
        settings = {setting.key: setting for setting in result}
        assert settings["theme"].value == "light"
        assert settings["theme"].id == 1
        assert settings["local_only"].value == "keep-me"
        assert settings["currency"].id not in (1, 2)
        assert settings["language"].id == 50

    async def test_settings_without_id_are_matched_by_key(
        self, async_db_session: AsyncSession
    ) -> None:
        async_db_session.add(SettingDB(id=1, key="theme", value="dark"))
        await async_db_session.commit()

        imported = await DatabaseTransfer(async_db_session).import_snapshot(
            {
                "data": {
                    "settings": [
                        {"key": "theme", "value": "light"},
                        {"key": "new", "value": "1"},
                    ]
                }
            }
        )

        result = await async_db_session.scalars(
            select(SettingDB).execution_options(populate_existing=True)
        )
        settings = {setting.key: setting for setting in result}
        assert imported["settings"] == 2
        assert settings["theme"].value == "light"
        assert settings["theme"].id == 1
        assert settings["new"].id == 2

    async def test_settings_with_taken_id_get_next_free_id(
        self, async_db_session: AsyncSession
    ) -> None:
        async_db_session.add_all(
            [SettingDB(id=index, key=f"local_{index}", value="x") for index in (1, 2, 3)]
        )
        await async_db_session.commit()

        await DatabaseTransfer(async_db_session).import_snapshot(
            {
                "data": {
                    "settings": [
                        {"id": 4, "key": "a", "value": "1"},
                        {"id": 2, "key": "b", "value": "2"},
                    ]
                }
            }
        )

        result = await async_db_session.scalars(select(SettingDB))
        ids = {setting.key: setting.id for setting in result}
        assert ids["a"] == 4
        assert ids["b"] == 5
        assert ids["local_2"] == 2

    async def test_replaced_tables_are_wiped_even_when_absent(
        self, async_db_session: AsyncSession
    ) -> None:
        await populate(async_db_session)

        imported = await DatabaseTransfer(async_db_session).import_snapshot({"data": {}})

        for spec in REPLACED_TABLES:
            assert await count(async_db_session, spec.model) == 0, spec.name
        for spec in MERGED_TABLES:
            assert await count(async_db_session, spec.model) == 1, spec.name
        assert set(imported.values()) == {0}

    @pytest.mark.parametrize("payload", [{}, {"data": None}, {"data": []}, [], "snapshot"])
    async def test_malformed_snapshot(self, async_db_session: AsyncSession, payload) -> None:
        await populate(async_db_session)

        with pytest.raises(ImportFormatError):
            await DatabaseTransfer(async_db_session).import_snapshot(payload)

        assert await count(async_db_session, ClientDB) == 2
