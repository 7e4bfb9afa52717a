"""Whole-database export and import.

Exports serialize every row of the dashboard tables to a JSON snapshot, or a
single table to CSV or XLSX. Imports replace the dashboard tables from such a
snapshot inside one transaction:

* ``REPLACED_TABLES`` are wiped unconditionally (dependents first, so foreign
  keys stay satisfied), then repopulated from the snapshot when the matching
  array is present. Original primary keys are preserved.
* ``MERGED_TABLES`` (settings) are never wiped: incoming rows are upserted by
  their natural key so that local configuration survives an import.

Once rows are in place every id sequence is moved to the imported maximum so
that later inserts do not collide with the explicit ids.
"""

import csv
import io
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from pydantic import ValidationError
from sqlalchemy import delete, func, insert, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mirotrak.models.base import RecordModel, utcnow
from mirotrak.models.calendar import EventDB, EventRead
from mirotrak.models.clients import ClientDB, ClientRead, SubscriptionDB, SubscriptionRead
from mirotrak.models.library import AiPhotoDB, AiPhotoRead, PromptDB, PromptRead
from mirotrak.models.settings import SettingDB, SettingImport, SettingRead

logger = structlog.get_logger(__name__)

EXPORT_VERSION = "1.0"

HEADER_FONT = Font(bold=True, size=12, color="FFE6EDF3")
HEADER_FILL = PatternFill(fill_type="solid", fgColor="FF21262D")


class DatabaseTransferError(Exception):
    """Base error for export/import failures."""


class UnsupportedTableError(DatabaseTransferError):
    """Requested table is not exportable."""


class ImportFormatError(DatabaseTransferError):
    """Snapshot is missing its ``data`` object."""


class ImportFailedError(DatabaseTransferError):
    """Import aborted and was rolled back."""


@dataclass(frozen=True)
class ExcelColumn:
    """Spreadsheet column: camelCase record key, header label and width."""

    key: str
    header: str
    width: int


@dataclass(frozen=True)
class TableSpec:
    """How one table is exported and imported."""

    name: str
    payload_key: str
    label: str
    model: Any
    record: type[RecordModel]
    import_record: type[RecordModel] | None = None
    csv_headers: tuple[str, ...] = ()
    sheet_name: str = ""
    excel_columns: tuple[ExcelColumn, ...] = field(default_factory=tuple)

    @property
    def exportable(self) -> bool:
        return bool(self.csv_headers)


CLIENTS = TableSpec(
    name="clients",
    payload_key="clients",
    label="Clients",
    model=ClientDB,
    record=ClientRead,
    csv_headers=(
        "id", "clientName", "contactPerson", "email", "phone", "company",
        "address", "city", "postalCode", "country", "projectType",
        "technologies", "budget", "status", "progress", "notes",
        "website", "logo", "createdAt", "updatedAt",
    ),
    sheet_name="Clients",
    excel_columns=(
        ExcelColumn("id", "ID", 10),
        ExcelColumn("clientName", "Nom du client", 25),
        ExcelColumn("contactPerson", "Contact", 25),
        ExcelColumn("email", "Email", 30),
        ExcelColumn("phone", "Téléphone", 20),
        ExcelColumn("company", "Entreprise", 25),
        ExcelColumn("projectType", "Type de projet", 20),
        ExcelColumn("technologies", "Technologies", 30),
        ExcelColumn("budget", "Budget", 15),
        ExcelColumn("status", "Statut", 15),
        ExcelColumn("progress", "Progression", 15),
    ),
)

AI_PHOTOS = TableSpec(
    name="ai_photos",
    payload_key="aiPhotos",
    label="Images IA",
    model=AiPhotoDB,
    record=AiPhotoRead,
    csv_headers=("id", "name", "imagePrompt", "videoPrompt", "imageUrl", "createdAt", "updatedAt"),
    sheet_name="Images IA",
    excel_columns=(
        ExcelColumn("id", "ID", 10),
        ExcelColumn("name", "Nom", 30),
        ExcelColumn("imagePrompt", "Prompt Image", 50),
        ExcelColumn("videoPrompt", "Prompt Vidéo", 50),
        ExcelColumn("imageUrl", "URL", 60),
    ),
)

SUBSCRIPTIONS = TableSpec(
    name="subscriptions",
    payload_key="subscriptions",
    label="Abonnements",
    model=SubscriptionDB,
    record=SubscriptionRead,
    csv_headers=(
        "id", "clientId", "name", "cost", "billingCycle", "startDate",
        "endDate", "status", "notes", "createdAt", "updatedAt",
    ),
    sheet_name="Abonnements",
    excel_columns=(
        ExcelColumn("id", "ID", 10),
        ExcelColumn("name", "Service", 25),
        ExcelColumn("cost", "Coût", 15),
        ExcelColumn("billingCycle", "Cycle", 15),
        ExcelColumn("status", "Statut", 15),
    ),
)

EVENTS = TableSpec(
    name="events",
    payload_key="events",
    label="Événements",
    model=EventDB,
    record=EventRead,
    csv_headers=(
        "id", "title", "start", "end", "backgroundColor", "borderColor",
        "client", "type", "description", "allDay", "createdAt", "updatedAt",
    ),
    sheet_name="Événements",
    excel_columns=(
        ExcelColumn("id", "ID", 10),
        ExcelColumn("title", "Titre", 30),
        ExcelColumn("start", "Début", 20),
        ExcelColumn("end", "Fin", 20),
        ExcelColumn("client", "Client", 25),
        ExcelColumn("type", "Type", 15),
    ),
)

PROMPTS = TableSpec(
    name="prompts",
    payload_key="prompts",
    label="Bibliothèque Prompts",
    model=PromptDB,
    record=PromptRead,
    csv_headers=("id", "title", "category", "content", "createdAt", "updatedAt"),
    sheet_name="Prompts",
    excel_columns=(
        ExcelColumn("id", "ID", 10),
        ExcelColumn("title", "Titre", 30),
        ExcelColumn("category", "Catégorie", 20),
        ExcelColumn("content", "Contenu", 60),
    ),
)

SETTINGS = TableSpec(
    name="settings",
    payload_key="settings",
    label="Paramètres",
    model=SettingDB,
    record=SettingRead,
    import_record=SettingImport,
)

# Snapshot key order
SNAPSHOT_TABLES = (CLIENTS, AI_PHOTOS, SUBSCRIPTIONS, SETTINGS, EVENTS, PROMPTS)

# Wiped in this order: rows referencing clients go before clients
REPLACED_TABLES = (SUBSCRIPTIONS, EVENTS, AI_PHOTOS, PROMPTS, CLIENTS)

# Repopulated in this order: clients before the rows that reference them
INSERT_ORDER = (CLIENTS, AI_PHOTOS, SUBSCRIPTIONS, EVENTS, PROMPTS)

# Upserted by key, never wiped
MERGED_TABLES = (SETTINGS,)

EXPORTABLE_TABLES = {spec.name: spec for spec in SNAPSHOT_TABLES if spec.exportable}


def get_exportable_table(name: str) -> TableSpec:
    """Look up an exportable table by its storage name.

    Raises:
        UnsupportedTableError: If the table cannot be exported
    """
    spec = EXPORTABLE_TABLES.get(name)
    if spec is None:
        raise UnsupportedTableError(name)
    return spec


def _row_count(rows: Any) -> int:
    return len(rows) if isinstance(rows, list) else 0


def _export_date(now: datetime | None = None) -> str:
    return (now or datetime.now(timezone.utc)).date().isoformat()


class DatabaseTransfer:
    """Export and import service bound to one database session."""

    def __init__(self, db_session: AsyncSession):
        """Initialize transfer service.

        Args:
            db_session: Database session used for reads and the import transaction
        """
        self.db_session = db_session

    # ========== Export ==========

    async def _serialize_table(self, spec: TableSpec) -> list[dict[str, Any]]:
        query = (
            select(spec.model)
            .order_by(spec.model.created_at.desc(), spec.model.id.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.db_session.execute(query)
        return [
            spec.record.model_validate(row).model_dump(mode="json", by_alias=True)
            for row in result.scalars().all()
        ]

    async def export_snapshot(self) -> dict[str, Any]:
        """Serialize every dashboard table into a snapshot document.

        Returns:
            ``{exportDate, version, data}`` with one camelCase array per table
        """
        data = {}
        for spec in SNAPSHOT_TABLES:
            data[spec.payload_key] = await self._serialize_table(spec)

        logger.info(
            "database_export_completed",
            tables={key: len(rows) for key, rows in data.items()},
        )
        return {
            "exportDate": datetime.now(timezone.utc).isoformat(),
            "version": EXPORT_VERSION,
            "data": data,
        }

    async def export_json(self) -> tuple[str, str]:
        """Render the snapshot as an indented JSON document.

        Returns:
            Tuple of (filename, JSON text)
        """
        snapshot = await self.export_snapshot()
        filename = f"database-export-{_export_date()}.json"
        return filename, json.dumps(snapshot, indent=2, ensure_ascii=False)

    async def export_csv(self, table: str) -> tuple[str, str]:
        """Render one table as CSV, every value quoted, prefixed with a UTF-8 BOM.

        Args:
            table: Storage name of the table

        Returns:
            Tuple of (filename, CSV text)

        Raises:
            UnsupportedTableError: If the table cannot be exported
        """
        spec = get_exportable_table(table)
        rows = await self._serialize_table(spec)

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(spec.csv_headers)
        for row in rows:
            writer.writerow(
                ["" if row.get(header) is None else str(row[header]) for header in spec.csv_headers]
            )

        filename = f"{spec.name}-export-{_export_date()}.csv"
        # BOM so spreadsheet tools detect UTF-8
        return filename, "\ufeff" + buffer.getvalue()

    async def export_excel(self, table: str) -> tuple[str, bytes]:
        """Render one table as an XLSX workbook with a styled header row.

        Args:
            table: Storage name of the table

        Returns:
            Tuple of (filename, workbook bytes)

        Raises:
            UnsupportedTableError: If the table cannot be exported
        """
        spec = get_exportable_table(table)
        rows = await self._serialize_table(spec)

        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = spec.sheet_name

        worksheet.append([column.header for column in spec.excel_columns])
        for index, column in enumerate(spec.excel_columns, start=1):
            cell = worksheet.cell(row=1, column=index)
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            worksheet.column_dimensions[cell.column_letter].width = column.width

        for row in rows:
            worksheet.append([row.get(column.key) for column in spec.excel_columns])

        buffer = io.BytesIO()
        workbook.save(buffer)

        filename = f"{spec.name}-export-{_export_date()}.xlsx"
        return filename, buffer.getvalue()

    async def list_tables(self) -> list[dict[str, Any]]:
        """List exportable tables with their row counts."""
        tables = []
        for spec in EXPORTABLE_TABLES.values():
            count = await self.db_session.scalar(select(func.count()).select_from(spec.model))
            tables.append({"name": spec.name, "label": spec.label, "count": count or 0})
        return tables

    # ========== Import ==========

    async def import_snapshot(self, payload: Any) -> dict[str, int]:
        """Replace the dashboard tables with the content of a snapshot.

        Args:
            payload: Decoded snapshot document (``{exportDate, version, data}``)

        Returns:
            Number of incoming rows per snapshot key

        Raises:
            ImportFormatError: If ``data`` is missing or not an object
            ImportFailedError: If anything fails; the transaction is rolled back
        """
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise ImportFormatError("Snapshot has no data object")

        imported = {
            spec.payload_key: _row_count(data.get(spec.payload_key))
            for spec in SNAPSHOT_TABLES
        }
        log = logger.bind(version=payload.get("version"), counts=imported)
        log.info("database_import_started")

        try:
            for spec in REPLACED_TABLES:
                await self.db_session.execute(delete(spec.model))

            for spec in INSERT_ORDER:
                rows = data.get(spec.payload_key)
                if isinstance(rows, list):
                    await self._insert_rows(spec, rows)

            for spec in MERGED_TABLES:
                rows = data.get(spec.payload_key)
                if isinstance(rows, list):
                    await self._upsert_by_key(spec, rows)

            for spec in SNAPSHOT_TABLES:
                await self._reset_sequence(spec)

            await self.db_session.commit()

        except (SQLAlchemyError, ValidationError, TypeError, ValueError) as exc:
            await self.db_session.rollback()
            log.error("database_import_failed", error=str(exc), error_type=type(exc).__name__)
            raise ImportFailedError(str(exc)) from exc

        log.info("database_import_completed")
        return imported

    @staticmethod
    def _to_columns(spec: TableSpec, row: Any) -> dict[str, Any]:
        """Validate a camelCase row and map it to snake_case column values.

        Fields absent from the row are left out so column defaults apply.
        """
        record = spec.import_record or spec.record
        values = record.model_validate(row).model_dump(exclude_unset=True)
        for column in ("created_at", "updated_at"):
            if values.get(column) is None:
                values[column] = utcnow()
        return values

    async def _insert_rows(self, spec: TableSpec, rows: list[Any]) -> None:
        for row in rows:
            await self.db_session.execute(insert(spec.model).values(**self._to_columns(spec, row)))

    async def _upsert_by_key(self, spec: TableSpec, rows: list[Any]) -> None:
        model = spec.model
        for row in rows:
            values = self._to_columns(spec, row)
            existing = await self.db_session.scalar(
                select(model.id).where(model.key == values["key"])
            )

            if existing is not None:
                changes = {
                    column: values[column]
                    for column in ("value", "type", "description", "updated_at")
                    if column in values
                }
                await self.db_session.execute(
                    update(model).where(model.id == existing).values(**changes)
                )
                continue

            # Keep the incoming id when free, else max(id) + 1: the sequence
            # lags behind ids inserted explicitly above
            incoming_id = values.get("id")
            if incoming_id is None or await self.db_session.scalar(
                select(model.id).where(model.id == incoming_id)
            ) is not None:
                max_id = await self.db_session.scalar(select(func.max(model.id)))
                values["id"] = (max_id or 0) + 1
            await self.db_session.execute(insert(model).values(**values))

    async def _reset_sequence(self, spec: TableSpec) -> None:
        """Move the table's id sequence to its current maximum id."""
        max_id = await self.db_session.scalar(select(func.max(spec.model.id)))
        if not max_id:
            return

        connection = await self.db_session.connection()
        dialect = connection.dialect.name

        if dialect == "postgresql":
            await self.db_session.execute(
                text("SELECT setval(pg_get_serial_sequence(:table, 'id'), :max_id)"),
                {"table": spec.name, "max_id": max_id},
            )
            logger.debug("sequence_reset", table=spec.name, max_id=max_id)
        else:
            # SQLite (without AUTOINCREMENT) already allocates max(rowid) + 1
            logger.debug("sequence_reset_skipped", table=spec.name, dialect=dialect)
