"""Database export/import endpoints.

These endpoints read or rewrite whole tables, so they also sit behind the
``heavy`` rate limit profile.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mirotrak.api.middleware.rate_limiter import check_heavy_rate_limit
from mirotrak.services.database import get_db_session
from mirotrak.services.database_transfer import (
    DatabaseTransfer,
    ImportFailedError,
    ImportFormatError,
    UnsupportedTableError,
)

router = APIRouter(
    prefix="/api/database",
    tags=["database"],
    dependencies=[Depends(check_heavy_rate_limit)],
)

logger = structlog.get_logger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


def _unsupported_table() -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Table non supportée")


@router.get("/tables")
async def list_tables(db: AsyncSession = Depends(get_db_session)) -> list[dict]:
    """List exportable tables with their labels and row counts."""
    try:
        return await DatabaseTransfer(db).list_tables()
    except SQLAlchemyError as exc:
        logger.error("database_tables_failed", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erreur lors de la récupération des tables",
        ) from exc


@router.get("/export/json")
async def export_json(db: AsyncSession = Depends(get_db_session)) -> Response:
    """Download the whole database as a JSON snapshot."""
    try:
        filename, content = await DatabaseTransfer(db).export_json()
    except SQLAlchemyError as exc:
        logger.error("database_export_failed", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erreur lors de l'export de la base de données",
        ) from exc

    return Response(
        content=content,
        media_type="application/json",
        headers=_attachment(filename),
    )


@router.get("/export/csv/{table}")
async def export_csv(table: str, db: AsyncSession = Depends(get_db_session)) -> Response:
    """Download one table as CSV.

    Raises:
        HTTPException: 400 for a table that cannot be exported
    """
    try:
        filename, content = await DatabaseTransfer(db).export_csv(table)
    except UnsupportedTableError as exc:
        raise _unsupported_table() from exc
    except SQLAlchemyError as exc:
        logger.error("database_csv_export_failed", table=table, error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erreur lors de l'export CSV",
        ) from exc

    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers=_attachment(filename),
    )


@router.get("/export/excel/{table}")
async def export_excel(table: str, db: AsyncSession = Depends(get_db_session)) -> Response:
    """Download one table as an XLSX workbook."""
    try:
        filename, content = await DatabaseTransfer(db).export_excel(table)
    except UnsupportedTableError as exc:
        raise _unsupported_table() from exc
    except SQLAlchemyError as exc:
        logger.error("database_excel_export_failed", table=table, error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erreur lors de l'export Excel",
        ) from exc

    return Response(content=content, media_type=XLSX_MEDIA_TYPE, headers=_attachment(filename))


@router.post("/import/json")
async def import_json(
    payload: Any = Body(None),
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Replace the dashboard tables with an exported snapshot.

    Args:
        payload: Snapshot document as produced by ``/export/json``
        db: Database session

    Returns:
        Success message and the number of incoming rows per table

    Raises:
        HTTPException: 400 on a malformed snapshot or when the import is rolled back
    """
    try:
        imported = await DatabaseTransfer(db).import_snapshot(payload)
    except ImportFormatError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Format de données invalide"
        ) from exc
    except ImportFailedError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Erreur lors de l'import"
        ) from exc

    return {"message": "Import réussi", "imported": imported}
