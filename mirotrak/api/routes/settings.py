"""Key/value settings endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mirotrak.models.settings import SettingBulkWrite, SettingDB, SettingRead, SettingWrite
from mirotrak.services.database import get_db_session
from mirotrak.services.settings_store import get_setting, upsert_setting

router = APIRouter(prefix="/api/settings", tags=["settings"])

SETTING_NOT_FOUND = "Paramètre non trouvé"


def serialize_setting(setting: SettingDB) -> dict:
    return SettingRead.model_validate(setting).model_dump(mode="json", by_alias=True)


async def _all_settings(db: AsyncSession) -> list[dict]:
    result = await db.scalars(
        select(SettingDB).order_by(SettingDB.created_at.desc(), SettingDB.id.desc())
    )
    return [serialize_setting(setting) for setting in result]


@router.get("")
async def list_settings(db: AsyncSession = Depends(get_db_session)) -> list[dict]:
    return await _all_settings(db)


@router.get("/{key}")
async def show_setting(key: str, db: AsyncSession = Depends(get_db_session)) -> dict:
    setting = await get_setting(db, key)
    if setting is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=SETTING_NOT_FOUND)
    return serialize_setting(setting)


@router.post("")
async def store_setting(payload: SettingWrite, db: AsyncSession = Depends(get_db_session)) -> dict:
    """Create or overwrite the setting with the payload's key."""
    setting = await upsert_setting(
        db, payload.key, payload.value, type=payload.type, description=payload.description
    )
    await db.commit()
    return serialize_setting(setting)


@router.post("/bulk")
async def bulk_store_settings(
    payload: SettingBulkWrite,
    db: AsyncSession = Depends(get_db_session),
) -> list[dict]:
    """Upsert several settings in one transaction.

    Returns:
        Every stored setting, not only the written ones
    """
    for item in payload.settings:
        await upsert_setting(db, item.key, item.value, type=item.type, description=item.description)
    await db.commit()
    return await _all_settings(db)


@router.delete("/{key}")
async def destroy_setting(key: str, db: AsyncSession = Depends(get_db_session)) -> dict:
    setting = await get_setting(db, key)
    if setting is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=SETTING_NOT_FOUND)

    await db.delete(setting)
    await db.commit()
    return {"message": "Paramètre supprimé avec succès"}
