"""AI-generated image library endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from mirotrak.models.library import (
    AiPhotoBulkCreate,
    AiPhotoBulkDelete,
    AiPhotoCreate,
    AiPhotoDB,
    AiPhotoFields,
    AiPhotoRead,
)
from mirotrak.services.database import get_db_session

router = APIRouter(prefix="/api/ai-photos", tags=["ai-photos"])

logger = structlog.get_logger(__name__)

PHOTO_NOT_FOUND = "Photo non trouvée"


def serialize_photo(photo: AiPhotoDB) -> dict:
    return AiPhotoRead.model_validate(photo).model_dump(mode="json", by_alias=True)


async def _get_photo_or_404(db: AsyncSession, photo_id: int) -> AiPhotoDB:
    photo = await db.get(AiPhotoDB, photo_id)
    if photo is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PHOTO_NOT_FOUND)
    return photo


@router.get("")
async def list_photos(db: AsyncSession = Depends(get_db_session)) -> list[dict]:
    """List every photo, newest first."""
    result = await db.scalars(
        select(AiPhotoDB).order_by(AiPhotoDB.created_at.desc(), AiPhotoDB.id.desc())
    )
    return [serialize_photo(photo) for photo in result]


@router.get("/{photo_id}")
async def show_photo(photo_id: int, db: AsyncSession = Depends(get_db_session)) -> dict:
    return serialize_photo(await _get_photo_or_404(db, photo_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def store_photo(payload: AiPhotoCreate, db: AsyncSession = Depends(get_db_session)) -> dict:
    photo = AiPhotoDB(**payload.model_dump())
    db.add(photo)
    await db.commit()
    return serialize_photo(photo)


@router.put("/{photo_id}")
async def update_photo(
    photo_id: int,
    payload: AiPhotoFields,
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Merge the provided fields into a photo.

    ``name`` and ``imageUrl`` cannot be cleared; optional prompts can.
    """
    photo = await _get_photo_or_404(db, photo_id)

    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field in ("name", "image_url"):
            continue
        setattr(photo, field, value)
    await db.commit()

    return serialize_photo(photo)


@router.delete("/{photo_id}")
async def destroy_photo(photo_id: int, db: AsyncSession = Depends(get_db_session)) -> dict:
    photo = await _get_photo_or_404(db, photo_id)
    await db.delete(photo)
    await db.commit()
    return {"message": "Photo supprimée avec succès"}


@router.post("/bulk-delete")
async def bulk_delete_photos(
    payload: AiPhotoBulkDelete,
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Delete several photos at once; unknown ids are ignored."""
    if not payload.ids:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Aucun ID fourni")

    result = await db.execute(delete(AiPhotoDB).where(AiPhotoDB.id.in_(payload.ids)))
    await db.commit()

    logger.info("ai_photos_bulk_deleted", requested=len(payload.ids), deleted=result.rowcount)
    return {"message": "Photos supprimées avec succès"}


@router.post("/bulk-store", status_code=status.HTTP_201_CREATED)
async def bulk_store_photos(
    payload: AiPhotoBulkCreate,
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Create several photos in one transaction.

    Raises:
        HTTPException: 400 if no photo is provided
    """
    if not payload.photos:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Aucune photo fournie")

    photos = [AiPhotoDB(**item.model_dump()) for item in payload.photos]
    db.add_all(photos)
    await db.commit()

    return {
        "message": f"{len(photos)} photo(s) créée(s) avec succès",
        "photos": [serialize_photo(photo) for photo in photos],
    }
