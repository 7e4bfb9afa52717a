"""Calendar event endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mirotrak.models.calendar import EventCreate, EventDB, EventFields, EventRead
from mirotrak.services.database import get_db_session

router = APIRouter(prefix="/api/events", tags=["events"])


def serialize_event(event: EventDB) -> dict:
    return EventRead.model_validate(event).model_dump(mode="json", by_alias=True)


async def _get_event_or_404(db: AsyncSession, event_id: int) -> EventDB:
    event = await db.get(EventDB, event_id)
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Événement non trouvé")
    return event


@router.get("")
async def list_events(db: AsyncSession = Depends(get_db_session)) -> list[dict]:
    """List every event, newest first."""
    result = await db.scalars(select(EventDB).order_by(EventDB.created_at.desc(), EventDB.id.desc()))
    return [serialize_event(event) for event in result]


@router.get("/{event_id}")
async def show_event(event_id: int, db: AsyncSession = Depends(get_db_session)) -> dict:
    return serialize_event(await _get_event_or_404(db, event_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def store_event(payload: EventCreate, db: AsyncSession = Depends(get_db_session)) -> dict:
    """Create an event; colors default to the calendar accent color."""
    event = EventDB(**payload.model_dump(exclude_none=True))
    db.add(event)
    await db.commit()
    return serialize_event(event)


@router.put("/{event_id}")
async def update_event(
    event_id: int,
    payload: EventFields,
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Merge the provided fields into an event."""
    event = await _get_event_or_404(db, event_id)

    changes = payload.model_dump(exclude_unset=True)
    for required in ("title", "start"):
        if required in changes and changes[required] is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": "Données invalides", "field": required},
            )

    for field, value in changes.items():
        setattr(event, field, value)
    await db.commit()

    return serialize_event(event)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def destroy_event(event_id: int, db: AsyncSession = Depends(get_db_session)) -> Response:
    event = await _get_event_or_404(db, event_id)
    await db.delete(event)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
