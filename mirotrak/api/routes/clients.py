"""Client management endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mirotrak.models.clients import ClientDB, ClientFields, ClientRead
from mirotrak.services.database import get_db_session

router = APIRouter(prefix="/api/clients", tags=["clients"])

logger = structlog.get_logger(__name__)

CLIENT_NOT_FOUND = "Client non trouvé"


def serialize_client(client: ClientDB) -> dict:
    return ClientRead.model_validate(client).model_dump(mode="json", by_alias=True)


async def get_client_or_404(db: AsyncSession, client_id: int) -> ClientDB:
    """Load a client by id.

    Raises:
        HTTPException: 404 if no such client
    """
    client = await db.get(ClientDB, client_id)
    if client is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=CLIENT_NOT_FOUND)
    return client


async def _ensure_unique(db: AsyncSession, client_name: str, email: str | None) -> None:
    """Reject a new client whose name or email is already taken.

    Raises:
        HTTPException: 409 with the conflicting field and the existing client's id
    """
    existing = await db.scalar(
        select(ClientDB).where(ClientDB.client_name == client_name).limit(1)
    )
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "Un client avec ce nom existe déjà",
                "field": "clientName",
                "existingClientId": existing.id,
            },
        )

    if email and email.strip():
        existing = await db.scalar(select(ClientDB).where(ClientDB.email == email).limit(1))
        if existing is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={
                    "message": "Un client avec cet email existe déjà",
                    "field": "email",
                    "existingClientId": existing.id,
                },
            )


@router.get("")
async def list_clients(db: AsyncSession = Depends(get_db_session)) -> list[dict]:
    """List every client, newest first."""
    result = await db.scalars(
        select(ClientDB).order_by(ClientDB.created_at.desc(), ClientDB.id.desc())
    )
    return [serialize_client(client) for client in result]


@router.get("/{client_id}")
async def show_client(client_id: int, db: AsyncSession = Depends(get_db_session)) -> dict:
    """Get one client."""
    return serialize_client(await get_client_or_404(db, client_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def store_client(
    payload: ClientFields,
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Create a client.

    Args:
        payload: Client fields; ``clientName`` is required
        db: Database session

    Returns:
        The created client

    Raises:
        HTTPException: 400 on a blank name, 409 on a duplicate name or email
    """
    client_name = (payload.client_name or "").strip()
    if not client_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Le nom du client est obligatoire", "field": "clientName"},
        )

    await _ensure_unique(db, client_name, payload.email)

    data = payload.model_dump(exclude_none=True)
    data["client_name"] = client_name
    client = ClientDB(**data)
    db.add(client)
    await db.commit()

    logger.info("client_created", client_id=client.id)
    return serialize_client(client)


@router.put("/{client_id}")
async def update_client(
    client_id: int,
    payload: ClientFields,
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Merge the provided fields into an existing client."""
    client = await get_client_or_404(db, client_id)

    changes = payload.model_dump(exclude_unset=True)
    if "client_name" in changes and not (changes["client_name"] or "").strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Le nom du client est obligatoire", "field": "clientName"},
        )

    for field, value in changes.items():
        setattr(client, field, value)
    await db.commit()

    return serialize_client(client)


@router.delete("/{client_id}")
async def destroy_client(client_id: int, db: AsyncSession = Depends(get_db_session)) -> dict:
    """Delete a client and, through the foreign key, its subscriptions."""
    client = await get_client_or_404(db, client_id)
    await db.delete(client)
    await db.commit()

    logger.info("client_deleted", client_id=client_id)
    return {"message": "Client supprimé avec succès"}
