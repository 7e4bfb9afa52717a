"""Subscription endpoints.

Every subscription is returned with its owning client's ``clientName``.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mirotrak.models.clients import (
    ClientDB,
    SubscriptionCreate,
    SubscriptionDB,
    SubscriptionFields,
    SubscriptionWithClient,
)
from mirotrak.services.database import get_db_session

router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])

SUBSCRIPTION_NOT_FOUND = "Abonnement non trouvé"

# NOT NULL columns, keyed by their JSON field name
REQUIRED_FIELDS = {
    "name": "name",
    "cost": "cost",
    "billing_cycle": "billingCycle",
    "status": "status",
    "start_date": "startDate",
}


def serialize_subscription(subscription: SubscriptionDB) -> dict:
    data = SubscriptionWithClient.model_validate(subscription, from_attributes=True)
    data.client_name = subscription.client.client_name if subscription.client else None
    return data.model_dump(mode="json", by_alias=True)


def _with_client():
    return select(SubscriptionDB).options(selectinload(SubscriptionDB.client))


def _newest_first(query):
    return query.order_by(SubscriptionDB.created_at.desc(), SubscriptionDB.id.desc())


async def _load(db: AsyncSession, subscription_id: int) -> SubscriptionDB:
    subscription = await db.scalar(
        _with_client().where(SubscriptionDB.id == subscription_id).execution_options(
            populate_existing=True
        )
    )
    if subscription is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=SUBSCRIPTION_NOT_FOUND
        )
    return subscription


async def _require_client(db: AsyncSession, client_id: int | None) -> None:
    if client_id is None or await db.get(ClientDB, client_id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Client introuvable", "field": "clientId"},
        )


@router.get("")
async def list_subscriptions(db: AsyncSession = Depends(get_db_session)) -> list[dict]:
    """List every subscription, newest first."""
    result = await db.scalars(_newest_first(_with_client()))
    return [serialize_subscription(subscription) for subscription in result]


@router.get("/client/{client_id}")
async def list_client_subscriptions(
    client_id: int, db: AsyncSession = Depends(get_db_session)
) -> list[dict]:
    """List the subscriptions of one client."""
    result = await db.scalars(
        _newest_first(_with_client().where(SubscriptionDB.client_id == client_id))
    )
    return [serialize_subscription(subscription) for subscription in result]


@router.get("/{subscription_id}")
async def show_subscription(
    subscription_id: int, db: AsyncSession = Depends(get_db_session)
) -> dict:
    """Get one subscription."""
    return serialize_subscription(await _load(db, subscription_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def store_subscription(
    payload: SubscriptionCreate,
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Create a subscription for an existing client.

    Raises:
        HTTPException: 400 if the client does not exist
    """
    await _require_client(db, payload.client_id)

    subscription = SubscriptionDB(**payload.model_dump(exclude_none=True))
    db.add(subscription)
    await db.commit()

    return serialize_subscription(await _load(db, subscription.id))


@router.put("/{subscription_id}")
async def update_subscription(
    subscription_id: int,
    payload: SubscriptionFields,
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Merge the provided fields into a subscription."""
    subscription = await _load(db, subscription_id)

    changes = payload.model_dump(exclude_unset=True)
    for column, field in REQUIRED_FIELDS.items():
        if column in changes and changes[column] is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": "Données invalides", "field": field},
            )
    if "client_id" in changes:
        await _require_client(db, changes["client_id"])

    for field, value in changes.items():
        setattr(subscription, field, value)
    await db.commit()

    return serialize_subscription(await _load(db, subscription_id))


@router.delete("/{subscription_id}")
async def destroy_subscription(
    subscription_id: int, db: AsyncSession = Depends(get_db_session)
) -> dict:
    """Delete a subscription."""
    subscription = await _load(db, subscription_id)
    await db.delete(subscription)
    await db.commit()
    return {"message": "Abonnement supprimé avec succès"}
