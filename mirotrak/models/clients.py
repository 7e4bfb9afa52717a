"""Client and subscription data models."""

from datetime import date
from typing import Any

from pydantic import Field, field_validator
from sqlalchemy import (
    JSON,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from mirotrak.models.base import Base, CamelModel, RecordModel, TimestampMixin

DEFAULT_COUNTRY = "France"
DEFAULT_CLIENT_STATUS = "En cours"
DEFAULT_PRIORITY = "Moyenne"
DEFAULT_SUBSCRIPTION_STATUS = "Actif"


def _coerce_date(value: Any) -> Any:
    """Accept full ISO timestamps where a calendar date is expected."""
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        return value[:10]
    return value


# ========== SQLAlchemy ORM Models ==========


class ClientDB(TimestampMixin, Base):
    """SQLAlchemy model for clients table."""

    __tablename__ = "clients"

    client_name = Column(String(255), nullable=False)
    contact_person = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    company = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    country = Column(String(100), nullable=True, default=DEFAULT_COUNTRY)
    project_type = Column(String(100), nullable=True)
    technologies = Column(Text, nullable=True)
    budget = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    status = Column(String(50), nullable=True, default=DEFAULT_CLIENT_STATUS)
    progress = Column(Integer, nullable=True, default=0)
    notes = Column(Text, nullable=True)
    website = Column(String(255), nullable=True)
    logo = Column(Text, nullable=True)
    priority = Column(String(50), nullable=True, default=DEFAULT_PRIORITY)
    deadline = Column(Date, nullable=True)
    attachments = Column(JSON, nullable=True, default=list)
    todos = Column(JSON, nullable=True, default=list)

    __table_args__ = (Index("idx_clients_created", "created_at"),)


class SubscriptionDB(TimestampMixin, Base):
    """SQLAlchemy model for subscriptions table."""

    __tablename__ = "subscriptions"

    client_id = Column(
        Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    cost = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    billing_cycle = Column(String(50), nullable=False)
    status = Column(String(50), nullable=False, default=DEFAULT_SUBSCRIPTION_STATUS)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    client = relationship("ClientDB", lazy="raise")


# ========== Pydantic Models ==========


class ClientFields(CamelModel):
    """Editable client fields, all optional so partial updates can be merged."""

    client_name: str | None = None
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    country: str | None = None
    project_type: str | None = None
    technologies: str | None = None
    budget: float | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: str | None = None
    progress: int | None = Field(None, ge=0, le=100)
    notes: str | None = None
    website: str | None = None
    logo: str | None = None
    priority: str | None = None
    deadline: date | None = None
    attachments: list[Any] | None = None
    todos: list[Any] | None = None

    @field_validator("start_date", "end_date", "deadline", mode="before")
    @classmethod
    def coerce_dates(cls, v: Any) -> Any:
        """Truncate timestamps to their date part."""
        return _coerce_date(v)


class ClientRead(ClientFields, RecordModel):
    """Client as returned by the API and stored in exports."""

    client_name: str


class SubscriptionFields(CamelModel):
    """Editable subscription fields."""

    client_id: int | None = None
    name: str | None = None
    cost: float | None = None
    billing_cycle: str | None = None
    status: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    notes: str | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def coerce_dates(cls, v: Any) -> Any:
        """Truncate timestamps to their date part."""
        return _coerce_date(v)


class SubscriptionCreate(SubscriptionFields):
    """Subscription creation payload."""

    client_id: int
    name: str = Field(..., min_length=1, max_length=255)
    cost: float
    billing_cycle: str = Field(..., min_length=1, max_length=50)
    start_date: date


class SubscriptionRead(SubscriptionFields, RecordModel):
    """Subscription row as stored in exports."""

    client_id: int
    name: str


class SubscriptionWithClient(SubscriptionRead):
    """Subscription enriched with the owning client's display name."""

    client_name: str | None = None
