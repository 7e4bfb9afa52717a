"""Calendar event data models."""

from datetime import datetime

from pydantic import Field
from sqlalchemy import Boolean, Column, DateTime, Index, String, Text, false

from mirotrak.models.base import Base, CamelModel, RecordModel, TimestampMixin

DEFAULT_EVENT_COLOR = "#58a6ff"


class EventDB(TimestampMixin, Base):
    """SQLAlchemy model for events table."""

    __tablename__ = "events"

    title = Column(String(255), nullable=False)
    start = Column(DateTime(timezone=True), nullable=False)
    end = Column(DateTime(timezone=True), nullable=True)
    background_color = Column(String(50), nullable=True, default=DEFAULT_EVENT_COLOR)
    border_color = Column(String(50), nullable=True, default=DEFAULT_EVENT_COLOR)
    client = Column(String(255), nullable=True)
    type = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    all_day = Column(Boolean, nullable=False, default=False, server_default=false())

    __table_args__ = (Index("idx_events_start", "start"),)


class EventFields(CamelModel):
    """Editable event fields."""

    title: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    background_color: str | None = None
    border_color: str | None = None
    client: str | None = None
    type: str | None = None
    description: str | None = None
    all_day: bool | None = None


class EventCreate(EventFields):
    """Event creation payload."""

    title: str = Field(..., min_length=1, max_length=255)
    start: datetime


class EventRead(EventFields, RecordModel):
    """Event as returned by the API and stored in exports."""

    title: str
    start: datetime
