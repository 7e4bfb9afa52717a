"""Shared SQLAlchemy declarative base and pydantic conventions for all models."""

from datetime import datetime, timezone

from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

# Single Base for all models to ensure metadata consistency
# and allow foreign key relationships across model modules
Base = declarative_base()


def utcnow() -> datetime:
    """Timezone-aware current time used for row timestamps."""
    return datetime.now(timezone.utc)


class TimestampMixin:
    """Integer primary key plus created/updated timestamps shared by every table."""

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )


class CamelModel(BaseModel):
    """Pydantic base exposing snake_case attributes as camelCase JSON fields."""

    class Config:
        """Pydantic configuration."""

        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class RecordModel(CamelModel):
    """Serialized table row: identity and timestamps."""

    id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
