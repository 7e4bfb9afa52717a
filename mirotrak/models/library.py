"""Prompt library and AI image data models."""

from pydantic import Field, field_validator
from sqlalchemy import Column, Index, String, Text

from mirotrak.models.base import Base, CamelModel, RecordModel, TimestampMixin


class PromptDB(TimestampMixin, Base):
    """SQLAlchemy model for prompts table."""

    __tablename__ = "prompts"

    title = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    content = Column(Text, nullable=False)


class AiPhotoDB(TimestampMixin, Base):
    """SQLAlchemy model for ai_photos table."""

    __tablename__ = "ai_photos"

    name = Column(String(255), nullable=False)
    image_prompt = Column(Text, nullable=True)
    video_prompt = Column(Text, nullable=True)
    # URL or base64 data URI
    image_url = Column(Text, nullable=False)

    __table_args__ = (Index("idx_ai_photos_created", "created_at"),)


# ========== Pydantic Models ==========


class PromptCreate(CamelModel):
    """Prompt creation payload."""

    title: str = Field(..., min_length=2, max_length=255)
    category: str = Field(..., min_length=2, max_length=100)
    content: str = Field(..., min_length=5)

    @field_validator("title", "category", "content", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip() if isinstance(v, str) else v


class PromptUpdate(PromptCreate):
    """Partial prompt update."""

    title: str | None = Field(None, min_length=2, max_length=255)
    category: str | None = Field(None, min_length=2, max_length=100)
    content: str | None = Field(None, min_length=5)


class PromptRead(RecordModel):
    """Prompt as returned by the API and stored in exports."""

    title: str
    category: str
    content: str


class AiPhotoFields(CamelModel):
    """AI photo fields shared by creation, update and read."""

    name: str | None = None
    image_prompt: str | None = None
    video_prompt: str | None = None
    image_url: str | None = None

    @field_validator("image_prompt", "video_prompt", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Optional prompts are stored as null rather than empty strings."""
        return v or None


class AiPhotoCreate(AiPhotoFields):
    """AI photo creation payload."""

    name: str = Field(..., min_length=1, max_length=255)
    image_url: str = Field(..., min_length=1)


class AiPhotoRead(AiPhotoFields, RecordModel):
    """AI photo as returned by the API and stored in exports."""

    name: str
    image_url: str


class AiPhotoBulkCreate(CamelModel):
    """Payload for bulk photo creation."""

    photos: list[AiPhotoCreate] = Field(default_factory=list)


class AiPhotoBulkDelete(CamelModel):
    """Payload for bulk photo deletion."""

    ids: list[int] = Field(default_factory=list)
