"""Key/value settings and the document templates stored inside them."""

from pydantic import BaseModel, Field
from sqlalchemy import Column, String, Text

from mirotrak.models.base import Base, CamelModel, RecordModel, TimestampMixin

PDF_TEMPLATES_KEY = "pdf_templates"
EMAIL_TEMPLATES_KEY = "email_templates"
DEFAULT_SETTING_TYPE = "string"


class SettingDB(TimestampMixin, Base):
    """SQLAlchemy model for settings table."""

    __tablename__ = "settings"

    key = Column(String(100), nullable=False, unique=True)
    value = Column(Text, nullable=False)
    type = Column(String(50), nullable=True, default=DEFAULT_SETTING_TYPE)
    description = Column(Text, nullable=True)


class SettingWrite(CamelModel):
    """Setting upsert payload, keyed by ``key``."""

    key: str = Field(..., min_length=1, max_length=100)
    value: str
    type: str | None = None
    description: str | None = None


class SettingBulkWrite(CamelModel):
    """Payload for bulk settings upsert."""

    settings: list[SettingWrite] = Field(default_factory=list)


class SettingRead(RecordModel):
    """Setting as returned by the API and stored in exports."""

    key: str
    value: str
    type: str | None = None
    description: str | None = None


class SettingImport(SettingRead):
    """Setting row from a snapshot; matched by key, so the id may be absent."""

    id: int | None = None


# ========== Document templates ==========


class PdfTemplate(BaseModel):
    """Printable document template."""

    name: str
    content: str
    enabled: bool = True


class PdfTemplateWrite(BaseModel):
    """Single template upsert payload."""

    type: str = Field(..., min_length=1)
    name: str
    content: str
    enabled: bool | None = None


class PdfTemplateBulkWrite(BaseModel):
    """Whole template map replacement payload."""

    templates: dict[str, PdfTemplate]


class EmailTemplate(BaseModel):
    """Email template sent alongside a generated document."""

    subject: str
    body: str
