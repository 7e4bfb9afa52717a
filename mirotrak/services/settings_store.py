"""Key/value settings access shared by the settings, template and document routes."""

import json

import structlog
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mirotrak.models.settings import (
    DEFAULT_SETTING_TYPE,
    EMAIL_TEMPLATES_KEY,
    PDF_TEMPLATES_KEY,
    EmailTemplate,
    PdfTemplate,
    SettingDB,
)

logger = structlog.get_logger(__name__)

JSON_SETTING_TYPE = "json"
PDF_TEMPLATES_DESCRIPTION = "Templates PDF personnalisables"
EMAIL_TEMPLATES_DESCRIPTION = "Templates d'emails personnalisables"


async def get_setting(db: AsyncSession, key: str) -> SettingDB | None:
    return await db.scalar(select(SettingDB).where(SettingDB.key == key))


async def upsert_setting(
    db: AsyncSession,
    key: str,
    value: str,
    type: str | None = None,
    description: str | None = None,
) -> SettingDB:
    """Create the setting or overwrite the existing row with the same key.

    The caller owns the transaction; the session is only flushed.

    Args:
        db: Database session
        key: Setting key
        value: Serialized value
        type: Value type hint, defaults to ``string``
        description: Free-form description

    Returns:
        The stored setting
    """
    setting = await get_setting(db, key)
    if setting is None:
        setting = SettingDB(key=key)
        db.add(setting)

    setting.value = value
    setting.type = type or DEFAULT_SETTING_TYPE
    setting.description = description
    await db.flush()
    return setting


async def load_json_setting(db: AsyncSession, key: str) -> dict | None:
    """Decode a JSON object stored in a setting.

    Returns:
        The decoded object, or None when the setting is absent or not a JSON object
    """
    setting = await get_setting(db, key)
    if setting is None:
        return None

    try:
        value = json.loads(setting.value)
    except json.JSONDecodeError:
        logger.warning("setting_not_json", key=key)
        return None

    return value if isinstance(value, dict) else None


async def save_json_setting(db: AsyncSession, key: str, value: dict, description: str) -> SettingDB:
    return await upsert_setting(
        db,
        key,
        json.dumps(value, ensure_ascii=False),
        type=JSON_SETTING_TYPE,
        description=description,
    )


async def load_pdf_templates(db: AsyncSession) -> dict[str, dict] | None:
    return await load_json_setting(db, PDF_TEMPLATES_KEY)


async def save_pdf_templates(db: AsyncSession, templates: dict[str, dict]) -> SettingDB:
    return await save_json_setting(db, PDF_TEMPLATES_KEY, templates, PDF_TEMPLATES_DESCRIPTION)


async def get_pdf_template(db: AsyncSession, doc_type: str) -> PdfTemplate | None:
    templates = await load_pdf_templates(db) or {}
    if not isinstance(templates.get(doc_type), dict):
        return None
    try:
        return PdfTemplate.model_validate(templates[doc_type])
    except ValidationError:
        logger.warning("invalid_template", key=PDF_TEMPLATES_KEY, doc_type=doc_type)
        return None


async def get_email_template(db: AsyncSession, doc_type: str) -> EmailTemplate | None:
    templates = await load_json_setting(db, EMAIL_TEMPLATES_KEY) or {}
    if not isinstance(templates.get(doc_type), dict):
        return None
    try:
        return EmailTemplate.model_validate(templates[doc_type])
    except ValidationError:
        logger.warning("invalid_template", key=EMAIL_TEMPLATES_KEY, doc_type=doc_type)
        return None
