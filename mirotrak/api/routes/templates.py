"""PDF template endpoints.

Templates live as one JSON object in the ``pdf_templates`` setting, keyed by
document type.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from mirotrak.models.settings import PdfTemplate, PdfTemplateBulkWrite, PdfTemplateWrite
from mirotrak.services.database import get_db_session
from mirotrak.services.settings_store import load_pdf_templates, save_pdf_templates

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.get("")
async def list_templates(db: AsyncSession = Depends(get_db_session)) -> dict:
    templates = await load_pdf_templates(db)
    if templates is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Templates non trouvés")
    return templates


@router.get("/{doc_type}")
async def show_template(doc_type: str, db: AsyncSession = Depends(get_db_session)) -> dict:
    templates = await load_pdf_templates(db) or {}
    if not templates.get(doc_type):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template non trouvé")
    return templates[doc_type]


@router.post("")
async def store_template(
    payload: PdfTemplateWrite,
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Create or replace one template; ``enabled`` defaults to true."""
    templates = await load_pdf_templates(db) or {}
    templates[payload.type] = PdfTemplate(
        name=payload.name,
        content=payload.content,
        enabled=True if payload.enabled is None else payload.enabled,
    ).model_dump()

    await save_pdf_templates(db, templates)
    await db.commit()
    return {"message": "Template sauvegardé avec succès", "templates": templates}


@router.post("/bulk")
async def bulk_store_templates(
    payload: PdfTemplateBulkWrite,
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Replace the whole template map."""
    templates = {doc_type: template.model_dump() for doc_type, template in payload.templates.items()}

    await save_pdf_templates(db, templates)
    await db.commit()
    return {"message": "Templates sauvegardés avec succès", "templates": templates}
