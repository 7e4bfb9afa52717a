"""Client document endpoints: text preview, PDF download and email draft."""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from mirotrak.api.routes.clients import get_client_or_404, serialize_client
from mirotrak.models.base import CamelModel
from mirotrak.models.settings import PdfTemplate
from mirotrak.services.database import get_db_session
from mirotrak.services.documents import DocumentRenderer
from mirotrak.services.settings_store import get_email_template, get_pdf_template

router = APIRouter(prefix="/api/documents", tags=["documents"])


class DocumentRequest(CamelModel):
    """Request schema naming the client a document is generated for."""

    client_id: int = Field(..., description="Client the document is addressed to")


async def _load_template(db: AsyncSession, doc_type: str) -> PdfTemplate:
    template = await get_pdf_template(db, doc_type)
    if template is None or not template.enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template non trouvé")
    return template


@router.post("/{doc_type}/preview")
async def preview_document(
    doc_type: str,
    request: DocumentRequest,
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Render a template as text for one client.

    Raises:
        HTTPException: 404 for an unknown or disabled template, or an unknown client
    """
    template = await _load_template(db, doc_type)
    client = serialize_client(await get_client_or_404(db, request.client_id))

    document = DocumentRenderer().render(doc_type, template, client)
    return {"type": document.type, "name": document.name, "content": document.content}


@router.post("/{doc_type}/pdf")
async def download_document(
    doc_type: str,
    request: DocumentRequest,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """Render a template for one client as a PDF download."""
    template = await _load_template(db, doc_type)
    client = serialize_client(await get_client_or_404(db, request.client_id))

    renderer = DocumentRenderer()
    document = renderer.render(doc_type, template, client)
    return Response(
        content=renderer.build_pdf(document, client),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{renderer.filename(doc_type, client)}"'
        },
    )


@router.post("/{doc_type}/email")
async def draft_email(
    doc_type: str,
    request: DocumentRequest,
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Prepare the email accompanying a document."""
    template = await get_email_template(db, doc_type)
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Template d'email non trouvé"
        )
    client = serialize_client(await get_client_or_404(db, request.client_id))

    return DocumentRenderer().build_email(doc_type, template, client)
