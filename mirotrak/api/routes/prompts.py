"""Prompt library endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from mirotrak.models.library import PromptCreate, PromptDB, PromptRead, PromptUpdate
from mirotrak.services.database import get_db_session

router = APIRouter(prefix="/api/prompts", tags=["prompts"])


def serialize_prompt(prompt: PromptDB) -> dict:
    return PromptRead.model_validate(prompt).model_dump(mode="json", by_alias=True)


async def _get_prompt_or_404(db: AsyncSession, prompt_id: int) -> PromptDB:
    prompt = await db.get(PromptDB, prompt_id)
    if prompt is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Prompt non trouvé")
    return prompt


@router.get("")
async def list_prompts(
    search: str | None = None,
    category: str | None = None,
    db: AsyncSession = Depends(get_db_session),
) -> list[dict]:
    """List prompts, newest first.

    Args:
        search: Case-insensitive match on title or content
        category: Exact category match
        db: Database session

    Returns:
        Matching prompts
    """
    query = select(PromptDB).order_by(PromptDB.created_at.desc(), PromptDB.id.desc())

    if search:
        pattern = f"%{search}%"
        query = query.where(or_(PromptDB.title.ilike(pattern), PromptDB.content.ilike(pattern)))

    if category:
        query = query.where(PromptDB.category == category)

    result = await db.scalars(query)
    return [serialize_prompt(prompt) for prompt in result]


@router.get("/categories")
async def list_categories(db: AsyncSession = Depends(get_db_session)) -> list[str]:
    """Distinct prompt categories in ascending order."""
    result = await db.scalars(select(PromptDB.category).distinct().order_by(PromptDB.category.asc()))
    return list(result)


@router.get("/{prompt_id}")
async def show_prompt(prompt_id: int, db: AsyncSession = Depends(get_db_session)) -> dict:
    return serialize_prompt(await _get_prompt_or_404(db, prompt_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def store_prompt(payload: PromptCreate, db: AsyncSession = Depends(get_db_session)) -> dict:
    prompt = PromptDB(**payload.model_dump())
    db.add(prompt)
    await db.commit()
    return serialize_prompt(prompt)


@router.put("/{prompt_id}")
async def update_prompt(
    prompt_id: int,
    payload: PromptUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Merge the provided fields into a prompt; explicit nulls are ignored."""
    prompt = await _get_prompt_or_404(db, prompt_id)

    for field, value in payload.model_dump(exclude_none=True).items():
        setattr(prompt, field, value)
    await db.commit()

    return serialize_prompt(prompt)


@router.delete("/{prompt_id}")
async def destroy_prompt(prompt_id: int, db: AsyncSession = Depends(get_db_session)) -> dict:
    prompt = await _get_prompt_or_404(db, prompt_id)
    await db.delete(prompt)
    await db.commit()
    return {"message": "Prompt supprimé avec succès"}
