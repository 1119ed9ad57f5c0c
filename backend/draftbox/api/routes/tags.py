"""Tag API endpoints for managing tags."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from draftbox.db import get_db
from draftbox.schemas.common import SuccessResponse
from draftbox.schemas.tag import TagCreate, TagListItem, TagResponse, TagUpdate
from draftbox.services.tag import TagService

router = APIRouter(prefix="/tags", tags=["tags"])


# =============================================================================
# Tag Endpoints
# =============================================================================


@router.get("", response_model=list[TagListItem])
async def list_tags(
    db: AsyncSession = Depends(get_db),
) -> list[TagListItem]:
    """List all tags with usage counts."""
    tags = await TagService(db).get_all_tags()
    return [TagListItem(**t) for t in tags]


@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(
    body: TagCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> TagResponse:
    """Create a tag, or return the existing tag whose name matches ignoring case."""
    tag, created = await TagService(db).create_tag(body.name, body.color)
    if not created:
        response.status_code = status.HTTP_200_OK
    return TagResponse.model_validate(tag)


@router.put("/{tag_id}", response_model=TagResponse)
async def update_tag(
    tag_id: str,
    body: TagUpdate,
    db: AsyncSession = Depends(get_db),
) -> TagResponse:
    """Rename and/or recolor a tag."""
    changes: dict[str, Any] = {
        field: getattr(body, field) for field in body.model_fields_set
    }
    tag = await TagService(db).update_tag(tag_id, **changes)
    return TagResponse.model_validate(tag)


@router.delete("/{tag_id}", response_model=SuccessResponse)
async def delete_tag(
    tag_id: str,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    """Delete a tag and remove it from every design."""
    await TagService(db).delete_tag(tag_id)
    return SuccessResponse()
