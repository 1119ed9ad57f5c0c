"""Search API endpoint."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from draftbox.db import get_db
from draftbox.schemas.design import SearchResult
from draftbox.services.design import split_tag_names
from draftbox.services.search import SearchService

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=list[SearchResult])
async def search_designs(
    q: Optional[str] = Query(None, description="Case-insensitive substring of the design name"),
    tags: Optional[str] = Query(
        None, description="Comma-separated tag names; designs must carry ALL of them"
    ),
    db: AsyncSession = Depends(get_db),
) -> list[SearchResult]:
    """Search designs by name and/or tags across all folders."""
    rows = await SearchService(db).search(q=q, tag_names=split_tag_names(tags))
    return [SearchResult.from_row(design, folder_name) for design, folder_name in rows]
