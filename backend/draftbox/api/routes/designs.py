"""Design API endpoints."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from draftbox.core.logging import get_logger
from draftbox.db import get_db
from draftbox.schemas.common import SuccessResponse
from draftbox.schemas.design import (
    DesignCreate,
    DesignMove,
    DesignResponse,
    DesignTagAdd,
    DesignUpdate,
)
from draftbox.services.design import DesignService, split_tag_names
from draftbox.services.tag import TagService

logger = get_logger(__name__)

router = APIRouter(prefix="/designs", tags=["designs"])


@router.get("", response_model=list[DesignResponse])
async def list_designs(
    folder_id: Optional[str] = Query(None, description="Only designs filed in this folder"),
    unfiled: bool = Query(False, description="Only designs with no folder"),
    tag: Optional[str] = Query(
        None, description="Comma-separated tag names; matches designs with ANY of them"
    ),
    db: AsyncSession = Depends(get_db),
) -> list[DesignResponse]:
    """List designs for the dashboard, most recently updated first."""
    designs = await DesignService(db).list_designs(
        folder_id=folder_id,
        unfiled_only=unfiled,
        tag_names=split_tag_names(tag),
    )
    return [DesignResponse.from_model(d) for d in designs]


@router.post("", response_model=DesignResponse, status_code=status.HTTP_201_CREATED)
async def create_design(
    body: DesignCreate,
    db: AsyncSession = Depends(get_db),
) -> DesignResponse:
    """Create a new design, empty or from a client-supplied document."""
    design = await DesignService(db).create_design(
        name=body.name,
        folder_id=body.folder_id,
        document=body.document,
    )
    return DesignResponse.from_model(design)


@router.get("/{design_id}", response_model=DesignResponse)
async def get_design(
    design_id: str,
    db: AsyncSession = Depends(get_db),
) -> DesignResponse:
    """Get a single design with its tags."""
    design = await DesignService(db).get_design(design_id)
    return DesignResponse.from_model(design)


@router.put("/{design_id}", response_model=DesignResponse)
async def update_design(
    design_id: str,
    body: DesignUpdate,
    db: AsyncSession = Depends(get_db),
) -> DesignResponse:
    """Partially update a design (used by both manual save and autosave)."""
    changes: dict[str, Any] = {
        field: getattr(body, field) for field in body.model_fields_set
    }
    design = await DesignService(db).update_design(design_id, **changes)
    return DesignResponse.from_model(design)


@router.delete("/{design_id}", response_model=SuccessResponse)
async def delete_design(
    design_id: str,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    """Delete a design."""
    await DesignService(db).delete_design(design_id)
    return SuccessResponse()


@router.put("/{design_id}/move", response_model=DesignResponse)
async def move_design(
    design_id: str,
    body: DesignMove,
    db: AsyncSession = Depends(get_db),
) -> DesignResponse:
    """Move a design to a different folder (null folder_id unfiles it)."""
    design = await DesignService(db).move_design(design_id, body.folder_id)
    return DesignResponse.from_model(design)


@router.post("/{design_id}/tags", response_model=SuccessResponse)
async def add_tag(
    design_id: str,
    body: DesignTagAdd,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    """Add a tag to a design. Adding a tag twice succeeds."""
    await TagService(db).add_tag_to_design(design_id, body.tag_id)
    return SuccessResponse()


@router.delete("/{design_id}/tags/{tag_id}", response_model=SuccessResponse)
async def remove_tag(
    design_id: str,
    tag_id: str,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    """Remove a tag from a design. Removing an absent tag succeeds."""
    await TagService(db).remove_tag_from_design(design_id, tag_id)
    return SuccessResponse()
