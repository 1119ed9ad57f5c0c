"""Folder API endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from draftbox.db import get_db
from draftbox.schemas.folder import (
    FolderCreate,
    FolderDeleteResponse,
    FolderListItem,
    FolderResponse,
    FolderUpdate,
)
from draftbox.services.folder import FolderService

router = APIRouter(prefix="/folders", tags=["folders"])


@router.get("", response_model=list[FolderListItem])
async def list_folders(
    db: AsyncSession = Depends(get_db),
) -> list[FolderListItem]:
    """Get all folders as a flat list; clients build the tree from parent_id."""
    folders = await FolderService(db).list_folders()
    return [FolderListItem(**f) for f in folders]


@router.post("", response_model=FolderResponse, status_code=status.HTTP_201_CREATED)
async def create_folder(
    body: FolderCreate,
    db: AsyncSession = Depends(get_db),
) -> FolderResponse:
    """Create a folder, at the root or under a parent."""
    folder = await FolderService(db).create_folder(name=body.name, parent_id=body.parent_id)
    return FolderResponse.model_validate(folder)


@router.get("/{folder_id}", response_model=FolderResponse)
async def get_folder(
    folder_id: str,
    db: AsyncSession = Depends(get_db),
) -> FolderResponse:
    """Get a single folder."""
    folder = await FolderService(db).get_folder(folder_id)
    return FolderResponse.model_validate(folder)


@router.put("/{folder_id}", response_model=FolderResponse)
async def update_folder(
    folder_id: str,
    body: FolderUpdate,
    db: AsyncSession = Depends(get_db),
) -> FolderResponse:
    """Rename and/or move a folder."""
    changes: dict[str, Any] = {
        field: getattr(body, field) for field in body.model_fields_set
    }
    folder = await FolderService(db).update_folder(folder_id, **changes)
    return FolderResponse.model_validate(folder)


@router.delete("/{folder_id}", response_model=FolderDeleteResponse)
async def delete_folder(
    folder_id: str,
    db: AsyncSession = Depends(get_db),
) -> FolderDeleteResponse:
    """Delete a folder: designs in its subtree get unfiled, subfolders are deleted."""
    counts = await FolderService(db).delete_folder(folder_id)
    return FolderDeleteResponse(**counts)
