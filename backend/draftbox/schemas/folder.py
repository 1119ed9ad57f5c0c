"""Pydantic schemas for Folder API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class FolderCreate(BaseModel):
    """Request body for creating a folder."""

    name: Optional[str] = None
    parent_id: Optional[str] = None


class FolderUpdate(BaseModel):
    """Request body for renaming and/or moving a folder.

    Only fields present in the request body are applied; an explicit null
    parent_id moves the folder to the root.
    """

    name: Optional[str] = None
    parent_id: Optional[str] = None


class FolderResponse(BaseModel):
    """Folder response schema."""

    model_config = {"from_attributes": True}

    id: str
    name: str
    parent_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class FolderListItem(FolderResponse):
    """Folder with direct (non-recursive) child counts."""

    design_count: int = 0
    subfolder_count: int = 0


class FolderDeleteResponse(BaseModel):
    """Result of deleting a folder subtree."""

    success: bool = True
    unfiled_designs: int
    deleted_folders: int
