"""Pydantic schemas for Tag API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class TagSummary(BaseModel):
    """Tag as embedded in a design."""

    model_config = {"from_attributes": True}

    id: str
    name: str
    color: str


class TagCreate(BaseModel):
    """Request body for creating a tag."""

    name: str
    color: Optional[str] = None


class TagUpdate(BaseModel):
    """Request body for renaming and/or recoloring a tag."""

    name: Optional[str] = None
    color: Optional[str] = None


class TagResponse(BaseModel):
    """Tag response schema."""

    model_config = {"from_attributes": True}

    id: str
    name: str
    color: str
    created_at: datetime


class TagListItem(TagResponse):
    """Tag with the number of designs carrying it."""

    usage_count: int = 0
