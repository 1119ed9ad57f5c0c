"""Pydantic schemas for Design API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from draftbox.db.models import Design
from draftbox.schemas.tag import TagSummary
from draftbox.services.design import decode_document


class DesignCreate(BaseModel):
    """Request body for creating a design."""

    name: Optional[str] = None
    folder_id: Optional[str] = None
    document: Any = Field(default=None, description="Serialized editor document (any JSON value)")


class DesignUpdate(BaseModel):
    """Request body for a partial design update.

    Only fields present in the request body are applied.
    """

    name: Optional[str] = None
    document: Any = None
    rendered_cache: Optional[str] = None


class DesignMove(BaseModel):
    """Request body for moving a design; a null folder_id unfiles it."""

    folder_id: Optional[str] = None


class DesignTagAdd(BaseModel):
    """Request body for adding a tag to a design."""

    tag_id: str


class DesignResponse(BaseModel):
    """Schema for a design with its tags."""

    id: str
    name: str
    folder_id: Optional[str] = None
    document: Any = None
    rendered_cache: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    tags: list[TagSummary] = []

    @classmethod
    def from_model(cls, design: Design) -> DesignResponse:
        return cls(
            id=design.id,
            name=design.name,
            folder_id=design.folder_id,
            document=decode_document(design.document),
            rendered_cache=design.rendered_cache,
            created_at=design.created_at,
            updated_at=design.updated_at,
            tags=[TagSummary.model_validate(tag) for tag in design.tags],
        )


class SearchResult(DesignResponse):
    """Search hit, annotated with the owning folder's name."""

    folder_name: Optional[str] = None

    @classmethod
    def from_row(cls, design: Design, folder_name: str | None) -> SearchResult:
        base = DesignResponse.from_model(design)
        return cls(**base.model_dump(), folder_name=folder_name)
