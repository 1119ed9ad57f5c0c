"""Shared response schemas."""

from __future__ import annotations

from pydantic import BaseModel


class SuccessResponse(BaseModel):
    """Generic acknowledgement."""

    success: bool = True


class ErrorResponse(BaseModel):
    """Error body returned for failed data operations."""

    detail: str
    code: str
