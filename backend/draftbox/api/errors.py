"""Centralized error handlers mapping service errors to JSON responses."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from draftbox.core.exceptions import (
    CycleDetectedError,
    DraftboxError,
    InvalidArgumentError,
    InvalidReferenceError,
    NotFoundError,
    UnexpectedError,
)
from draftbox.core.logging import get_logger
from draftbox.schemas.common import ErrorResponse

logger = get_logger(__name__)

STATUS_BY_ERROR: dict[type[DraftboxError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidReferenceError: status.HTTP_400_BAD_REQUEST,
    InvalidArgumentError: status.HTTP_400_BAD_REQUEST,
    CycleDetectedError: status.HTTP_409_CONFLICT,
}


def _json_error(err: DraftboxError, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=err.message, code=err.code).model_dump(),
    )


def status_for(err: DraftboxError) -> int:
    """Get the HTTP status for a service error."""
    for error_type, status_code in STATUS_BY_ERROR.items():
        if isinstance(err, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_error_handlers(app: FastAPI) -> None:
    """Register error handlers on the FastAPI app."""

    @app.exception_handler(DraftboxError)
    async def draftbox_error(request: Request, err: DraftboxError) -> JSONResponse:
        status_code = status_for(err)
        log = logger.error if status_code >= 500 else logger.info
        log(
            "request_failed",
            path=request.url.path,
            method=request.method,
            code=err.code,
            error=err.message,
        )
        return _json_error(err, status_code)

    @app.exception_handler(SQLAlchemyError)
    async def storage_error(request: Request, err: SQLAlchemyError) -> JSONResponse:
        logger.error(
            "storage_error",
            path=request.url.path,
            method=request.method,
            error=str(err),
        )
        return _json_error(UnexpectedError(), status.HTTP_500_INTERNAL_SERVER_ERROR)
