"""Translate DomainError kinds into HTTP responses.

The body is the error's own ``{"code", "context"}`` map so clients can key
on the stable code rather than on the status.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.atrium.core.errors import (
    ConflictError,
    DomainError,
    InvalidStateError,
    NotFoundError,
    ValidationFailureError,
)

logger = structlog.get_logger(__name__)

STATUS_BY_ERROR: dict[type[DomainError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidStateError: status.HTTP_409_CONFLICT,
    ConflictError: status.HTTP_409_CONFLICT,
    ValidationFailureError: 422,
}


def status_for(exc: DomainError) -> int:
    for error_type, code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_for(exc)
    logger.info(
        "request.domain_error",
        code=exc.code,
        status_code=status_code,
        path=request.url.path,
    )
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
