"""Exception handlers that render every failure as the error envelope."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from foome.exceptions import FoomeError
from foome.types import ErrorCode
from foome.web.responses import error_response

if TYPE_CHECKING:
    from fastapi import FastAPI, Request
    from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)

_HTTP_CODES = {
    401: ErrorCode.AUTHENTICATION_ERROR,
    403: ErrorCode.AUTHORIZATION_ERROR,
    404: ErrorCode.RESOURCE_NOT_FOUND,
    409: ErrorCode.RESOURCE_CONFLICT,
}


def internal_error(request: Request, exc: BaseException) -> JSONResponse:
    """Log ``exc`` under a short tag and return a sanitized 500 envelope."""
    error_tag = uuid.uuid4().hex[:12]
    logger.error(
        "internal_error",
        error_tag=error_tag,
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    return error_response(
        500,
        "Internal server error",
        ErrorCode.INTERNAL_ERROR,
        details={"error_tag": error_tag},
    )


async def _foome_error(request: Request, exc: FoomeError) -> JSONResponse:
    if exc.status_code >= 500:
        return internal_error(request, exc)
    return error_response(exc.status_code, exc.message, exc.code, exc.details, exc.extra)


async def _request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    logger.info("request_validation_failed", path=request.url.path, errors=len(details))
    return error_response(422, "Invalid request data", ErrorCode.VALIDATION_ERROR, details)


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _HTTP_CODES.get(exc.status_code, ErrorCode.VALIDATION_ERROR)
    if exc.status_code >= 500:
        code = ErrorCode.INTERNAL_ERROR
    return error_response(
        exc.status_code,
        str(exc.detail),
        code,
        headers=getattr(exc, "headers", None),
    )


async def _database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    return internal_error(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FoomeError, _foome_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_error)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _database_error)  # type: ignore[arg-type]
