"""Uniform response envelope: ``{success, data?, message?, error?, meta?}``."""

from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse
from sqlmodel import SQLModel

from foome.models.api import ErrorBody, PageMeta
from foome.models.database import User
from foome.types import ErrorCode


def ok(
    data: Any = None,
    message: str | None = None,
    meta: PageMeta | None = None,
    **extra: Any,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    if meta is not None:
        body["meta"] = meta.model_dump(by_alias=True)
    body.update(extra)
    return body


def error_response(
    status_code: int,
    message: str,
    code: ErrorCode | None = None,
    details: Any = None,
    extra: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    error = ErrorBody(message=message, details=details, code=code)
    body: dict[str, Any] = {
        "success": False,
        "error": error.model_dump(mode="json", exclude_none=True),
    }
    if extra:
        body.update(extra)
    return JSONResponse(body, status_code=status_code, headers=headers)


def dump(row: SQLModel, **kwargs: Any) -> dict[str, Any]:
    """Serialize a table row to JSON-safe primitives."""
    return row.model_dump(mode="json", **kwargs)


def dump_user(user: User) -> dict[str, Any]:
    return dump(user, exclude={"password_hash"})
