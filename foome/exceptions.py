"""Exception hierarchy for Foome.

Every request-level error carries the HTTP status and envelope code it maps
to, so handlers only raise and the app-level exception handlers render.
"""

from __future__ import annotations

from typing import Any

from foome.types import ErrorCode


class FoomeError(Exception):
    """Base exception for all Foome errors."""

    status_code: int = 500
    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: Any = None, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.extra = extra


class ValidationError(FoomeError):
    """Malformed or missing input that passed schema parsing."""

    status_code = 400
    code = ErrorCode.VALIDATION_ERROR


class SchemaValidationError(ValidationError):
    """Request body or query failed schema validation."""

    status_code = 422


class AuthenticationError(FoomeError):
    """No session, invalid session, or wrong credentials."""

    status_code = 401
    code = ErrorCode.AUTHENTICATION_ERROR


class AuthorizationError(FoomeError):
    """The access policy denied the action."""

    status_code = 403
    code = ErrorCode.AUTHORIZATION_ERROR


class NotFoundError(FoomeError):
    """The target resource does not exist (or is outside the caller's scope)."""

    status_code = 404
    code = ErrorCode.RESOURCE_NOT_FOUND


class ConflictError(FoomeError):
    """A domain invariant or uniqueness constraint would be violated."""

    status_code = 409
    code = ErrorCode.RESOURCE_CONFLICT


class StorageError(FoomeError):
    """Raised when database or object storage operations fail."""


class ConfigError(FoomeError):
    """Raised when configuration is invalid."""
