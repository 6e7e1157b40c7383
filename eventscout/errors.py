"""
eventscout.errors — Domain Error Taxonomy
==========================================

Services raise these; the API layer maps each to an HTTP status and a
``{"error": message}`` body.  Messages are user-safe: they never carry
SQL text or stack traces.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION = "VALIDATION"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"


class EventScoutError(Exception):
    """Base domain error with code, user-safe message and HTTP status."""

    code: ErrorCode = ErrorCode.VALIDATION
    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(EventScoutError):
    """Malformed or missing input."""

    code = ErrorCode.VALIDATION
    status_code = 400


class Unauthorized(EventScoutError):
    """Missing, invalid or expired credential."""

    code = ErrorCode.UNAUTHORIZED
    status_code = 401


class Forbidden(EventScoutError):
    """Authenticated, but not allowed to touch this resource."""

    code = ErrorCode.FORBIDDEN
    status_code = 403


class NotFound(EventScoutError):
    code = ErrorCode.NOT_FOUND
    status_code = 404


class Conflict(EventScoutError):
    """Duplicate unique key, already bookmarked/registered, or capacity reached."""

    code = ErrorCode.CONFLICT
    status_code = 400
