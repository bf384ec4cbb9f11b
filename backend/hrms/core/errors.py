"""
Error taxonomy shared by the dispatch core and the business layer.

Inside the middleware chain rejections are returned as responses; business
code raises these exceptions and the HTTP entry point maps them to the same
envelope.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    SERVER_ERROR = "SERVER_ERROR"


STATUS_BY_CODE = {
    ErrorCode.BAD_REQUEST: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.SERVER_ERROR: 500,
}


class ApiError(Exception):
    """Base class for errors that carry their own envelope."""

    code: ErrorCode = ErrorCode.SERVER_ERROR
    default_message = "An internal server error occurred"

    def __init__(self, message: Optional[str] = None, *, details: Optional[dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_CODE[self.code]

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class BadRequest(ApiError):
    code = ErrorCode.BAD_REQUEST
    default_message = "Bad request"


class Unauthorized(ApiError):
    code = ErrorCode.UNAUTHORIZED
    default_message = "Authentication required"


class NotFound(ApiError):
    code = ErrorCode.NOT_FOUND
    default_message = "Resource not found"


class Conflict(ApiError):
    code = ErrorCode.CONFLICT
    default_message = "Conflict"


class ValidationFailed(ApiError):
    code = ErrorCode.VALIDATION_ERROR
    default_message = "Validation failed"

    def __init__(self, details: dict[str, str], message: Optional[str] = None):
        super().__init__(message, details=details)


class ServerError(ApiError):
    code = ErrorCode.SERVER_ERROR
