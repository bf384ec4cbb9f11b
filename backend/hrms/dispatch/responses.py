"""
Uniform JSON envelope for every API response.

success:   {"success": true, "data": ..., "message"?: ...}
paginated: {"success": true, "data": [...], "pagination": {...}}
error:     {"success": false, "error": {"code", "message", "details"?}}
"""

from __future__ import annotations

import json
import math
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from starlette.responses import Response

from hrms.core.errors import STATUS_BY_CODE, ApiError, ErrorCode

JSON_MEDIA_TYPE = "application/json; charset=utf-8"


class ApiResponse:
    def __init__(self, status_code: int, body: Optional[dict[str, Any]] = None):
        self.status_code = status_code
        self.body = body if body is not None else {}
        self.headers: dict[str, str] = {}
        # Set by handlers that start or end a session; applied by the HTTP layer.
        self.session_id: Optional[str] = None
        self.clear_session = False

    def __repr__(self) -> str:
        return f"ApiResponse(status_code={self.status_code!r}, body={self.body!r})"

    @property
    def is_error(self) -> bool:
        return self.body.get("success") is False

    @property
    def error_code(self) -> Optional[str]:
        if not self.is_error:
            return None
        return self.body["error"]["code"]

    @classmethod
    def success(cls, data: Any = None, message: Optional[str] = None, status_code: int = 200) -> "ApiResponse":
        body: dict[str, Any] = {"success": True, "data": data}
        if message is not None:
            body["message"] = message
        return cls(status_code, body)

    @classmethod
    def created(cls, data: Any, message: str = "Resource created successfully") -> "ApiResponse":
        return cls.success(data, message, status_code=201)

    @classmethod
    def no_content(cls) -> "ApiResponse":
        return cls(204, {})

    @classmethod
    def paginated(cls, data: list, total: int, page: int, per_page: int) -> "ApiResponse":
        total_pages = math.ceil(total / per_page) if per_page > 0 else 0
        return cls(
            200,
            {
                "success": True,
                "data": data,
                "pagination": {
                    "total": total,
                    "page": page,
                    "per_page": per_page,
                    "total_pages": total_pages,
                },
            },
        )

    @classmethod
    def error(
        cls,
        status_code: int,
        code: ErrorCode | str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> "ApiResponse":
        code_value = code.value if isinstance(code, ErrorCode) else code
        error: dict[str, Any] = {"code": code_value, "message": message}
        if details is not None:
            error["details"] = details
        response = cls(status_code, {"success": False, "error": error})
        response.headers["X-Error-Code"] = code_value
        return response

    @classmethod
    def from_exception(cls, exc: ApiError) -> "ApiResponse":
        return cls.error(exc.status_code, exc.code, exc.message, exc.details)

    @classmethod
    def bad_request(cls, message: str, details: Optional[dict[str, Any]] = None) -> "ApiResponse":
        return cls.error(STATUS_BY_CODE[ErrorCode.BAD_REQUEST], ErrorCode.BAD_REQUEST, message, details)

    @classmethod
    def unauthorized(cls, message: str = "Authentication required") -> "ApiResponse":
        return cls.error(STATUS_BY_CODE[ErrorCode.UNAUTHORIZED], ErrorCode.UNAUTHORIZED, message)

    @classmethod
    def forbidden(cls, message: str = "Access denied") -> "ApiResponse":
        return cls.error(STATUS_BY_CODE[ErrorCode.FORBIDDEN], ErrorCode.FORBIDDEN, message)

    @classmethod
    def not_found(cls, message: str = "Resource not found") -> "ApiResponse":
        return cls.error(STATUS_BY_CODE[ErrorCode.NOT_FOUND], ErrorCode.NOT_FOUND, message)

    @classmethod
    def conflict(cls, message: str) -> "ApiResponse":
        return cls.error(STATUS_BY_CODE[ErrorCode.CONFLICT], ErrorCode.CONFLICT, message)

    @classmethod
    def validation_error(cls, errors: dict[str, str]) -> "ApiResponse":
        return cls.error(
            STATUS_BY_CODE[ErrorCode.VALIDATION_ERROR],
            ErrorCode.VALIDATION_ERROR,
            "Validation failed",
            errors,
        )

    @classmethod
    def server_error(cls, message: str = "An internal server error occurred") -> "ApiResponse":
        return cls.error(STATUS_BY_CODE[ErrorCode.SERVER_ERROR], ErrorCode.SERVER_ERROR, message)

    def with_header(self, name: str, value: str) -> "ApiResponse":
        self.headers[name] = value
        return self

    def render(self) -> bytes:
        if self.status_code == 204 or not self.body:
            return b""
        return json.dumps(
            jsonable_encoder(self.body),
            ensure_ascii=False,
            separators=(",", ":"),
        ).encode("utf-8")

    def to_starlette(self) -> Response:
        return Response(
            content=self.render(),
            status_code=self.status_code,
            headers=dict(self.headers),
            media_type=JSON_MEDIA_TYPE,
        )
