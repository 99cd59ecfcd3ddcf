"""Application exception types."""

from typing import Any

from app.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error that maps directly to contract error payloads."""

    def __init__(self, status_code: int, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        self.status_code = status_code
        self.payload = ErrorResponse(code=code, message=message, details=details)
        super().__init__(message)


def unauthorized_error(message: str = "Authentication required") -> ApiError:
    return ApiError(status_code=401, code="UNAUTHORIZED", message=message)


def forbidden_error() -> ApiError:
    return ApiError(status_code=403, code="FORBIDDEN", message="You do not have access to this resource")


def not_found_error(message: str = "Resource not found") -> ApiError:
    return ApiError(status_code=404, code="RESOURCE_NOT_FOUND", message=message)


def conflict_error(code: str, message: str, *, field: str) -> ApiError:
    return ApiError(status_code=409, code=code, message=message, details={"field": field})


def internal_error() -> ApiError:
    """Generic failure; the cause is logged server-side and never returned to the caller."""
    return ApiError(status_code=500, code="INTERNAL_ERROR", message="An internal error occurred")


__all__ = [
    "ApiError",
    "conflict_error",
    "forbidden_error",
    "internal_error",
    "not_found_error",
    "unauthorized_error",
]
