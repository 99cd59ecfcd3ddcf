"""API error response schemas."""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class FieldConflictDetails(BaseModel):
    field: str


class ConflictError(BaseModel):
    code: str
    message: str
    details: FieldConflictDetails


class ValidationErrorItem(BaseModel):
    loc: list[str | int]
    msg: str
    type: str
