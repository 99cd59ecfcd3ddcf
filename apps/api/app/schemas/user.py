"""User API schemas."""

from datetime import datetime
from enum import Enum

from pydantic import ConfigDict, EmailStr, Field, field_validator

from app.schemas.common import ApiModel


class UserRole(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"


class User(ApiModel):
    id: str
    auth_provider_id: str
    email: str
    name: str
    role: UserRole
    school_id: str | None = None
    oen: str | None = None
    created_at: datetime


class CreateUserRequest(ApiModel):
    """Body of the unauthenticated bootstrap route."""

    model_config = ConfigDict(extra="ignore")

    email: EmailStr
    auth_provider_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    role: UserRole = UserRole.STUDENT
    school_id: str | None = None
    oen: str | None = None

    @field_validator("auth_provider_id", "name")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class UpdateUserProfileRequest(ApiModel):
    model_config = ConfigDict(extra="ignore")

    oen: str = Field(min_length=1)
    school_id: str = Field(min_length=1)
