"""Submission API schemas."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import ConfigDict, Field, field_validator

from app.schemas.common import ApiModel


class SubmissionStatus(str, Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"


class SignatureKind(str, Enum):
    STUDENT = "student"
    SUPERVISOR = "supervisor"
    PRE_APPROVED = "pre-approved"


class CreateSubmissionRequest(ApiModel):
    model_config = ConfigDict(extra="ignore")

    org_name: str | None = Field(default=None, max_length=200)
    hours: float | None = Field(default=None, gt=0)
    submission_date: datetime | None = None
    description: str | None = Field(default=None, max_length=1000)
    status: SubmissionStatus | None = None

    @field_validator("submission_date", mode="before")
    @classmethod
    def _parse_iso8601(cls, value: object) -> datetime | None:
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError("submissionDate must be an ISO 8601 string")
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValueError("submissionDate must be an ISO 8601 string") from exc
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed.astimezone(UTC)


class Submission(ApiModel):
    id: str
    student_id: str
    org_name: str | None = None
    hours: float | None = None
    submission_date: datetime
    description: str | None = None
    status: SubmissionStatus
    signature_key: str | None = None
    supervisor_signature_key: str | None = None
    pre_approved_signature_key: str | None = None
    created_at: datetime


class SignatureUploadUrl(ApiModel):
    upload_url: str
    key: str


class SaveSignatureRequest(ApiModel):
    model_config = ConfigDict(extra="forbid")

    signature_key: str = Field(min_length=1)

    @field_validator("signature_key")
    @classmethod
    def _strip_key(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("signatureKey must not be blank")
        return value


class SignatureViewUrl(ApiModel):
    view_url: str | None = None
