"""Persistence records and the store interface shared by every backend."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Protocol

from app.schemas.submission import SubmissionStatus
from app.schemas.user import UserRole

SignatureField = Literal["signature_key", "supervisor_signature_key", "pre_approved_signature_key"]


class DuplicateRecordError(Exception):
    """Raised when an insert violates a uniqueness constraint."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Duplicate value for unique field '{field}'")


@dataclass(slots=True)
class UserRecord:
    id: str
    auth_provider_id: str
    email: str
    name: str
    role: UserRole
    created_at: datetime
    school_id: str | None = None
    oen: str | None = None


@dataclass(slots=True)
class SubmissionRecord:
    id: str
    student_id: str
    submission_date: datetime
    status: SubmissionStatus
    created_at: datetime
    org_name: str | None = None
    hours: float | None = None
    description: str | None = None
    signature_key: str | None = None
    supervisor_signature_key: str | None = None
    pre_approved_signature_key: str | None = None


class RecordStore(Protocol):
    """Operations the services need from the relational store."""

    def get_user(self, user_id: str) -> UserRecord | None: ...

    def get_user_by_auth_provider_id(self, auth_provider_id: str) -> UserRecord | None: ...

    def get_user_by_email(self, email: str) -> UserRecord | None: ...

    def create_user(
        self,
        *,
        auth_provider_id: str,
        email: str,
        name: str,
        role: UserRole = UserRole.STUDENT,
        school_id: str | None = None,
        oen: str | None = None,
    ) -> UserRecord: ...

    def update_user_profile(self, *, user_id: str, oen: str, school_id: str) -> UserRecord | None: ...

    def create_submission(
        self,
        *,
        student_id: str,
        submission_date: datetime,
        status: SubmissionStatus,
        org_name: str | None = None,
        hours: float | None = None,
        description: str | None = None,
    ) -> SubmissionRecord: ...

    def get_submission(self, submission_id: str) -> SubmissionRecord | None: ...

    def list_submissions_for_student(self, student_id: str) -> list[SubmissionRecord]: ...

    def set_submission_signature_key(
        self,
        *,
        submission_id: str,
        field: SignatureField,
        key: str,
    ) -> SubmissionRecord | None: ...
