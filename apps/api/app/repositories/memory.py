"""In-memory store used for local development and tests."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from app.repositories.base import DuplicateRecordError, SignatureField, SubmissionRecord, UserRecord
from app.schemas.submission import SubmissionStatus
from app.schemas.user import UserRole


@dataclass(slots=True)
class InMemoryStore:
    """Simple, deterministic persistence layer with the same uniqueness rules as the SQL schema.

    Records are copied on the way in and out so callers cannot mutate stored
    state without going through the store.
    """

    users: dict[str, UserRecord] = field(default_factory=dict)
    submissions: dict[str, SubmissionRecord] = field(default_factory=dict)
    user_write_count: int = 0
    submission_write_count: int = 0
    # One-shot failpoints.
    competing_user_insert: dict[str, Any] | None = None
    user_lookup_failure_message: str | None = None

    def get_user(self, user_id: str) -> UserRecord | None:
        record = self.users.get(user_id)
        return replace(record) if record is not None else None

    def get_user_by_auth_provider_id(self, auth_provider_id: str) -> UserRecord | None:
        if self.user_lookup_failure_message is not None:
            message = self.user_lookup_failure_message
            self.user_lookup_failure_message = None
            raise RuntimeError(message)

        for record in self.users.values():
            if record.auth_provider_id == auth_provider_id:
                return replace(record)
        return None

    def get_user_by_email(self, email: str) -> UserRecord | None:
        for record in self.users.values():
            if record.email == email:
                return replace(record)
        return None

    def create_user(
        self,
        *,
        auth_provider_id: str,
        email: str,
        name: str,
        role: UserRole = UserRole.STUDENT,
        school_id: str | None = None,
        oen: str | None = None,
    ) -> UserRecord:
        if self.competing_user_insert is not None:
            # Another request commits between this caller's lookup and its insert.
            competing = self.competing_user_insert
            self.competing_user_insert = None
            self.create_user(**competing)

        for existing in self.users.values():
            if existing.auth_provider_id == auth_provider_id:
                raise DuplicateRecordError("auth_provider_id")
            if existing.email == email:
                raise DuplicateRecordError("email")

        record = UserRecord(
            id=str(uuid4()),
            auth_provider_id=auth_provider_id,
            email=email,
            name=name,
            role=role,
            created_at=datetime.now(UTC),
            school_id=school_id,
            oen=oen,
        )
        self.users[record.id] = record
        self.user_write_count += 1
        return replace(record)

    def update_user_profile(self, *, user_id: str, oen: str, school_id: str) -> UserRecord | None:
        record = self.users.get(user_id)
        if record is None:
            return None

        record.oen = oen
        record.school_id = school_id
        self.user_write_count += 1
        return replace(record)

    def create_submission(
        self,
        *,
        student_id: str,
        submission_date: datetime,
        status: SubmissionStatus,
        org_name: str | None = None,
        hours: float | None = None,
        description: str | None = None,
    ) -> SubmissionRecord:
        record = SubmissionRecord(
            id=str(uuid4()),
            student_id=student_id,
            submission_date=submission_date,
            status=status,
            created_at=datetime.now(UTC),
            org_name=org_name,
            hours=hours,
            description=description,
        )
        self.submissions[record.id] = record
        self.submission_write_count += 1
        return replace(record)

    def get_submission(self, submission_id: str) -> SubmissionRecord | None:
        record = self.submissions.get(submission_id)
        return replace(record) if record is not None else None

    def list_submissions_for_student(self, student_id: str) -> list[SubmissionRecord]:
        records = [replace(record) for record in self.submissions.values() if record.student_id == student_id]
        records.sort(key=lambda record: (record.submission_date, record.created_at), reverse=True)
        return records

    def set_submission_signature_key(
        self,
        *,
        submission_id: str,
        field: SignatureField,
        key: str,
    ) -> SubmissionRecord | None:
        record = self.submissions.get(submission_id)
        if record is None:
            return None

        setattr(record, field, key)
        self.submission_write_count += 1
        return replace(record)
