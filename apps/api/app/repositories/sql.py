"""Relational store backed by SQLModel.

The unique indexes on ``users.auth_provider_id`` and ``users.email`` are the
single source of truth for concurrent provisioning: two requests racing to
create the same identity both attempt the insert and exactly one commits.
"""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Field, Session, SQLModel, col, create_engine, select

from app.repositories.base import DuplicateRecordError, SignatureField, SubmissionRecord, UserRecord
from app.schemas.submission import SubmissionStatus
from app.schemas.user import UserRole


def _utcnow() -> datetime:
    return datetime.now(UTC)


class UserRow(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    auth_provider_id: str = Field(unique=True, index=True)
    email: str = Field(unique=True, index=True)
    name: str
    role: str = Field(default=UserRole.STUDENT.value)
    school_id: str | None = None
    oen: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class SubmissionRow(SQLModel, table=True):
    __tablename__ = "submissions"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    student_id: str = Field(foreign_key="users.id", index=True)
    org_name: str | None = Field(default=None, max_length=200)
    hours: float | None = None
    submission_date: datetime
    description: str | None = Field(default=None, max_length=1000)
    status: str = Field(default=SubmissionStatus.DRAFT.value)
    signature_key: str | None = None
    supervisor_signature_key: str | None = None
    pre_approved_signature_key: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


def _to_user_record(row: UserRow) -> UserRecord:
    return UserRecord(
        id=row.id,
        auth_provider_id=row.auth_provider_id,
        email=row.email,
        name=row.name,
        role=UserRole(row.role),
        created_at=row.created_at,
        school_id=row.school_id,
        oen=row.oen,
    )


def _to_submission_record(row: SubmissionRow) -> SubmissionRecord:
    return SubmissionRecord(
        id=row.id,
        student_id=row.student_id,
        submission_date=row.submission_date,
        status=SubmissionStatus(row.status),
        created_at=row.created_at,
        org_name=row.org_name,
        hours=row.hours,
        description=row.description,
        signature_key=row.signature_key,
        supervisor_signature_key=row.supervisor_signature_key,
        pre_approved_signature_key=row.pre_approved_signature_key,
    )


def build_engine(database_url: str) -> Engine:
    return create_engine(database_url, echo=False, pool_pre_ping=True)


class SqlStore:
    """SQLModel implementation of the record store; one short session per operation."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def create_tables(self) -> None:
        """Create missing tables; run once at application startup."""
        SQLModel.metadata.create_all(self._engine)

    def get_user(self, user_id: str) -> UserRecord | None:
        with Session(self._engine) as session:
            row = session.get(UserRow, user_id)
            return _to_user_record(row) if row is not None else None

    def get_user_by_auth_provider_id(self, auth_provider_id: str) -> UserRecord | None:
        with Session(self._engine) as session:
            row = session.exec(select(UserRow).where(UserRow.auth_provider_id == auth_provider_id)).first()
            return _to_user_record(row) if row is not None else None

    def get_user_by_email(self, email: str) -> UserRecord | None:
        with Session(self._engine) as session:
            row = session.exec(select(UserRow).where(UserRow.email == email)).first()
            return _to_user_record(row) if row is not None else None

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
        row = UserRow(
            auth_provider_id=auth_provider_id,
            email=email,
            name=name,
            role=role.value,
            school_id=school_id,
            oen=oen,
        )
        with Session(self._engine) as session:
            session.add(row)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateRecordError(self._colliding_user_field(session, auth_provider_id)) from exc
            session.refresh(row)
            return _to_user_record(row)

    @staticmethod
    def _colliding_user_field(session: Session, auth_provider_id: str) -> str:
        by_identity = session.exec(select(UserRow).where(UserRow.auth_provider_id == auth_provider_id)).first()
        if by_identity is not None:
            return "auth_provider_id"
        return "email"

    def update_user_profile(self, *, user_id: str, oen: str, school_id: str) -> UserRecord | None:
        with Session(self._engine) as session:
            row = session.get(UserRow, user_id)
            if row is None:
                return None

            row.oen = oen
            row.school_id = school_id
            session.add(row)
            session.commit()
            session.refresh(row)
            return _to_user_record(row)

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
        row = SubmissionRow(
            student_id=student_id,
            submission_date=submission_date,
            status=status.value,
            org_name=org_name,
            hours=hours,
            description=description,
        )
        with Session(self._engine) as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return _to_submission_record(row)

    def get_submission(self, submission_id: str) -> SubmissionRecord | None:
        with Session(self._engine) as session:
            row = session.get(SubmissionRow, submission_id)
            return _to_submission_record(row) if row is not None else None

    def list_submissions_for_student(self, student_id: str) -> list[SubmissionRecord]:
        statement = (
            select(SubmissionRow)
            .where(SubmissionRow.student_id == student_id)
            .order_by(col(SubmissionRow.submission_date).desc(), col(SubmissionRow.created_at).desc())
        )
        with Session(self._engine) as session:
            return [_to_submission_record(row) for row in session.exec(statement).all()]

    def set_submission_signature_key(
        self,
        *,
        submission_id: str,
        field: SignatureField,
        key: str,
    ) -> SubmissionRecord | None:
        with Session(self._engine) as session:
            row = session.get(SubmissionRow, submission_id)
            if row is None:
                return None

            setattr(row, field, key)
            session.add(row)
            session.commit()
            session.refresh(row)
            return _to_submission_record(row)
