"""Submission service layer."""

from datetime import UTC, datetime
import logging

from app.adapters.storage import ObjectStorage, StorageError
from app.core.logging_safety import safe_log_identifier
from app.domain.signatures import (
    SIGNATURE_CONTENT_TYPE,
    build_signature_key,
    is_in_owner_namespace,
    is_submission_signature_key,
    record_field,
)
from app.errors import ApiError, forbidden_error, internal_error, not_found_error
from app.repositories.base import RecordStore, SubmissionRecord
from app.schemas.submission import (
    CreateSubmissionRequest,
    SignatureKind,
    SignatureUploadUrl,
    SignatureViewUrl,
    Submission,
    SubmissionStatus,
)

logger = logging.getLogger(__name__)

UPLOAD_URL_TTL_SECONDS = 300
VIEW_URL_TTL_SECONDS = 60


class SubmissionService:
    """Owner-scoped submission CRUD plus the two-step signature upload flow.

    Signature bytes never pass through this service: it hands out a
    pre-signed PUT URL and a key, the client uploads straight to the bucket,
    then confirms the key so it can be stored on the submission.
    """

    def __init__(
        self,
        store: RecordStore,
        storage: ObjectStorage,
        *,
        upload_url_ttl_seconds: int = UPLOAD_URL_TTL_SECONDS,
        view_url_ttl_seconds: int = VIEW_URL_TTL_SECONDS,
    ) -> None:
        self._store = store
        self._storage = storage
        self._upload_url_ttl_seconds = upload_url_ttl_seconds
        self._view_url_ttl_seconds = view_url_ttl_seconds

    def create_submission(self, *, owner_id: str, payload: CreateSubmissionRequest) -> Submission:
        record = self._store.create_submission(
            student_id=owner_id,
            submission_date=payload.submission_date or datetime.now(UTC),
            status=payload.status or SubmissionStatus.DRAFT,
            org_name=payload.org_name,
            hours=payload.hours,
            description=payload.description,
        )
        logger.info(
            "submission.created owner_id=%s submission_id=%s status=%s",
            safe_log_identifier(owner_id, prefix="uid"),
            safe_log_identifier(record.id, prefix="sid"),
            record.status.value,
        )
        return self._to_submission(record)

    def list_submissions(self, *, owner_id: str) -> list[Submission]:
        return [self._to_submission(record) for record in self._store.list_submissions_for_student(owner_id)]

    def get_upload_url(self, *, owner_id: str, submission_id: str, kind: SignatureKind) -> SignatureUploadUrl:
        record = self._get_owned_submission(owner_id=owner_id, submission_id=submission_id)

        key = build_signature_key(kind, owner_id, record.id)
        try:
            upload_url = self._storage.presign_upload(
                key,
                content_type=SIGNATURE_CONTENT_TYPE,
                expires_in=self._upload_url_ttl_seconds,
            )
        except StorageError as exc:
            self._log_presign_failure(operation="upload", kind=kind, submission_id=record.id, exc=exc)
            raise internal_error() from exc

        logger.info(
            "signature.upload_url_issued submission_id=%s kind=%s expires_in=%s",
            safe_log_identifier(record.id, prefix="sid"),
            kind.value,
            self._upload_url_ttl_seconds,
        )
        return SignatureUploadUrl(upload_url=upload_url, key=key)

    def save_signature_key(self, *, owner_id: str, submission_id: str, key: str, kind: SignatureKind) -> Submission:
        record = self._get_owned_submission(owner_id=owner_id, submission_id=submission_id)

        if not is_submission_signature_key(kind, owner_id, record.id, key):
            raise ApiError(
                status_code=422,
                code="INVALID_SIGNATURE_KEY",
                message="Signature key was not issued for this submission",
                details={"kind": kind.value},
            )

        updated = self._store.set_submission_signature_key(
            submission_id=record.id,
            field=record_field(kind),
            key=key,
        )
        if updated is None:
            raise not_found_error()

        logger.info(
            "signature.saved submission_id=%s kind=%s",
            safe_log_identifier(record.id, prefix="sid"),
            kind.value,
        )
        return self._to_submission(updated)

    def get_view_url(self, *, owner_id: str, submission_id: str, kind: SignatureKind) -> SignatureViewUrl:
        record = self._get_owned_submission(owner_id=owner_id, submission_id=submission_id)

        key = getattr(record, record_field(kind))
        if not key:
            return SignatureViewUrl(view_url=None)

        if not is_in_owner_namespace(kind, owner_id, key):
            logger.error(
                "signature.view_rejected submission_id=%s kind=%s reason=namespace_mismatch",
                safe_log_identifier(record.id, prefix="sid"),
                kind.value,
            )
            raise internal_error()

        try:
            view_url = self._storage.presign_download(key, expires_in=self._view_url_ttl_seconds)
        except StorageError as exc:
            self._log_presign_failure(operation="download", kind=kind, submission_id=record.id, exc=exc)
            raise internal_error() from exc

        return SignatureViewUrl(view_url=view_url)

    def _get_owned_submission(self, *, owner_id: str, submission_id: str) -> SubmissionRecord:
        record = self._store.get_submission(submission_id)
        if record is None:
            raise not_found_error()
        if record.student_id != owner_id:
            logger.warning(
                "submission.access_denied owner_id=%s submission_id=%s",
                safe_log_identifier(owner_id, prefix="uid"),
                safe_log_identifier(submission_id, prefix="sid"),
            )
            raise forbidden_error()
        return record

    @staticmethod
    def _log_presign_failure(*, operation: str, kind: SignatureKind, submission_id: str, exc: Exception) -> None:
        logger.error(
            "storage.presign_failed operation=%s submission_id=%s kind=%s error=%s",
            operation,
            safe_log_identifier(submission_id, prefix="sid"),
            kind.value,
            type(exc).__name__,
        )

    @staticmethod
    def _to_submission(record: SubmissionRecord) -> Submission:
        return Submission(
            id=record.id,
            student_id=record.student_id,
            org_name=record.org_name,
            hours=record.hours,
            submission_date=record.submission_date,
            description=record.description,
            status=record.status,
            signature_key=record.signature_key,
            supervisor_signature_key=record.supervisor_signature_key,
            pre_approved_signature_key=record.pre_approved_signature_key,
            created_at=record.created_at,
        )
