"""User directory service layer."""

import logging

from app.core.logging_safety import safe_email_domain, safe_log_identifier
from app.errors import ApiError, conflict_error, internal_error, not_found_error
from app.repositories.base import DuplicateRecordError, RecordStore, UserRecord
from app.schemas.user import CreateUserRequest, User, UserRole

logger = logging.getLogger(__name__)

_DUPLICATE_FIELD_ERRORS: dict[str, tuple[str, str, str]] = {
    "email": ("EMAIL_ALREADY_EXISTS", "User with this email already exists", "email"),
    "auth_provider_id": (
        "AUTH_PROVIDER_ID_ALREADY_EXISTS",
        "User with this authProviderId already exists",
        "authProviderId",
    ),
}


def _duplicate_error(field: str) -> ApiError:
    code, message, wire_field = _DUPLICATE_FIELD_ERRORS[field]
    return conflict_error(code, message, field=wire_field)


def normalize_email(email: str) -> str:
    """Lowercase the domain and keep the local part, as ``EmailStr`` does on the bootstrap route."""
    local_part, separator, domain = email.strip().rpartition("@")
    if not separator:
        return email.strip()
    return f"{local_part}@{domain.lower()}"


class UserService:
    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def get_user(self, *, user_id: str) -> User:
        record = self._store.get_user(user_id)
        if record is None:
            raise not_found_error("User not found")
        return self._to_user(record)

    def find_or_create(
        self,
        *,
        auth_provider_id: str,
        email: str,
        name: str,
        school_id: str | None = None,
        oen: str | None = None,
    ) -> User:
        """Return the user bound to ``auth_provider_id``, provisioning it on first sight.

        An existing user is returned unchanged. When a concurrent request wins
        the insert, the loser re-reads: the same identity converges on the
        winner's row, while an email already bound to a different identity is
        reported as a conflict instead of being merged.
        """
        email = normalize_email(email)
        existing = self._store.get_user_by_auth_provider_id(auth_provider_id)
        if existing is not None:
            return self._to_user(existing)

        safe_subject_id = safe_log_identifier(auth_provider_id, prefix="sub")
        try:
            record = self._store.create_user(
                auth_provider_id=auth_provider_id,
                email=email,
                name=name,
                school_id=school_id,
                oen=oen,
            )
        except DuplicateRecordError as exc:
            return self._resolve_after_duplicate(
                auth_provider_id=auth_provider_id,
                email=email,
                duplicate_field=exc.field,
            )

        logger.info(
            "user.provisioned subject_id=%s user_id=%s email_domain=%s",
            safe_subject_id,
            safe_log_identifier(record.id, prefix="uid"),
            safe_email_domain(email),
        )
        return self._to_user(record)

    def _resolve_after_duplicate(self, *, auth_provider_id: str, email: str, duplicate_field: str) -> User:
        safe_subject_id = safe_log_identifier(auth_provider_id, prefix="sub")

        winner = self._store.get_user_by_auth_provider_id(auth_provider_id)
        if winner is not None:
            logger.info("user.provision_converged subject_id=%s field=%s", safe_subject_id, duplicate_field)
            return self._to_user(winner)

        by_email = self._store.get_user_by_email(email)
        if by_email is not None:
            logger.warning(
                "user.identity_conflict subject_id=%s bound_subject_id=%s email_domain=%s",
                safe_subject_id,
                safe_log_identifier(by_email.auth_provider_id, prefix="sub"),
                safe_email_domain(email),
            )
            raise conflict_error(
                "IDENTITY_CONFLICT",
                "Email is already bound to a different identity",
                field="email",
            )

        # The colliding row vanished between the insert and the re-read.
        logger.error(
            "user.provision_unresolved subject_id=%s field=%s",
            safe_subject_id,
            duplicate_field,
        )
        raise internal_error()

    def create_user(self, payload: CreateUserRequest) -> User:
        email = normalize_email(str(payload.email))
        if self._store.get_user_by_email(email) is not None:
            raise _duplicate_error("email")
        if self._store.get_user_by_auth_provider_id(payload.auth_provider_id) is not None:
            raise _duplicate_error("auth_provider_id")

        try:
            record = self._store.create_user(
                auth_provider_id=payload.auth_provider_id,
                email=email,
                name=payload.name,
                role=payload.role,
                school_id=payload.school_id,
                oen=payload.oen,
            )
        except DuplicateRecordError as exc:
            raise _duplicate_error(exc.field) from exc

        logger.info(
            "user.created user_id=%s role=%s email_domain=%s",
            safe_log_identifier(record.id, prefix="uid"),
            record.role.value,
            safe_email_domain(email),
        )
        return self._to_user(record)

    def update_profile(self, *, user_id: str, oen: str, school_id: str) -> User:
        record = self._store.update_user_profile(user_id=user_id, oen=oen, school_id=school_id)
        if record is None:
            raise not_found_error("User not found")
        return self._to_user(record)

    @staticmethod
    def _to_user(record: UserRecord) -> User:
        return User(
            id=record.id,
            auth_provider_id=record.auth_provider_id,
            email=record.email,
            name=record.name,
            role=UserRole(record.role),
            school_id=record.school_id,
            oen=record.oen,
            created_at=record.created_at,
        )
