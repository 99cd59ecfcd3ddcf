"""Dependency wiring for routes."""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.adapters.auth import (
    FirebaseProfileFetcher,
    FirebaseTokenVerifier,
    MockProfileFetcher,
    MockTokenVerifier,
    ProfileFetcher,
    TokenVerifier,
)
from app.adapters.storage import InMemoryObjectStorage, ObjectStorage, S3ObjectStorage
from app.core.config import Settings, get_settings
from app.core.logging_safety import safe_log_identifier
from app.errors import unauthorized_error
from app.repositories.base import RecordStore
from app.schemas.auth import AuthPrincipal
from app.services.authentication import AuthenticationService
from app.services.submissions import SubmissionService
from app.services.users import UserService

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")
logger = logging.getLogger(__name__)


def get_request_correlation_id(request: Request) -> str:
    return request.headers.get("X-Correlation-Id") or f"req-{uuid4()}"


def get_token_verifier(settings: Annotated[Settings, Depends(get_settings)]) -> TokenVerifier:
    """Resolve provider adapter from configuration."""
    if settings.auth_provider == "firebase":
        return FirebaseTokenVerifier(
            project_id=settings.firebase_project_id,
            audience=settings.firebase_audience,
        )
    return MockTokenVerifier()


def get_profile_fetcher(settings: Annotated[Settings, Depends(get_settings)]) -> ProfileFetcher:
    if settings.auth_provider == "firebase":
        return FirebaseProfileFetcher()
    return MockProfileFetcher()


def build_object_storage(settings: Settings) -> ObjectStorage:
    if settings.storage_provider == "memory":
        return InMemoryObjectStorage()
    if not settings.s3_bucket:
        raise RuntimeError("VOLUNTEER_HOURS_S3_BUCKET must be set when storage_provider is 's3'")
    return S3ObjectStorage(
        bucket=settings.s3_bucket,
        region=settings.s3_region,
        endpoint_url=settings.s3_endpoint_url,
        access_key_id=settings.aws_access_key_id,
        secret_access_key=settings.aws_secret_access_key,
    )


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_object_storage(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> ObjectStorage:
    """Build the storage gateway on first use and reuse it for the app's lifetime."""
    storage = request.app.state.object_storage
    if storage is None:
        storage = build_object_storage(settings)
        request.app.state.object_storage = storage
    return storage


def get_user_service(store: Annotated[RecordStore, Depends(get_store)]) -> UserService:
    return UserService(store)


def get_submission_service(
    store: Annotated[RecordStore, Depends(get_store)],
    storage: Annotated[ObjectStorage, Depends(get_object_storage)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> SubmissionService:
    return SubmissionService(
        store,
        storage,
        upload_url_ttl_seconds=settings.signature_upload_url_ttl_seconds,
        view_url_ttl_seconds=settings.signature_view_url_ttl_seconds,
    )


def get_authentication_service(
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
    profiles: Annotated[ProfileFetcher, Depends(get_profile_fetcher)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> AuthenticationService:
    return AuthenticationService(verifier, profiles, users)


def get_authenticated_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    correlation_id: Annotated[str, Depends(get_request_correlation_id)],
    auth_service: Annotated[AuthenticationService, Depends(get_authentication_service)],
) -> AuthPrincipal:
    """Validate the bearer token, sync the local user and hand the principal to the handler."""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=invalid_or_missing_bearer",
            safe_log_identifier(correlation_id, prefix="cid"),
            request.method,
            request.url.path,
        )
        raise unauthorized_error("Invalid or missing bearer token")

    return auth_service.authenticate(credentials.credentials, correlation_id=correlation_id)
