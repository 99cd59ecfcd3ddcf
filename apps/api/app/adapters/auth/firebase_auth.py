"""Firebase Auth adapters for token verification and profile lookup."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from app.adapters.auth.base import AuthVerificationError, IdentityProviderError, ProfileFetcher, TokenVerifier
from app.schemas.auth import IdentityProfile, ProfileMetadata, VerifiedClaims


def _firebase_auth_module() -> Any:
    try:
        import firebase_admin
        from firebase_admin import auth as firebase_auth
    except ImportError as exc:  # pragma: no cover - depends on installed package
        raise IdentityProviderError("Firebase auth is unavailable") from exc

    if not firebase_admin._apps:
        firebase_admin.initialize_app()
    return firebase_auth


class FirebaseTokenVerifier(TokenVerifier):
    """Verifies Firebase JWTs and normalizes their claims."""

    def __init__(self, project_id: str | None, audience: str | None) -> None:
        self._project_id = project_id
        self._audience = audience

    def verify_token(self, token: str) -> VerifiedClaims:
        firebase_auth = _firebase_auth_module()

        try:
            decoded = firebase_auth.verify_id_token(token, check_revoked=True)
        except (firebase_auth.InvalidIdTokenError, firebase_auth.UserDisabledError, ValueError) as exc:
            # InvalidIdTokenError also covers expired and revoked tokens.
            raise AuthVerificationError("Invalid bearer token") from exc
        except Exception as exc:
            # CertificateFetchError and transport failures: the provider is unreachable.
            raise IdentityProviderError("Bearer token verification is unavailable") from exc

        if self._audience and decoded.get("aud") != self._audience:
            raise AuthVerificationError("Invalid bearer token audience")

        if self._project_id:
            issuer = str(decoded.get("iss", ""))
            audience = str(decoded.get("aud", ""))
            if self._project_id not in issuer and audience != self._project_id:
                raise AuthVerificationError("Invalid bearer token issuer")

        subject_id = str(decoded.get("uid") or decoded.get("sub") or "").strip()
        if not subject_id:
            raise AuthVerificationError("Bearer token missing user identity")

        try:
            return VerifiedClaims(subject_id=subject_id, session_id=decoded.get("sid"))
        except ValidationError as exc:
            raise AuthVerificationError("Bearer token claims are malformed") from exc


class FirebaseProfileFetcher(ProfileFetcher):
    """Loads the Firebase user record; custom claims carry ``schoolId`` and ``oen``."""

    def fetch_profile(self, subject_id: str) -> IdentityProfile:
        firebase_auth = _firebase_auth_module()

        try:
            record = firebase_auth.get_user(subject_id)
        except firebase_auth.UserNotFoundError as exc:
            raise AuthVerificationError("Identity profile not found") from exc
        except Exception as exc:  # pragma: no cover - provider exception surface
            raise IdentityProviderError("Identity profile lookup failed") from exc

        try:
            return IdentityProfile(
                email=record.email,
                display_name=record.display_name,
                metadata=ProfileMetadata.model_validate(record.custom_claims or {}),
            )
        except ValidationError as exc:
            raise AuthVerificationError("Identity profile is malformed") from exc


__all__ = ["FirebaseProfileFetcher", "FirebaseTokenVerifier"]
