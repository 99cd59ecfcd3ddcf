"""Request authentication and local user sync."""

import logging

from app.adapters.auth import AuthVerificationError, IdentityProviderError, ProfileFetcher, TokenVerifier
from app.core.logging_safety import safe_log_identifier
from app.errors import ApiError, internal_error, unauthorized_error
from app.schemas.auth import AuthPrincipal, IdentityProfile
from app.services.users import UserService

logger = logging.getLogger(__name__)

UNNAMED_USER = "Unnamed User"


def derive_display_name(profile: IdentityProfile) -> str:
    """Prefer the provider's display name, then ``first last``, then a placeholder."""
    display_name = (profile.display_name or "").strip()
    if display_name:
        return display_name

    full_name = f"{profile.first_name or ''} {profile.last_name or ''}".strip()
    return full_name or UNNAMED_USER


class AuthenticationService:
    """Verifies a bearer token, loads the provider profile and resolves the local user.

    Authentication failures raise 401 so clients know to sign in again; any
    other failure in the pipeline raises a generic 500.
    """

    def __init__(self, verifier: TokenVerifier, profiles: ProfileFetcher, users: UserService) -> None:
        self._verifier = verifier
        self._profiles = profiles
        self._users = users

    def authenticate(self, token: str, *, correlation_id: str) -> AuthPrincipal:
        safe_correlation_id = safe_log_identifier(correlation_id, prefix="cid")
        try:
            return self._authenticate(token, safe_correlation_id=safe_correlation_id)
        except ApiError:
            raise
        except AuthVerificationError as exc:
            logger.warning(
                "auth.rejected correlation_id=%s reason=verification_failed",
                safe_correlation_id,
            )
            raise unauthorized_error(str(exc) or "Invalid bearer token") from exc
        except IdentityProviderError as exc:
            logger.error(
                "auth.failed correlation_id=%s reason=identity_provider_error error=%s",
                safe_correlation_id,
                type(exc).__name__,
            )
            raise internal_error() from exc
        except Exception as exc:
            logger.exception("auth.failed correlation_id=%s reason=unexpected_error", safe_correlation_id)
            raise internal_error() from exc

    def _authenticate(self, token: str, *, safe_correlation_id: str) -> AuthPrincipal:
        claims = self._verifier.verify_token(token)
        profile = self._profiles.fetch_profile(claims.subject_id)
        safe_subject_id = safe_log_identifier(claims.subject_id, prefix="sub")

        email = (profile.email or "").strip()
        if not email:
            logger.warning(
                "auth.rejected correlation_id=%s subject_id=%s reason=profile_email_missing",
                safe_correlation_id,
                safe_subject_id,
            )
            raise unauthorized_error("Identity profile has no primary email")

        user = self._users.find_or_create(
            auth_provider_id=claims.subject_id,
            email=email,
            name=derive_display_name(profile),
            school_id=profile.metadata.school_id,
            oen=profile.metadata.oen,
        )

        logger.info(
            "auth.accepted correlation_id=%s subject_id=%s user_id=%s",
            safe_correlation_id,
            safe_subject_id,
            safe_log_identifier(user.id, prefix="uid"),
        )
        return AuthPrincipal(external_subject_id=claims.subject_id, session_id=claims.session_id, user=user)
