"""Mock identity adapters for local development and tests."""

from app.adapters.auth.base import AuthVerificationError, ProfileFetcher, TokenVerifier
from app.schemas.auth import IdentityProfile, VerifiedClaims


class MockTokenVerifier(TokenVerifier):
    """Accepts deterministic test tokens only.

    Expected token format:
    - ``test:<subject_id>``
    - ``test:<subject_id>:<session_id>``
    """

    def verify_token(self, token: str) -> VerifiedClaims:
        parts = token.split(":")
        if len(parts) not in (2, 3) or parts[0] != "test":
            raise AuthVerificationError("Invalid bearer token")

        subject_id = parts[1].strip()
        session_id = parts[2].strip() if len(parts) == 3 else None

        if not subject_id:
            raise AuthVerificationError("Bearer token missing user identity")
        if session_id == "":
            raise AuthVerificationError("Bearer token missing session")

        return VerifiedClaims(subject_id=subject_id, session_id=session_id)


class MockProfileFetcher(ProfileFetcher):
    """Returns registered profiles, or one derived from the subject id."""

    def __init__(self, profiles: dict[str, IdentityProfile] | None = None) -> None:
        self._profiles = dict(profiles or {})

    def fetch_profile(self, subject_id: str) -> IdentityProfile:
        registered = self._profiles.get(subject_id)
        if registered is not None:
            return registered

        return IdentityProfile(
            email=f"{subject_id}@example.test",
            first_name="Test",
            last_name=subject_id,
        )


__all__ = ["MockProfileFetcher", "MockTokenVerifier"]
