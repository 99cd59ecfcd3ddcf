"""Authentication provider interfaces."""

from abc import ABC, abstractmethod

from app.schemas.auth import IdentityProfile, VerifiedClaims


class AuthVerificationError(Exception):
    """Raised when a token or identity cannot be verified; the caller must re-authenticate."""


class IdentityProviderError(Exception):
    """Raised when the identity provider is unavailable or fails unexpectedly."""


class TokenVerifier(ABC):
    """Provider-neutral token verification interface."""

    @abstractmethod
    def verify_token(self, token: str) -> VerifiedClaims:
        """Verify token and return normalized claims."""


class ProfileFetcher(ABC):
    """Provider-neutral profile lookup interface."""

    @abstractmethod
    def fetch_profile(self, subject_id: str) -> IdentityProfile:
        """Return profile attributes for a verified subject."""


__all__ = ["AuthVerificationError", "IdentityProviderError", "ProfileFetcher", "TokenVerifier"]
