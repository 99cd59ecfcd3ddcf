"""Identity provider adapters."""

from .base import AuthVerificationError, IdentityProviderError, ProfileFetcher, TokenVerifier
from .firebase_auth import FirebaseProfileFetcher, FirebaseTokenVerifier
from .mock_auth import MockProfileFetcher, MockTokenVerifier

__all__ = [
    "AuthVerificationError",
    "IdentityProviderError",
    "ProfileFetcher",
    "TokenVerifier",
    "FirebaseProfileFetcher",
    "FirebaseTokenVerifier",
    "MockProfileFetcher",
    "MockTokenVerifier",
]
