"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.user import User


class VerifiedClaims(BaseModel):
    """Claims the identity provider vouched for after verifying a bearer token."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    subject_id: str = Field(min_length=1)
    session_id: str | None = None


class ProfileMetadata(BaseModel):
    """Custom profile attributes kept by the identity provider.

    Other keys the provider stores alongside these are ignored, but the known
    keys must have the declared types.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    school_id: str | None = Field(default=None, alias="schoolId")
    oen: str | None = None


class IdentityProfile(BaseModel):
    """Profile attributes fetched from the identity provider for a verified subject."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    email: str | None = None
    display_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    metadata: ProfileMetadata = Field(default_factory=ProfileMetadata)


class AuthPrincipal(BaseModel):
    """Authenticated identity context resolved for a single request."""

    external_subject_id: str = Field(min_length=1)
    session_id: str | None = None
    user: User

    @property
    def user_id(self) -> str:
        return self.user.id
