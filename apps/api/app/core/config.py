"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    api_prefix: str = ""

    auth_provider: Literal["mock", "firebase"] = "firebase"
    firebase_project_id: str | None = None
    firebase_audience: str | None = None

    # Unset means the in-memory store.
    database_url: str | None = None

    storage_provider: Literal["memory", "s3"] = "s3"
    s3_bucket: str | None = None
    s3_region: str | None = None
    s3_endpoint_url: str | None = None
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None

    signature_upload_url_ttl_seconds: int = Field(default=300, gt=0)
    signature_view_url_ttl_seconds: int = Field(default=60, gt=0)

    model_config = SettingsConfigDict(env_prefix="VOLUNTEER_HOURS_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
