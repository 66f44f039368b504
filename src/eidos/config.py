"""Configuration management for Eidos."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODEL_NAME = "gemini-3-pro-image-preview"
DEFAULT_SIGNED_URL_EXPIRY = 7 * 24 * 60 * 60


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="EIDOS_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
        protected_namespaces=(),
    )

    # GitHub
    github_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("EIDOS_GITHUB_TOKEN", "GITHUB_TOKEN"),
        description="Token used to read the issue and post comments",
    )
    github_repository: str | None = Field(
        default=None,
        validation_alias=AliasChoices("EIDOS_GITHUB_REPOSITORY", "GITHUB_REPOSITORY"),
        description="owner/name of the repository",
    )
    github_event_path: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("EIDOS_GITHUB_EVENT_PATH", "GITHUB_EVENT_PATH"),
        description="Path to the Actions event payload",
    )
    github_api_base: str = Field(default="https://api.github.com", description="GitHub REST API base URL")

    # Image generation
    ai_provider: str = Field(default="gemini", description="Image generation provider")
    ai_api_key: str | None = Field(default=None, description="API key for the image generation provider")
    model_name: str = Field(default=DEFAULT_MODEL_NAME, description="Image generation model")
    ai_api_base: str | None = Field(default=None, description="Optional provider API base URL")
    request_timeout_seconds: int = Field(default=120, description="Timeout for outbound HTTP calls")

    # Storage
    storage_backend: Literal["gcs", "local"] = Field(default="gcs", description="Where generated images go")
    gcs_project_id: str | None = Field(default=None, description="Google Cloud project id")
    gcs_bucket_name: str | None = Field(default=None, description="Bucket receiving generated images")
    gcs_service_account_key: str | None = Field(default=None, description="Service account key JSON")
    signed_url_expiry: int = Field(default=DEFAULT_SIGNED_URL_EXPIRY, description="Signed URL lifetime in seconds")
    local_storage_dir: Path = Field(default=Path("generated-images"), description="Directory for local storage")
    local_base_url: str | None = Field(default=None, description="Public URL prefix for local storage")

    # Prompting
    prompt_config_path: Path | None = Field(default=None, description="YAML/JSON prompt override file")
    max_images: int = Field(default=10, ge=0, description="Upper bound on images per command")
    modify_default_count: int = Field(default=1, ge=0, description="Image count for modify without --count")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")


def get_settings(**overrides: object) -> Settings:
    """Get application settings, letting keyword arguments win over the environment."""

    return Settings(**overrides)  # type: ignore[arg-type]
