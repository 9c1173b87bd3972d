"""Configuration settings for prebuild_utils.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.

Deploy credentials live in a separate settings model because their
variable names are the conventional AWS ones rather than PREBUILD_*.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Cache-Control directive for uploaded bundles; names are content-addressed
IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000, immutable"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the PREBUILD_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="PREBUILD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    root_dir: Path | None = Field(
        default=None,
        description="Repository root (found via CMakeLists.txt if not set)",
    )

    # Operational
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    cmake_executable: str = Field(
        default="cmake",
        description="CMake executable used for configure and build",
    )

    # Timeouts (in seconds)
    build_timeout: int | None = Field(
        default=None,
        ge=1,
        description="Timeout for each CMake invocation (no timeout if not set)",
    )


class DeploySettings(BaseSettings):
    """Object storage settings consumed by the deploy stage.

    Every field is optional here; the deploy stage validates presence
    so that it can name exactly which variables are missing.
    """

    model_config = SettingsConfigDict(
        env_prefix="AWS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    access_key_id: str | None = Field(default=None, description="AWS access key")
    secret_access_key: str | None = Field(
        default=None, description="AWS secret access key"
    )
    region: str | None = Field(default=None, description="AWS region")
    s3_bucket: str | None = Field(default=None, description="Destination bucket")
    s3_upload_root: str | None = Field(
        default=None, description="Key prefix under which bundles are uploaded"
    )
    endpoint_url: str | None = Field(
        default=None, description="Custom S3 endpoint (S3-compatible stores)"
    )
    cache_control: str = Field(
        default=IMMUTABLE_CACHE_CONTROL,
        description="Cache-Control header set on uploaded bundles",
    )


def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def get_deploy_settings() -> DeploySettings:
    """Get deploy settings loaded from environment."""
    return DeploySettings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = [
    "IMMUTABLE_CACHE_CONTROL",
    "DeploySettings",
    "Settings",
    "get_deploy_settings",
    "get_settings",
    "print_settings_json",
]
