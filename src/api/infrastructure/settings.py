"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SupabaseSettings(BaseSettings):
    """Hosted backend (Supabase) connection settings.

    Environment variables:
        ECCLESIA_SUPABASE_URL: Project URL (default: http://localhost:54321)
        ECCLESIA_SUPABASE_ANON_KEY: Public anon key (required in production)
        ECCLESIA_SUPABASE_TIMEOUT_SECONDS: HTTP timeout per request (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="ECCLESIA_SUPABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: str = Field(
        default="http://localhost:54321",
        description="Supabase project URL",
    )
    anon_key: SecretStr = Field(
        default=SecretStr(""),
        description="Supabase anon (public) API key",
    )
    timeout_seconds: float = Field(
        default=10.0,
        description="HTTP timeout for backend requests",
        gt=0,
        le=120,
    )

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalize the project URL so paths can be appended."""
        return value.rstrip("/")

    @property
    def rest_url(self) -> str:
        """Base URL of the PostgREST table API."""
        return f"{self.url}/rest/v1"

    @property
    def auth_url(self) -> str:
        """Base URL of the GoTrue auth API."""
        return f"{self.url}/auth/v1"


class BootstrapSettings(BaseSettings):
    """Tenant bootstrap settings.

    Environment variables:
        ECCLESIA_BOOTSTRAP_MAX_ATTEMPTS: Tenant insert attempts before giving up (default: 15)
        ECCLESIA_BOOTSTRAP_BACKOFF_SECONDS: Fixed wait between attempts (default: 3)
        ECCLESIA_BOOTSTRAP_CHECK_EXISTING_PROFILE: Reject principals that already
            have a profile (default: true)
    """

    model_config = SettingsConfigDict(
        env_prefix="ECCLESIA_BOOTSTRAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_attempts: int = Field(
        default=15,
        description="Maximum tenant insert attempts",
        ge=1,
        le=100,
    )
    backoff_seconds: float = Field(
        default=3.0,
        description="Fixed backoff between tenant insert attempts",
        ge=0,
        le=60,
    )
    check_existing_profile: bool = Field(
        default=True,
        description="Reject bootstrap when the principal already has a profile",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="ECCLESIA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Ecclesia API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def supabase(self) -> SupabaseSettings:
        """Get backend settings."""
        return get_supabase_settings()

    @property
    def bootstrap(self) -> BootstrapSettings:
        """Get bootstrap settings."""
        return get_bootstrap_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_supabase_settings() -> SupabaseSettings:
    """Get cached backend settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return SupabaseSettings()


@lru_cache
def get_bootstrap_settings() -> BootstrapSettings:
    """Get cached bootstrap settings."""
    return BootstrapSettings()
