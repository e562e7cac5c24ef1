"""Application settings using Pydantic Settings for environment-based configuration."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_session_file() -> Path:
    return Path.home() / ".gctalk" / "session.json"


class Settings(BaseSettings):
    """
    Central configuration for the gctalk client.

    All settings can be overridden via environment variables.
    Prefix is not used so the hosted backend's standard names apply
    (e.g., SUPABASE_URL, SUPABASE_ANON_KEY).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False

    # Hosted backend (auth + tables)
    supabase_url: AnyHttpUrl = Field(default="http://localhost:54321")
    supabase_anon_key: str | None = None

    # Where the signed-in session is kept between CLI invocations
    session_file: Path = Field(default_factory=_default_session_file)

    # HTTP behaviour. Retries default to 0: failures surface once.
    http_timeout_seconds: float = Field(default=30.0, gt=0.0, le=300.0)
    max_http_retries: int = Field(default=0, ge=0, le=10)
    max_backoff_seconds: float = Field(default=10.0, ge=1.0, le=300.0)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def backend_configured(self) -> bool:
        """Check if the hosted backend credentials are present."""
        return bool(self.supabase_anon_key)

    @property
    def rest_base_url(self) -> str:
        """Base URL of the hosted service without a trailing slash."""
        return str(self.supabase_url).rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    Clear cache with get_settings.cache_clear() if needed.
    """
    return Settings()
