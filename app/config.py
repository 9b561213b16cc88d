# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # The session service acts on behalf of one end user, so it only ever
    # uses the anon key. Row Level Security does the scoping server-side.

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_TIMEOUT_SECONDS: int = Field(
        default=10,
        ge=1,
        le=120,
        description="Timeout applied to PostgREST requests"
    )

    PROFILES_TABLE: str = Field(
        default="profiles",
        description="Table holding one profile row per auth user"
    )

    PROFILE_CHANNEL: str = Field(
        default="profiles-changes",
        description="Realtime channel name used for the profile change feed"
    )

    # -------------------------------------------------------------------------
    # Passwordless Sign-up
    # -------------------------------------------------------------------------

    SITE_URL: str = Field(
        default="http://localhost:3000",
        description="Public origin of the web client"
    )

    SIGNUP_REDIRECT_PATH: str = Field(
        default="/set-password",
        description="Path the magic link sends new users to"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="127.0.0.1",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def signup_redirect_url(self) -> str:
        """
        Absolute URL embedded in sign-up magic links.

        Example: SITE_URL="https://artfolio.app/", SIGNUP_REDIRECT_PATH="set-password"
        -> "https://artfolio.app/set-password"
        """
        path = self.SIGNUP_REDIRECT_PATH
        if not path.startswith("/"):
            path = "/" + path
        return self.SITE_URL.rstrip("/") + path

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Handles comma-separated values and strips whitespace.
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
