"""
Application configuration loaded from environment variables.

Uses Pydantic Settings to:
1. Read from .env file automatically
2. Validate values at startup
3. Provide type-safe access throughout the app

Usage:
    from educafric.config import settings
    print(settings.DATABASE_URL)

Note: We use a validator that prefers .env values over empty shell
environment variables, so a blank variable exported by the shell does not
shadow a real value in the .env file.
"""

from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """All application configuration in one place."""

    model_config = SettingsConfigDict(
        env_file=".env",        # Load from .env file
        env_file_encoding="utf-8",
        case_sensitive=True,     # ENV_VAR must match exactly
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def prefer_dotenv_over_empty_env(cls, data):
        """If an env var is empty but .env has a value, use the .env value.

        Pydantic Settings prioritizes real env vars over .env file values,
        even when the env var is an empty string. This fills in the blanks.
        """
        from dotenv import dotenv_values

        dotenv_vals = dotenv_values(".env")
        for key, dotenv_value in dotenv_vals.items():
            if dotenv_value and (key not in data or not data.get(key)):
                data[key] = dotenv_value
        return data

    # --- Database ---
    # SQLite works out of the box; production points this at PostgreSQL
    # (postgresql+asyncpg://...).
    DATABASE_URL: str = "sqlite+aiosqlite:///./educafric.db"

    # --- Application ---
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "http://localhost:3000"

    # --- Documents ---
    SITE_URL: str = "educafric.com"
    VERIFY_URL: str = "www.educafric.com/verify"
    DOCUMENT_VERSION: str = "2025.1"

    # Bulletin rendering policies
    BULLETIN_USE_SUPPLIED_GRADES: bool = True
    BULLETIN_ON_VALIDATION_ERROR: Literal["defaults", "reject"] = "defaults"

    # Default for master sheet requests that don't pick an overflow policy
    MASTER_SHEET_OVERFLOW: Literal["truncate", "paginate", "error"] = "truncate"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"


# Shared settings instance
settings = Settings()
