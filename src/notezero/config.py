"""Application configuration via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Backend (PostgREST-compatible); empty URL selects the in-memory gateway
    backend_url: str = ""
    backend_api_key: str = ""

    # Workspace identity
    workspace_id: str = "default"
    user_id: str = ""

    # Persistence pipeline
    persistence_timeout_seconds: float = 10.0
    persistence_max_attempts: int = 4

    # Document defaults
    locale: str = "en"
    duplicate_title_suffix: str = " (copy)"

    # App
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 8080


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings. Lazy initialization to avoid import-time errors."""
    return Settings()
