"""Application configuration."""

from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from the environment and an optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    environment: str = "development"
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/youtube_explorer.db"

    # Master key material for API key encryption (64 hex characters).
    # When unset a random key is generated for the lifetime of the process.
    youtube_api_encryption_key: Optional[str] = None
    require_encryption_key: bool = False

    # Upstream YouTube Data API
    youtube_api_base_url: str = "https://www.googleapis.com/youtube/v3"
    youtube_request_timeout: float = 10.0
    youtube_max_retries: int = 3
    youtube_retry_backoff: float = 0.5
    validate_api_key_on_save: bool = True

    @field_validator("youtube_api_encryption_key", mode="before")
    @classmethod
    def blank_key_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def cors_origins_list(self) -> list[str]:
        """CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
