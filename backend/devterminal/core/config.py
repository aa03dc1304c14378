"""Application configuration and settings management."""
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET_KEY = "default_secret"


class Settings(BaseSettings):
    """Global application settings loaded from environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".." / ".env"),
        env_file_encoding="utf-8",
        env_prefix="DEVTERM_",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = "DevTerminal"
    secret_key: str = DEFAULT_SECRET_KEY
    require_secret_key: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./devterminal.db"

    # Security
    access_token_expire_minutes: int = 60 * 24
    allowed_origins: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Feed
    feed_limit: int = 50

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    # Server runner
    host: str = "127.0.0.1"
    port: int = 8000
    static_dir: str | None = None

    # Terminal client
    api_url: str = "http://localhost:8000"

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: List[str] | str) -> List[str]:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @property
    def uses_default_secret(self) -> bool:
        return self.secret_key == DEFAULT_SECRET_KEY


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings instance."""

    return Settings()
