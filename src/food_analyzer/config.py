"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    log_level: str = "INFO"
    openai_model: str = "gpt-4o"
    openai_max_tokens: int = 1000
    openai_timeout_seconds: float = 60.0
    history_dir: str = "history"
    max_upload_bytes: int = 10 * 1024 * 1024
    history_page_size: int = 50
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
