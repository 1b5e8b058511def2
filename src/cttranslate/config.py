"""Application configuration handling."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-level configuration for the table translator."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = "development"
    log_level: str = "INFO"

    # Persisted provider configuration (selected provider, credentials, prompts).
    config_path: str = "config.json"

    target_language: str = "zh-CN"

    max_concurrency: int = 5
    max_retries: int = 3
    retry_base_delay: float = 0.5

    char_budget: int = 3000
    batch_size: int = 20
    throttle_delay: float = 0.2

    request_timeout: float = 30.0
    user_agent: Optional[str] = None


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
