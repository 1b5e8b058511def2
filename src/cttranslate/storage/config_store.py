"""Persisted provider configuration (the settings dialog's JSON file)."""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .files import write_atomic

logger = logging.getLogger("cttranslate.config")


class ProviderKind(str, Enum):
    """Translation backends selectable by configuration."""

    GOOGLE_FREE = "GoogleFree"
    OPENAI = "OpenAI"
    TENCENT = "Tencent"
    MOCK = "Mock"

    @classmethod
    def parse(cls, value: Any) -> ProviderKind:
        """Resolve a configured name, falling back to the default provider."""

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for kind in cls:
                if kind.value.lower() == value.strip().lower():
                    return kind
        return DEFAULT_PROVIDER


DEFAULT_PROVIDER = ProviderKind.GOOGLE_FREE

DEFAULT_SYSTEM_PROMPT = "You are a professional translator."


class _ConfigModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class GoogleConfig(_ConfigModel):
    base_url: str = Field(
        default="https://translate.googleapis.com/translate_a/single", alias="baseUrl"
    )


class OpenAiConfig(_ConfigModel):
    api_url: str = Field(default="https://api.openai.com/v1/chat/completions", alias="apiUrl")
    api_key: str = Field(default="", alias="apiKey")
    model: str = "gpt-3.5-turbo"
    custom_system_prompt: str = Field(default=DEFAULT_SYSTEM_PROMPT, alias="customSystemPrompt")


class TencentConfig(_ConfigModel):
    secret_id: str = Field(default="", alias="secretId")
    secret_key: str = Field(default="", alias="secretKey")
    region: str = "ap-guangzhou"
    project_id: int = Field(default=0, alias="projectId")


class AppConfig(_ConfigModel):
    """Selected provider plus one configuration block per provider."""

    selected_provider: ProviderKind = Field(default=DEFAULT_PROVIDER, alias="selectedProvider")
    google: GoogleConfig = Field(default_factory=GoogleConfig)
    openai: OpenAiConfig = Field(default_factory=OpenAiConfig, alias="openAi")
    tencent: TencentConfig = Field(default_factory=TencentConfig)

    @field_validator("selected_provider", mode="before")
    @classmethod
    def _coerce_provider(cls, value: Any) -> ProviderKind:
        return ProviderKind.parse(value)

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)


def load_app_config(path: Path | str) -> AppConfig:
    """Load the persisted configuration, or defaults when missing or malformed."""

    file_path = Path(path)
    if not file_path.exists():
        logger.debug("No configuration at %s, using defaults", file_path)
        return AppConfig()
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("configuration root must be an object")
        return AppConfig.model_validate(data)
    except (OSError, ValueError, ValidationError) as exc:
        logger.debug("Ignoring unreadable configuration %s: %s", file_path, exc)
        return AppConfig()


def save_app_config(config: AppConfig, path: Path | str) -> Path:
    """Write the configuration atomically and return the target path."""

    file_path = write_atomic(path, config.to_json().encode("utf-8"))
    logger.info("Saved configuration to %s (provider=%s)", file_path, config.selected_provider.value)
    return file_path


class ConfigStore:
    """Hold the active configuration and persist it on explicit save."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self.config = load_app_config(self.path)

    def save(self, config: AppConfig) -> AppConfig:
        save_app_config(config, self.path)
        self.config = config
        return config

