"""Resolve the configured provider kind into a concrete provider."""

from __future__ import annotations

from typing import Optional

import httpx

from ..config import Settings
from ..logs import TranslationLog
from ..storage.config_store import AppConfig, ProviderKind
from .base import TranslationProvider
from .chat import ChatCompletionTranslationProvider
from .google import GoogleFreeTranslationProvider
from .mock import MockTranslationProvider
from .retry import RetryPolicy
from .tencent import TencentTranslationProvider


def build_provider(
    config: AppConfig,
    settings: Settings,
    *,
    kind: Optional[ProviderKind | str] = None,
    client: Optional[httpx.AsyncClient] = None,
    log: Optional[TranslationLog] = None,
) -> TranslationProvider:
    """Build the provider named by ``kind`` (or the configured selection)."""

    selected = ProviderKind.parse(kind) if kind is not None else config.selected_provider
    common = {
        "retry": RetryPolicy(max_attempts=settings.max_retries, base_delay=settings.retry_base_delay),
        "concurrency": settings.max_concurrency,
        "timeout": settings.request_timeout,
        "client": client,
        "log": log,
    }

    if selected is ProviderKind.OPENAI:
        return ChatCompletionTranslationProvider(
            api_url=config.openai.api_url,
            api_key=config.openai.api_key,
            model=config.openai.model,
            system_prompt=config.openai.custom_system_prompt,
            batch_size=settings.batch_size,
            **common,
        )
    if selected is ProviderKind.TENCENT:
        return TencentTranslationProvider(
            secret_id=config.tencent.secret_id,
            secret_key=config.tencent.secret_key,
            region=config.tencent.region,
            project_id=config.tencent.project_id,
            **common,
        )
    if selected is ProviderKind.MOCK:
        return MockTranslationProvider(batch_size=settings.batch_size, **common)
    return GoogleFreeTranslationProvider(
        base_url=config.google.base_url,
        char_budget=settings.char_budget,
        throttle_delay=settings.throttle_delay,
        user_agent=settings.user_agent,
        **common,
    )
