"""Offline provider that marks text instead of translating it."""

from __future__ import annotations

from typing import Any

import httpx

from .base import BatchTranslationProvider
from .batching import DEFAULT_BATCH_SIZE, chunk_by_count


class MockTranslationProvider(BatchTranslationProvider):
    """Prefix each string with a marker, keeping a wrapping pair of quotes in place."""

    name = "Mock"

    def __init__(self, *, marker: str = "[MT]", batch_size: int = DEFAULT_BATCH_SIZE, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.marker = marker
        self.batch_size = batch_size

    def plan_units(self, texts: list[str]) -> list[list[str]]:
        return chunk_by_count(texts, self.batch_size)

    async def translate_unit(
        self, client: httpx.AsyncClient, unit: list[str], target_language: str
    ) -> list[str]:
        return [self.mark(text) for text in unit]

    def mark(self, text: str) -> str:
        if len(text) > 2 and text.startswith('"') and text.endswith('"'):
            return f'"{self.marker} {text[1:-1]}"'
        return f"{self.marker} {text}"
