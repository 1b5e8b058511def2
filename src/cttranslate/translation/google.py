"""Free Google web-translate endpoint (``client=gtx``)."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx

from .base import BatchTranslationProvider, TranslationError
from .batching import DEFAULT_CHAR_BUDGET, chunk_by_chars


DEFAULT_BASE_URL = "https://translate.googleapis.com/translate_a/single"
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
SEPARATOR = "\n"


class GoogleFreeTranslationProvider(BatchTranslationProvider):
    """Join a batch with newlines, translate it in one GET and split it back."""

    name = "Google"

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        char_budget: int = DEFAULT_CHAR_BUDGET,
        throttle_delay: float = 0.2,
        user_agent: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.base_url = base_url
        self.char_budget = char_budget
        self.throttle_delay = throttle_delay
        self.user_agent = user_agent or BROWSER_USER_AGENT

    def plan_units(self, texts: list[str]) -> list[list[str]]:
        return chunk_by_chars(texts, self.char_budget, separator_len=len(SEPARATOR))

    async def translate_unit(
        self, client: httpx.AsyncClient, unit: list[str], target_language: str
    ) -> list[str]:
        params = {
            "client": "gtx",
            "sl": "auto",
            "tl": target_language,
            "dt": "t",
            "q": SEPARATOR.join(unit),
        }
        try:
            response = await client.get(
                self.base_url, params=params, headers={"User-Agent": self.user_agent}
            )
            response.raise_for_status()
            data = response.json()
        finally:
            if self.throttle_delay > 0:
                await asyncio.sleep(self.throttle_delay)

        lines = split_translation(join_segments(data), len(unit))
        return [line if line is not None else original for line, original in zip(lines, unit)]


def join_segments(data: Any) -> str:
    """Concatenate ``data[0][i][0]`` sentence segments of a gtx response."""

    if not isinstance(data, list) or not data or not isinstance(data[0], list):
        raise TranslationError(f"Unexpected response shape: {str(data)[:100]}")
    parts: list[str] = []
    for segment in data[0]:
        if isinstance(segment, list) and segment and isinstance(segment[0], str):
            parts.append(segment[0])
    return "".join(parts)


def split_translation(translated: str, expected: int) -> list[Optional[str]]:
    """Split a joined translation into ``expected`` trimmed lines.

    The service may merge or add line breaks. Missing trailing lines come back
    as ``None`` so the caller can pad them with the originals; surplus lines
    are dropped.
    """

    lines: list[Optional[str]] = [line.strip() for line in translated.split(SEPARATOR)]
    if len(lines) < expected:
        lines.extend([None] * (expected - len(lines)))
    return lines[:expected]
