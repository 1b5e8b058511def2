"""OpenAI-compatible chat-completion translation."""

from __future__ import annotations

import json
import re
from typing import Any

import httpx

from ..storage.config_store import DEFAULT_SYSTEM_PROMPT
from .base import BatchTranslationProvider, TranslationError
from .batching import DEFAULT_BATCH_SIZE, chunk_by_count


COMPLETIONS_PATH = "/chat/completions"
VERSION_SEGMENT_RE = re.compile(r"/v\d+$", re.IGNORECASE)
FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)

LANGUAGE_NAMES = {
    "zh-CN": "Simplified Chinese",
    "zh-TW": "Traditional Chinese",
    "en": "English",
    "ja": "Japanese",
    "ko": "Korean",
    "ru": "Russian",
    "fr": "French",
    "de": "German",
    "es": "Spanish",
}


def normalize_endpoint(api_url: str) -> str:
    """Complete a base URL into a ``/chat/completions`` endpoint.

    ``https://host/v1`` gains ``/chat/completions``; a bare ``https://host``
    gains ``/v1/chat/completions``.
    """

    url = api_url.strip().rstrip("/")
    if not url or url.lower().endswith(COMPLETIONS_PATH):
        return url
    if VERSION_SEGMENT_RE.search(url):
        return url + COMPLETIONS_PATH
    return url + "/v1" + COMPLETIONS_PATH


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code, code)


def build_batch_prompt(texts: list[str], target_language: str) -> str:
    payload = json.dumps(texts, ensure_ascii=False)
    return (
        f"Translate the following JSON array of strings to {language_name(target_language)}. "
        "Return ONLY a valid JSON array of strings with the same number of items, in the same order. "
        "Do not include markdown formatting like ```json or any explanation.\n\n"
        f"{payload}"
    )


def parse_json_array(content: str) -> list[Any]:
    """Extract the JSON array from a model reply, tolerating code fences and prose."""

    cleaned = FENCE_RE.sub("", content).strip()
    if not (cleaned.startswith("[") and cleaned.endswith("]")):
        start = cleaned.find("[")
        end = cleaned.rfind("]")
        if start == -1 or end <= start:
            raise TranslationError(f"No JSON array in reply: {cleaned[:100]}")
        cleaned = cleaned[start : end + 1]
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise TranslationError(f"Unparsable JSON array: {exc}") from exc
    if not isinstance(parsed, list):
        raise TranslationError("Reply is not a JSON array")
    return parsed


class ChatCompletionTranslationProvider(BatchTranslationProvider):
    """Send fixed-size batches as a JSON array inside a chat prompt."""

    name = "OpenAI"

    def __init__(
        self,
        *,
        api_url: str,
        api_key: str,
        model: str,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        batch_size: int = DEFAULT_BATCH_SIZE,
        temperature: float = 0.1,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.endpoint = normalize_endpoint(api_url)
        self.api_key = api_key
        self.model = model
        self.system_prompt = system_prompt.strip() or DEFAULT_SYSTEM_PROMPT
        self.batch_size = batch_size
        self.temperature = temperature
        if self.endpoint != api_url.strip():
            self.log.info("Auto-corrected API URL to: %s", self.endpoint)

    def plan_units(self, texts: list[str]) -> list[list[str]]:
        return chunk_by_count(texts, self.batch_size)

    async def translate_unit(
        self, client: httpx.AsyncClient, unit: list[str], target_language: str
    ) -> list[str]:
        if not self.api_key:
            raise TranslationError("No API key configured")

        self.log.debug("Sending batch request (%d items)", len(unit))
        content = await self._complete(
            client,
            [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": build_batch_prompt(unit, target_language)},
            ],
        )
        translated = parse_json_array(content)
        if len(translated) != len(unit):
            raise TranslationError(
                f"Batch parsing mismatch: sent {len(unit)}, received {len(translated)}"
            )
        if not all(isinstance(item, str) for item in translated):
            raise TranslationError("Reply array contains non-string items")
        return translated

    async def _complete(self, client: httpx.AsyncClient, messages: list[dict[str, str]]) -> str:
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        response = await client.post(self.endpoint, json=payload, headers=headers)
        if response.is_error:
            raise TranslationError(
                f"API request failed with status {response.status_code}: {response.text[:200]}"
            )
        body = response.text
        if body.lstrip().startswith("<"):
            raise TranslationError(
                f"Received HTML instead of JSON, check the API URL. Preview: {body[:100]}"
            )
        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise TranslationError(f"Unexpected completion payload: {exc}") from exc
        if not content or not content.strip():
            raise TranslationError("Received empty content")
        return content.strip()
