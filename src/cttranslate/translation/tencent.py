"""Tencent Cloud machine translation (TextTranslate, one string per request)."""

from __future__ import annotations

import json
import time
from typing import Any, Callable

import httpx

from . import signing
from .base import BatchTranslationProvider, TranslationError


HOST = "tmt.tencentcloudapi.com"
SERVICE = "tmt"
ACTION = "TextTranslate"
VERSION = "2018-03-21"

# Tencent uses bare codes where the UI uses regional ones.
LANGUAGE_CODES = {
    "zh-CN": "zh",
    "zh-Hans": "zh",
    "zh-Hant": "zh-TW",
}


def tencent_language(code: str) -> str:
    return LANGUAGE_CODES.get(code, code)


def build_payload(text: str, target_language: str, project_id: int = 0) -> str:
    body = {
        "SourceText": text,
        "Source": "auto",
        "Target": tencent_language(target_language),
        "ProjectId": project_id,
    }
    return json.dumps(body, ensure_ascii=False, separators=(",", ":"))


def parse_response(data: Any) -> str:
    """Return ``Response.TargetText`` or raise for an embedded error object."""

    response = data.get("Response") if isinstance(data, dict) else None
    if not isinstance(response, dict):
        raise TranslationError("Missing Response object")
    error = response.get("Error")
    if error:
        code = error.get("Code", "Unknown") if isinstance(error, dict) else "Unknown"
        message = error.get("Message", "") if isinstance(error, dict) else str(error)
        raise TranslationError(f"API Error: {code} - {message}")
    target = response.get("TargetText")
    if not isinstance(target, str):
        raise TranslationError("Response has no TargetText")
    return target


class TencentTranslationProvider(BatchTranslationProvider):
    """No batch endpoint: every string is its own signed request."""

    name = "Tencent"

    def __init__(
        self,
        *,
        secret_id: str,
        secret_key: str,
        region: str = "ap-guangzhou",
        project_id: int = 0,
        clock: Callable[[], float] = time.time,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.secret_id = secret_id
        self.secret_key = secret_key
        self.region = region
        self.project_id = project_id
        self._clock = clock

    def plan_units(self, texts: list[str]) -> list[list[str]]:
        return [[text] for text in texts]

    async def translate_unit(
        self, client: httpx.AsyncClient, unit: list[str], target_language: str
    ) -> list[str]:
        return [await self._translate_single(client, text, target_language) for text in unit]

    async def _translate_single(
        self, client: httpx.AsyncClient, text: str, target_language: str
    ) -> str:
        if not self.secret_id or not self.secret_key:
            raise TranslationError("Tencent credentials are not configured")

        payload = build_payload(text, target_language, self.project_id)
        signed = signing.sign_request(
            secret_id=self.secret_id,
            secret_key=self.secret_key,
            payload=payload,
            host=HOST,
            service=SERVICE,
            action=ACTION,
            version=VERSION,
            region=self.region,
            timestamp=int(self._clock()),
        )
        response = await client.post(f"https://{HOST}/", content=signed.body, headers=signed.headers)
        if response.is_error:
            raise TranslationError(f"Tencent API Error: {response.status_code} - {response.text[:200]}")
        try:
            data = response.json()
        except ValueError as exc:
            raise TranslationError(f"Non-JSON response: {response.text[:100]}") from exc
        return parse_response(data)
