"""Provider contract shared by every translation backend."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence

import httpx

from ..logs import TranslationLog
from .batching import dispatch_units
from .retry import RetryPolicy


ProgressSink = Callable[[int], None]
TranslationResult = dict[str, str]


class TranslationError(RuntimeError):
    """A unit of work could not be translated (transport, format or remote error)."""


@dataclass(frozen=True, slots=True)
class TranslationJob:
    """Deduplicated unit of work handed to a provider."""

    unique_texts: tuple[str, ...]
    target_language: str

    @classmethod
    def from_texts(cls, texts: Iterable[str], target_language: str) -> TranslationJob:
        return cls(tuple(dict.fromkeys(texts)), target_language)


class TranslationProvider(ABC):
    """Uniform ``translate`` / ``translate_batch`` capability."""

    name: str = "provider"

    @abstractmethod
    async def translate_batch(
        self,
        texts: Sequence[str],
        target_language: str,
        *,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> TranslationResult:
        """Return a mapping covering every distinct input text."""

    async def translate_one(self, text: str, target_language: str) -> str:
        result = await self.translate_batch([text], target_language)
        return result.get(text, text)


class BatchTranslationProvider(TranslationProvider):
    """Provider that plans units, runs them through retry and the concurrency gate.

    Subclasses decide how texts are grouped (:meth:`plan_units`) and how one
    unit is sent (:meth:`translate_unit`). ``translate_unit`` returns one
    translation per submitted text or raises; the retry policy turns failures
    into identity fallbacks, so ``translate_batch`` never raises for a unit.
    """

    def __init__(
        self,
        *,
        retry: Optional[RetryPolicy] = None,
        concurrency: int = 5,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
        log: Optional[TranslationLog] = None,
    ) -> None:
        self.retry = retry or RetryPolicy()
        self.concurrency = concurrency
        self.timeout = timeout
        self._client = client
        self.log = (log or TranslationLog()).child(self.name)

    @abstractmethod
    def plan_units(self, texts: list[str]) -> list[list[str]]:
        """Group the job's texts into units of work."""

    @abstractmethod
    async def translate_unit(
        self, client: httpx.AsyncClient, unit: list[str], target_language: str
    ) -> list[str]:
        """Translate one unit, returning results aligned with ``unit``."""

    async def translate_batch(
        self,
        texts: Sequence[str],
        target_language: str,
        *,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> TranslationResult:
        job = TranslationJob.from_texts(texts, target_language)
        if not job.unique_texts:
            return {}

        result: TranslationResult = {}
        pending: list[str] = []
        for text in job.unique_texts:
            if text.strip():
                pending.append(text)
            else:
                result[text] = text
        if not pending:
            return result

        units = self.plan_units(pending)
        self.log.info("Translating %d text(s) in %d unit(s)", len(pending), len(units))

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
            close_client = True

        async def run_unit(unit: list[str]) -> TranslationResult:
            return await self.retry.run(
                unit,
                lambda: self._translate_aligned(client, unit, job.target_language),
                cancel=cancel,
                log=self.log,
            )

        try:
            translated = await dispatch_units(
                units,
                run_unit,
                concurrency=self.concurrency,
                progress=progress,
                cancel=cancel,
                log=self.log,
            )
        finally:
            if close_client:
                await client.aclose()

        result.update(translated)
        return result

    async def _translate_aligned(
        self, client: httpx.AsyncClient, unit: list[str], target_language: str
    ) -> TranslationResult:
        outputs = await self.translate_unit(client, unit, target_language)
        if len(outputs) != len(unit):
            raise TranslationError(f"Sent {len(unit)} item(s), received {len(outputs)}")
        return dict(zip(unit, outputs))
