"""Collect unique strings, translate them once, write results onto every entry."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Optional, Sequence

from ..document.table import Entry
from ..logs import TranslationLog
from .base import ProgressSink, TranslationJob, TranslationProvider


@dataclass(frozen=True, slots=True)
class TranslationSummary:
    entries: int
    unique_texts: int
    matched: int
    elapsed: float


def clean_translation(text: str) -> str:
    """Undo quote decoration that engines add around plain content."""

    cleaned = text.strip()
    if len(cleaned) >= 2 and (
        (cleaned.startswith('"') and cleaned.endswith('"'))
        or (cleaned.startswith("“") and cleaned.endswith("”"))
    ):
        cleaned = cleaned[1:-1]
    return cleaned.replace("“", '"').replace("”", '"')


class TranslationOrchestrator:
    """Facade over a provider for a list of table entries."""

    def __init__(self, provider: TranslationProvider, *, log: Optional[TranslationLog] = None) -> None:
        self.provider = provider
        self.log = log or TranslationLog()

    async def translate_entries(
        self,
        entries: Sequence[Entry],
        target_language: str,
        *,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> TranslationSummary:
        started = time.perf_counter()
        job = TranslationJob.from_texts(
            (entry.original_text for entry in entries if entry.original_text.strip()),
            target_language,
        )
        if not job.unique_texts:
            self.log.info("Nothing to translate")
            return TranslationSummary(len(entries), 0, 0, 0.0)

        self.log.info(
            "Translating %d unique text(s) for %d entries via %s",
            len(job.unique_texts),
            len(entries),
            self.provider.name,
        )
        translations = await self.provider.translate_batch(
            list(job.unique_texts), job.target_language, progress=progress, cancel=cancel
        )

        matched = 0
        for entry in entries:
            translated = translations.get(entry.original_text)
            if translated is None:
                continue
            matched += 1
            # Identity fallbacks must leave the stored value byte-for-byte intact.
            if translated == entry.original_text:
                continue
            entry.translated_text = clean_translation(translated)

        elapsed = time.perf_counter() - started
        self.log.info(
            "Translation finished: %d entries, %d matched, %.2fs", len(entries), matched, elapsed
        )
        return TranslationSummary(len(entries), len(job.unique_texts), matched, elapsed)
