"""Batch chunking policies and the bounded-concurrency dispatcher."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, Sequence

from ..logs import TranslationLog


DEFAULT_CHAR_BUDGET = 3000
DEFAULT_BATCH_SIZE = 20
DEFAULT_CONCURRENCY = 5


def chunk_by_chars(
    texts: Sequence[str], budget: int = DEFAULT_CHAR_BUDGET, separator_len: int = 1
) -> list[list[str]]:
    """Group texts so each batch's joined length stays within ``budget``.

    Each item counts its length plus one separator. An item is never split; an
    item larger than the budget forms a batch of its own.
    """

    batches: list[list[str]] = []
    current: list[str] = []
    current_len = 0
    for text in texts:
        item_len = len(text) + separator_len
        if current and current_len + item_len > budget:
            batches.append(current)
            current = []
            current_len = 0
        current.append(text)
        current_len += item_len
    if current:
        batches.append(current)
    return batches


def chunk_by_count(texts: Sequence[str], size: int = DEFAULT_BATCH_SIZE) -> list[list[str]]:
    """Split texts into consecutive groups of at most ``size`` items."""

    if size < 1:
        raise ValueError("batch size must be positive")
    return [list(texts[idx : idx + size]) for idx in range(0, len(texts), size)]


async def dispatch_units(
    units: Sequence[list[str]],
    worker: Callable[[list[str]], Awaitable[dict[str, str]]],
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    progress: Optional[Callable[[int], None]] = None,
    cancel: Optional[asyncio.Event] = None,
    log: Optional[TranslationLog] = None,
) -> dict[str, str]:
    """Run ``worker`` over every unit with at most ``concurrency`` in flight.

    Units not yet started when ``cancel`` is set are skipped and map to their
    own texts, so the returned mapping always covers every input text. The
    result map and progress counter are only written under ``lock``.
    """

    log = log or TranslationLog()
    semaphore = asyncio.Semaphore(max(1, concurrency))
    lock = asyncio.Lock()
    result: dict[str, str] = {}
    completed = 0
    skipped = 0

    def cancelled() -> bool:
        return cancel is not None and cancel.is_set()

    async def record(unit: list[str], mapping: dict[str, str]) -> None:
        nonlocal completed
        async with lock:
            for text in unit:
                result[text] = mapping.get(text, text)
            completed += len(unit)
            if progress is not None:
                try:
                    progress(completed)
                except Exception as exc:
                    log.debug("Progress sink failed: %s", exc)

    async def skip(unit: list[str]) -> None:
        nonlocal skipped
        async with lock:
            skipped += 1
            for text in unit:
                result[text] = text

    async def run(unit: list[str]) -> None:
        if cancelled():
            await skip(unit)
            return
        async with semaphore:
            if cancelled():
                await skip(unit)
                return
            mapping = await worker(unit)
        await record(unit, mapping)

    await asyncio.gather(*(run(unit) for unit in units))
    if skipped:
        log.warning("Cancelled: %d unit(s) skipped and left untranslated", skipped)
    return result
