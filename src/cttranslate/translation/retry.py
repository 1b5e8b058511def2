"""Bounded retries with linear backoff and identity fallback."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

from ..logs import TranslationLog


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Attempt a unit up to ``max_attempts`` times, sleeping ``base_delay * attempt`` between tries."""

    max_attempts: int = 3
    base_delay: float = 0.5

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * attempt

    async def run(
        self,
        texts: Sequence[str],
        call: Callable[[], Awaitable[dict[str, str]]],
        *,
        cancel: Optional[asyncio.Event] = None,
        log: Optional[TranslationLog] = None,
    ) -> dict[str, str]:
        """Return ``call()``'s mapping, or map every text to itself once retries run out."""

        log = log or TranslationLog()
        attempts = max(1, self.max_attempts)
        for attempt in range(1, attempts + 1):
            if cancel is not None and cancel.is_set():
                log.debug("Cancelled before attempt %d for %d item(s)", attempt, len(texts))
                break
            try:
                return await call()
            except Exception as exc:
                log.warning(
                    "Attempt %d/%d failed for %d item(s): %s",
                    attempt,
                    attempts,
                    len(texts),
                    _describe(exc),
                )
            if attempt < attempts and await _sleep_unless_cancelled(self.delay_for(attempt), cancel):
                break

        log.warning("Falling back to original text for %d item(s)", len(texts))
        return {text: text for text in texts}


async def _sleep_unless_cancelled(delay: float, cancel: Optional[asyncio.Event]) -> bool:
    """Sleep for ``delay`` seconds; return True if ``cancel`` fired meanwhile."""

    if cancel is None:
        await asyncio.sleep(delay)
        return False
    try:
        await asyncio.wait_for(cancel.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return False
    return True


def _describe(exc: BaseException) -> str:
    message = str(exc)
    if len(message) > 200:
        message = message[:200] + "..."
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__
