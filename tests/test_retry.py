"""Tests for the retry and identity-fallback policy."""

from __future__ import annotations

import asyncio

import pytest

from cttranslate.logs import TranslationLog
from cttranslate.translation import retry as retry_module
from cttranslate.translation.retry import RetryPolicy


@pytest.mark.asyncio
async def test_recovers_after_transient_failures():
    calls = 0

    async def flaky():
        nonlocal calls
        calls += 1
        if calls < 3:
            raise ConnectionError("reset by peer")
        return {"a": "A"}

    result = await RetryPolicy(max_attempts=3, base_delay=0).run(["a"], flaky)
    assert result == {"a": "A"}
    assert calls == 3


@pytest.mark.asyncio
async def test_exhaustion_falls_back_to_identity():
    calls = 0
    messages: list[str] = []

    async def broken():
        nonlocal calls
        calls += 1
        raise ValueError("not json")

    policy = RetryPolicy(max_attempts=3, base_delay=0)
    result = await policy.run(["a", "b"], broken, log=TranslationLog(sink=messages.append))
    assert result == {"a": "a", "b": "b"}
    assert calls == 3
    assert any("Falling back" in message for message in messages)


@pytest.mark.asyncio
async def test_backoff_grows_linearly(monkeypatch):
    delays: list[float] = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(retry_module.asyncio, "sleep", fake_sleep)

    async def broken():
        raise RuntimeError("boom")

    await RetryPolicy(max_attempts=4, base_delay=0.5).run(["a"], broken)
    assert delays == [0.5, 1.0, 1.5]


@pytest.mark.asyncio
async def test_cancel_interrupts_backoff():
    cancel = asyncio.Event()
    calls = 0

    async def broken():
        nonlocal calls
        calls += 1
        cancel.set()
        raise RuntimeError("boom")

    policy = RetryPolicy(max_attempts=3, base_delay=30)
    result = await asyncio.wait_for(policy.run(["a"], broken, cancel=cancel), timeout=5)
    assert result == {"a": "a"}
    assert calls == 1


@pytest.mark.asyncio
async def test_cancel_before_start_makes_no_call():
    cancel = asyncio.Event()
    cancel.set()

    async def never():
        raise AssertionError("should not run")

    result = await RetryPolicy().run(["a"], never, cancel=cancel)
    assert result == {"a": "a"}
