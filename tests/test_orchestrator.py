"""Tests for the orchestration facade."""

from __future__ import annotations

import pytest

from cttranslate.document.table import CheatTable, Entry
from cttranslate.translation.base import BatchTranslationProvider
from cttranslate.translation.batching import chunk_by_count
from cttranslate.translation.mock import MockTranslationProvider
from cttranslate.translation.orchestrator import TranslationOrchestrator, clean_translation
from cttranslate.translation.retry import RetryPolicy


class RecordingProvider(BatchTranslationProvider):
    name = "Recording"

    def __init__(self, replies: dict[str, str], **kwargs) -> None:
        super().__init__(**kwargs)
        self.replies = replies
        self.sent: list[str] = []

    def plan_units(self, texts):
        return chunk_by_count(texts, 10)

    async def translate_unit(self, client, unit, target_language):
        self.sent.extend(unit)
        return [self.replies.get(text, text) for text in unit]


class BrokenProvider(RecordingProvider):
    async def translate_unit(self, client, unit, target_language):
        raise ConnectionError("offline")


def _entries(*texts: str) -> list[Entry]:
    return [Entry(id=str(i), original_text=t, translated_text=t, structural_ref=i) for i, t in enumerate(texts)]


@pytest.mark.asyncio
async def test_duplicates_are_sent_once_and_applied_everywhere():
    provider = RecordingProvider({"Health": "Santé", "Ammo": "Munitions"})
    entries = _entries("Health", "Ammo", "Health", "")
    summary = await TranslationOrchestrator(provider).translate_entries(entries, "fr")
    assert sorted(provider.sent) == ["Ammo", "Health"]
    assert [entry.translated_text for entry in entries] == ["Santé", "Munitions", "Santé", ""]
    assert summary.unique_texts == 2
    assert summary.matched == 3
    assert summary.entries == 4


@pytest.mark.asyncio
async def test_total_failure_leaves_entries_untranslated():
    provider = BrokenProvider({}, retry=RetryPolicy(max_attempts=2, base_delay=0))
    entries = _entries("One", "Two")
    summary = await TranslationOrchestrator(provider).translate_entries(entries, "fr")
    assert [entry.translated_text for entry in entries] == ["One", "Two"]
    assert summary.matched == 2


@pytest.mark.asyncio
async def test_engine_added_quotes_are_removed():
    provider = RecordingProvider({"God Mode": "“上帝模式”", "Say": 'He said “hi”'})
    entries = _entries("God Mode", "Say")
    await TranslationOrchestrator(provider).translate_entries(entries, "zh-CN")
    assert entries[0].translated_text == "上帝模式"
    assert entries[1].translated_text == 'He said "hi"'


@pytest.mark.asyncio
async def test_translate_and_save_keeps_quotes(sample_text):
    table = CheatTable.from_bytes(sample_text.encode("utf-8"))
    entries = table.entries()
    await TranslationOrchestrator(MockTranslationProvider()).translate_entries(entries, "zh-CN")
    output = table.render(entries).decode("utf-8")
    assert output.count('<Description>"[MT] Infinite Health"</Description>') == 2
    assert "<![CDATA[[MT] Gold & Gems]]>" in output
    assert "<Description>[MT] Speed &amp; Jump</Description>" in output


def test_clean_translation():
    assert clean_translation('  "quoted"  ') == "quoted"
    assert clean_translation('"') == '"'
    assert clean_translation("plain") == "plain"


@pytest.mark.asyncio
async def test_total_failure_saves_table_unchanged():
    raw = (
        "<CheatTable><CheatEntries>"
        '<CheatEntry><ID>0</ID><Description>" Padded "</Description></CheatEntry>'
        "<CheatEntry><ID>1</ID><Description>The “Boss” HP</Description></CheatEntry>"
        "</CheatEntries></CheatTable>"
    ).encode("utf-8")
    table = CheatTable.from_bytes(raw)
    entries = table.entries()
    provider = BrokenProvider({}, retry=RetryPolicy(max_attempts=1, base_delay=0))
    summary = await TranslationOrchestrator(provider).translate_entries(entries, "fr")
    assert summary.matched == 2
    assert [entry.translated_text for entry in entries] == [" Padded ", "The “Boss” HP"]
    assert not any(entry.modified for entry in entries)
    assert table.render(entries) == raw
