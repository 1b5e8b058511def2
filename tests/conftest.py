"""Pytest fixtures for the table translator tests."""

from __future__ import annotations

from pathlib import Path
from typing import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from cttranslate.config import Settings
from cttranslate.deps import get_config_store, get_session_store
from cttranslate.main import app
from cttranslate.session import SessionStore
from cttranslate.storage.config_store import AppConfig, ConfigStore, ProviderKind, save_app_config


SAMPLE_TABLE = """<?xml version="1.0" encoding="utf-8"?>
<CheatTable CheatEngineTableVersion="45">
  <CheatEntries>
    <CheatEntry>
      <ID>0</ID>
      <Description>"Infinite Health"</Description>
      <VariableType>Auto Assembler Script</VariableType>
      <AssemblerScript><![CDATA[// <Description>not a region</Description>
[ENABLE]
]]></AssemblerScript>
    </CheatEntry>
    <CheatEntry>
      <ID>1</ID>
      <Description><![CDATA[Gold & Gems]]></Description>
      <CheatEntries>
        <CheatEntry>
          <ID>2</ID>
          <Description>"Infinite Health"</Description>
        </CheatEntry>
      </CheatEntries>
    </CheatEntry>
    <!-- <Description>commented out</Description> -->
    <CheatEntry>
      <ID>3</ID>
      <Description>Speed &amp; Jump</Description>
    </CheatEntry>
  </CheatEntries>
  <UserdefinedSymbols/>
</CheatTable>
"""


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_TABLE


@pytest.fixture
def sample_path(tmp_path: Path) -> Path:
    path = tmp_path / "Game.CT"
    path.write_bytes(SAMPLE_TABLE.encode("utf-8"))
    return path


@pytest.fixture(scope="function")
def test_settings() -> Settings:
    """Provide test-specific settings without backoff or throttling delays."""
    return Settings(
        app_env="test",
        log_level="DEBUG",
        max_concurrency=5,
        max_retries=3,
        retry_base_delay=0.0,
        throttle_delay=0.0,
        request_timeout=5.0,
    )


@pytest.fixture(scope="function")
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "config.json"
    save_app_config(AppConfig(selected_provider=ProviderKind.MOCK), path)
    return path


@pytest_asyncio.fixture(scope="function")
async def test_client(config_path: Path) -> AsyncIterator[AsyncClient]:
    """Provide an async HTTP client for the FastAPI app with isolated stores."""

    store = SessionStore()
    config_store = ConfigStore(config_path)
    app.dependency_overrides[get_session_store] = lambda: store
    app.dependency_overrides[get_config_store] = lambda: config_store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_session_store, None)
    app.dependency_overrides.pop(get_config_store, None)
