"""Tests for the persisted provider configuration."""

from __future__ import annotations

import json

from cttranslate.storage.config_store import (
    AppConfig,
    ConfigStore,
    ProviderKind,
    TencentConfig,
    load_app_config,
    save_app_config,
)


def test_missing_file_gives_defaults(tmp_path):
    config = load_app_config(tmp_path / "absent.json")
    assert config.selected_provider is ProviderKind.GOOGLE_FREE
    assert config.openai.model == "gpt-3.5-turbo"


def test_malformed_file_gives_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{ not json", encoding="utf-8")
    assert load_app_config(path) == AppConfig()
    path.write_text("[1, 2]", encoding="utf-8")
    assert load_app_config(path) == AppConfig()


def test_unknown_provider_falls_back_to_default(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"selectedProvider": "Babelfish"}), encoding="utf-8")
    assert load_app_config(path).selected_provider is ProviderKind.GOOGLE_FREE


def test_save_writes_camel_case_and_round_trips(tmp_path):
    path = tmp_path / "nested" / "config.json"
    config = AppConfig(
        selected_provider=ProviderKind.TENCENT,
        tencent=TencentConfig(secret_id="id", secret_key="key", region="ap-beijing"),
    )
    save_app_config(config, path)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["selectedProvider"] == "Tencent"
    assert data["tencent"]["secretId"] == "id"
    assert "customSystemPrompt" in data["openAi"]
    assert load_app_config(path) == config
    assert [p.name for p in path.parent.iterdir()] == ["config.json"]


def test_config_store_save_replaces_active_config(tmp_path):
    store = ConfigStore(tmp_path / "config.json")
    assert store.config == AppConfig()
    updated = AppConfig(selected_provider=ProviderKind.OPENAI)
    store.save(updated)
    assert store.config is updated
    assert ConfigStore(store.path).config == updated
