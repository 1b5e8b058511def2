"""Translate the descriptions of a cheat table in one pass."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Optional

from cttranslate.config import get_settings
from cttranslate.logs import configure_logging
from cttranslate.session import TableSession
from cttranslate.storage.config_store import ProviderKind, load_app_config
from cttranslate.translation.factory import build_provider
from cttranslate.translation.orchestrator import TranslationOrchestrator


async def translate_once(
    source: Path, output: Optional[Path], provider_name: Optional[str], target: Optional[str]
) -> None:
    settings = get_settings()
    config = load_app_config(settings.config_path)
    session = TableSession()
    entries = session.load(source)
    if not entries:
        print("No descriptions found in", source)
        return

    provider = build_provider(config, settings, kind=provider_name)
    unique = len({entry.original_text for entry in entries if entry.original_text.strip()})

    def progress(done: int) -> None:
        print(f"\r{done}/{unique} translated", end="", flush=True)

    summary = await session.translate(
        TranslationOrchestrator(provider),
        target or settings.target_language,
        progress=progress,
    )
    print()
    path = session.save(output)
    print(
        f"Translated {summary.matched}/{summary.entries} entries "
        f"({summary.unique_texts} unique) in {summary.elapsed:.2f}s -> {path}"
    )


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Translate cheat table descriptions")
    parser.add_argument("input", type=Path, help="Cheat table (.CT) to translate")
    parser.add_argument("--output", type=Path, default=None, help="Output path (default: <name>_CN.CT)")
    parser.add_argument(
        "--provider",
        choices=[kind.value for kind in ProviderKind],
        default=None,
        help="Override the configured provider",
    )
    parser.add_argument("--target", default=None, help="Target language code (default from settings)")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    configure_logging(get_settings().log_level)
    asyncio.run(translate_once(args.input, args.output, args.provider, args.target))


if __name__ == "__main__":
    main()
