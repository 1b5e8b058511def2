"""In-memory state of an opened table: the document plus its editable entries."""

from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path
from typing import Optional

from .document.encoding import DocumentError
from .document.table import CheatTable, Entry
from .translation.base import ProgressSink
from .translation.orchestrator import TranslationOrchestrator, TranslationSummary

logger = logging.getLogger("cttranslate.session")

OUTPUT_SUFFIX = "_CN"


class TableSession:
    """Open, edit, translate and save one cheat table."""

    def __init__(self) -> None:
        self.table: Optional[CheatTable] = None
        self.entries: list[Entry] = []
        self.path: Optional[Path] = None

    @property
    def loaded(self) -> bool:
        return self.table is not None

    def load(self, path: Path | str) -> list[Entry]:
        """Replace the session contents; on failure the previous table stays open."""

        file_path = Path(path)
        table = CheatTable.load(file_path)
        entries = table.entries()
        self.table, self.entries, self.path = table, entries, file_path
        logger.info("Loaded %d entries from %s", len(entries), file_path)
        return entries

    def clear(self) -> None:
        self.table = None
        self.entries = []
        self.path = None

    def edit(self, index: int, text: str) -> Entry:
        try:
            entry = self.entries[index]
        except IndexError:
            raise KeyError(index) from None
        entry.translated_text = text
        return entry

    def default_output_path(self) -> Path:
        if self.path is None:
            raise DocumentError("No table loaded")
        return self.path.with_name(f"{self.path.stem}{OUTPUT_SUFFIX}{self.path.suffix}")

    def save(self, path: Path | str | None = None) -> Path:
        table = self.require_table()
        target = Path(path) if path is not None else self.default_output_path()
        return table.save(self.entries, target)

    async def translate(
        self,
        orchestrator: TranslationOrchestrator,
        target_language: str,
        *,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> TranslationSummary:
        self.require_table()
        return await orchestrator.translate_entries(
            self.entries, target_language, progress=progress, cancel=cancel
        )

    def require_table(self) -> CheatTable:
        if self.table is None:
            raise DocumentError("No table loaded")
        return self.table


class SessionStore:
    """Sessions keyed by id for the HTTP surface."""

    def __init__(self) -> None:
        self._sessions: dict[str, TableSession] = {}

    def create(self) -> tuple[str, TableSession]:
        session_id = uuid.uuid4().hex
        session = TableSession()
        self._sessions[session_id] = session
        return session_id, session

    def get(self, session_id: str) -> TableSession:
        return self._sessions[session_id]

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
