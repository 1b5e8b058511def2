"""Cheat table loading, entry extraction and saving."""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from ..storage.files import write_atomic
from .encoding import DocumentError, EncodingContext
from .patcher import DEFAULT_TAG, UNCLASSIFIED, PatchResult, Region, patch_text, scan_regions

logger = logging.getLogger("cttranslate.document")

ENTRY_TAG = "CheatEntry"
ID_TAG = "ID"
XML_DECLARATION_RE = re.compile(r"^\s*<\?xml[^>]*\?>")


@dataclass(slots=True)
class Entry:
    """An editable description tied to a region of the loaded table.

    ``structural_ref`` is the region ordinal in the source text. ``quoted``
    means the stored value was wrapped in literal double quotes, which are
    hidden while editing and put back on save.
    """

    id: str
    original_text: str
    translated_text: str
    structural_ref: int
    quoted: bool = False

    @property
    def stored_value(self) -> str:
        return f'"{self.translated_text}"' if self.quoted else self.translated_text

    @property
    def modified(self) -> bool:
        return self.translated_text != self.original_text


def split_quotes(value: str) -> tuple[str, bool]:
    """Strip one pair of wrapping double quotes, reporting whether it was there."""

    stripped = value.strip()
    if len(stripped) >= 2 and stripped.startswith('"') and stripped.endswith('"'):
        return stripped[1:-1], True
    return stripped, False


class CheatTable:
    """A loaded table: decoded source text, its encoding and description regions."""

    def __init__(
        self,
        text: str,
        encoding: EncodingContext,
        *,
        source_path: Optional[Path] = None,
        tag: str = DEFAULT_TAG,
    ) -> None:
        self.text = text
        self.encoding = encoding
        self.source_path = source_path
        self.tag = tag
        self.root = _parse(text)
        self.regions: list[Region] = scan_regions(text, tag)
        tree_count = sum(1 for _ in self.root.iter(tag))
        if tree_count != len(self.regions):
            raise DocumentError(
                f"Found {len(self.regions)} <{tag}> regions in the text but {tree_count} in the tree"
            )

    @classmethod
    def from_bytes(cls, raw: bytes, *, source_path: Optional[Path] = None) -> CheatTable:
        context, text = EncodingContext.detect(raw)
        return cls(text, context, source_path=source_path)

    @classmethod
    def load(cls, path: Path | str) -> CheatTable:
        file_path = Path(path)
        try:
            raw = file_path.read_bytes()
        except OSError as exc:
            raise DocumentError(f"Cannot read {file_path}: {exc}") from exc
        table = cls.from_bytes(raw, source_path=file_path)
        logger.info(
            "Loaded %s (%s%s, %d regions)",
            file_path,
            table.encoding.encoding,
            " with BOM" if table.encoding.has_bom else "",
            len(table.regions),
        )
        return table

    def entries(self) -> list[Entry]:
        """Build one entry per cheat entry that has a description."""

        ordinals = {id(element): index for index, element in enumerate(self.root.iter(self.tag))}
        entries: list[Entry] = []
        for cheat in self.root.iter(ENTRY_TAG):
            description = cheat.find(self.tag)
            if description is None:
                continue
            region = self.regions[ordinals[id(description)]]
            if region.kind == UNCLASSIFIED:
                logger.warning("Skipping entry with unsupported description markup at offset %d", region.start)
                continue
            text, quoted = split_quotes(region.value)
            entries.append(
                Entry(
                    id=(cheat.findtext(ID_TAG) or "N/A").strip(),
                    original_text=text,
                    translated_text=text,
                    structural_ref=region.index,
                    quoted=quoted,
                )
            )
        return entries

    def patch(self, entries: Iterable[Entry]) -> PatchResult:
        replacements = {entry.structural_ref: entry.stored_value for entry in entries if entry.modified}
        return patch_text(
            self.text,
            replacements,
            line_ending=self.encoding.line_ending,
            tag=self.tag,
            regions=self.regions,
        )

    def render(self, entries: Iterable[Entry]) -> bytes:
        """Encode the patched text with the source's encoding and BOM."""

        return self.encoding.encode(self.patch(entries).text)

    def save(self, entries: Iterable[Entry], path: Path | str) -> Path:
        result = self.patch(entries)
        data = self.encoding.encode(result.text)
        try:
            target = write_atomic(path, data)
        except OSError as exc:
            raise DocumentError(f"Cannot write {path}: {exc}") from exc
        logger.info("Saved %s (%d description(s) rewritten)", target, len(result.changed))
        return target


def _parse(text: str) -> ET.Element:
    try:
        return ET.fromstring(XML_DECLARATION_RE.sub("", text, count=1))
    except ET.ParseError as exc:
        raise DocumentError(f"Malformed table: {exc}") from exc
