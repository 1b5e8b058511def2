"""Source encoding detection so a table is written back the way it was read."""

from __future__ import annotations

import codecs
import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger("cttranslate.document")


class DocumentError(Exception):
    """A table could not be read, decoded, parsed or written."""


# Longest signatures first: the UTF-32LE BOM starts with the UTF-16LE one.
BOMS: tuple[tuple[bytes, str], ...] = (
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)
BOM_FOR_ENCODING = {name: bom for bom, name in BOMS}

DECLARATION_RE = re.compile(
    r"<\?xml[^>]*encoding\s*=\s*[\"'](?P<enc>[^\"']+)[\"']", re.IGNORECASE
)

# Declared names that only name a family; the byte order comes from the BOM.
_FAMILIES = ("utf-16", "utf-32")


def detect_bom(raw: bytes) -> tuple[str, int]:
    """Return ``(encoding, bom_length)``; BOM-less input is UTF-8."""

    for bom, name in BOMS:
        if raw.startswith(bom):
            return name, len(bom)
    return "utf-8", 0


def declared_encoding(text: str) -> Optional[str]:
    match = DECLARATION_RE.search(text[:1024])
    return match.group("enc").strip() if match else None


def resolve_declared(name: str, bom_encoding: str, has_bom: bool) -> Optional[str]:
    """Map a declared encoding name to a codec name, or None when unusable."""

    try:
        canonical = codecs.lookup(name).name
    except LookupError:
        logger.warning("Ignoring unknown declared encoding %r", name)
        return None
    if canonical in _FAMILIES:
        if has_bom and bom_encoding.startswith(canonical):
            return bom_encoding
        # Without a matching BOM the bytes we just read contradict the declaration.
        logger.warning("Declared %s does not match the %s byte stream", name, bom_encoding)
        return None
    return canonical


def dominant_line_ending(text: str) -> str:
    return "\r\n" if "\r\n" in text else "\n"


def normalize_line_endings(text: str, line_ending: str) -> str:
    if not text:
        return ""
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return normalized if line_ending == "\n" else normalized.replace("\n", line_ending)


@dataclass(frozen=True, slots=True)
class EncodingContext:
    """How a source file was encoded; reused unchanged to encode the output."""

    encoding: str = "utf-8"
    has_bom: bool = False
    declared_encoding: Optional[str] = None
    line_ending: str = "\n"

    @property
    def bom(self) -> bytes:
        return BOM_FOR_ENCODING.get(self.encoding, b"") if self.has_bom else b""

    @classmethod
    def detect(cls, raw: bytes) -> tuple[EncodingContext, str]:
        """Detect the context of ``raw`` and return it with the decoded text."""

        bom_encoding, bom_length = detect_bom(raw)
        has_bom = bom_length > 0
        body = raw[bom_length:]
        text: Optional[str] = None
        if has_bom:
            text = _decode(body, bom_encoding)
            declared = declared_encoding(text)
        else:
            # The declaration is ASCII in every BOM-less encoding we accept.
            declared = declared_encoding(body[:1024].decode("latin-1"))

        encoding = bom_encoding
        if declared:
            resolved = resolve_declared(declared, bom_encoding, has_bom)
            if resolved and codecs.lookup(resolved).name != codecs.lookup(bom_encoding).name:
                logger.info("Declared encoding %s overrides %s", resolved, bom_encoding)
                encoding = resolved
                text = None
        if text is None:
            text = _decode(body, encoding)

        context = cls(
            encoding=encoding,
            has_bom=has_bom,
            declared_encoding=declared,
            line_ending=dominant_line_ending(text),
        )
        return context, text

    def encode(self, text: str) -> bytes:
        try:
            encoded = text.encode(self.encoding)
        except UnicodeEncodeError as exc:
            raise DocumentError(f"Text cannot be encoded as {self.encoding}: {exc}") from exc
        return self.bom + encoded


def _decode(body: bytes, encoding: str) -> str:
    try:
        return body.decode(encoding)
    except (UnicodeDecodeError, LookupError) as exc:
        raise DocumentError(f"Cannot decode table as {encoding}: {exc}") from exc
