"""Rewrite the text of marked regions in place, leaving every other byte alone.

A generic XML serializer would reformat the whole table (attribute quoting,
self-closing tags, indentation, entity choices). Instead we scan the decoded
source for ``<Description>`` regions and only splice new inner content into
the regions that actually changed.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterator, Mapping, Optional
from xml.sax.saxutils import escape

from .encoding import normalize_line_endings

logger = logging.getLogger("cttranslate.document")

DEFAULT_TAG = "Description"

CDATA_OPEN = "<![CDATA["
CDATA_CLOSE = "]]>"
CDATA_SECTION_RE = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)

TEXT = "text"
CDATA = "cdata"
EMPTY = "empty"
UNCLASSIFIED = "unclassified"


@lru_cache(maxsize=8)
def region_pattern(tag: str) -> re.Pattern[str]:
    """Match comments and CDATA blocks (to skip them) or one ``tag`` element."""

    name = re.escape(tag)
    return re.compile(
        r"<!--.*?-->"
        r"|<!\[CDATA\[.*?\]\]>"
        rf"|(?P<selfclosed><{name}(?P<sattrs>\s[^>]*?)?\s*/>)"
        rf"|(?P<open><{name}(?:\s[^>]*?)?(?<!/)>)(?P<inner>.*?)(?P<close></{name}\s*>)",
        re.DOTALL,
    )


@dataclass(slots=True)
class Region:
    """One translatable element located in the source text."""

    index: int
    start: int
    end: int
    open_tag: str
    close_tag: str
    inner: Optional[str]
    leading: str = ""
    trailing: str = ""
    core: str = ""
    kind: str = EMPTY
    value: str = ""

    @property
    def self_closing(self) -> bool:
        return self.inner is None


@dataclass(slots=True)
class PatchResult:
    text: str
    changed: list[int] = field(default_factory=list)
    unclassified: list[int] = field(default_factory=list)


def iter_regions(text: str, tag: str = DEFAULT_TAG) -> Iterator[Region]:
    """Lazily yield regions in document order."""

    index = 0
    for match in region_pattern(tag).finditer(text):
        if match.group("selfclosed"):
            attrs = match.group("sattrs") or ""
            yield Region(
                index=index,
                start=match.start(),
                end=match.end(),
                open_tag=f"<{tag}{attrs.rstrip()}>",
                close_tag=f"</{tag}>",
                inner=None,
            )
            index += 1
        elif match.group("open"):
            region = Region(
                index=index,
                start=match.start(),
                end=match.end(),
                open_tag=match.group("open"),
                close_tag=match.group("close"),
                inner=match.group("inner"),
            )
            classify(region)
            yield region
            index += 1


def scan_regions(text: str, tag: str = DEFAULT_TAG) -> list[Region]:
    return list(iter_regions(text, tag))


def classify(region: Region) -> None:
    """Split whitespace padding off the inner text and decode the value."""

    inner = region.inner or ""
    core = inner.strip()
    if not core:
        region.leading, region.core, region.trailing = inner, "", ""
        region.kind, region.value = EMPTY, ""
        return

    start = inner.index(core[0])
    region.leading = inner[:start]
    region.core = core
    region.trailing = inner[start + len(core) :]

    if core.startswith(CDATA_OPEN) and core.endswith(CDATA_CLOSE):
        sections = CDATA_SECTION_RE.findall(core)
        if "".join(f"{CDATA_OPEN}{part}{CDATA_CLOSE}" for part in sections) == core:
            region.kind, region.value = CDATA, "".join(sections)
            return
    elif "<" not in core:
        try:
            decoded = ET.fromstring(f"<v>{core}</v>").text or ""
        except ET.ParseError:
            pass
        else:
            region.kind, region.value = TEXT, decoded
            return

    region.kind, region.value = UNCLASSIFIED, core


def wrap_cdata(value: str) -> str:
    """Wrap in CDATA, splitting any ``]]>`` across two sections."""

    return CDATA_OPEN + value.replace(CDATA_CLOSE, "]]]]><![CDATA[>") + CDATA_CLOSE


def encode_text(value: str) -> str:
    if not value:
        return ""
    return escape(value)


def render_region(region: Region, value: str) -> str:
    """Return the replacement for ``text[region.start:region.end]``."""

    if region.self_closing:
        return f"{region.open_tag}{encode_text(value)}{region.close_tag}"
    if region.kind == CDATA:
        inner = region.leading + wrap_cdata(value) + region.trailing
    else:
        inner = region.leading + encode_text(value) + region.trailing
    return f"{region.open_tag}{inner}{region.close_tag}"


def _same_value(region: Region, value: str) -> bool:
    return normalize_line_endings(value, "\n") == normalize_line_endings(region.value, "\n")


def patch_text(
    text: str,
    replacements: Mapping[int, str],
    *,
    line_ending: str = "\n",
    tag: str = DEFAULT_TAG,
    regions: Optional[list[Region]] = None,
) -> PatchResult:
    """Substitute new values for the regions listed in ``replacements``.

    ``replacements`` maps region index to the new plain-text value. Regions not
    listed, unchanged values and unclassifiable regions are copied verbatim.
    """

    if regions is None:
        regions = scan_regions(text, tag)
    result = PatchResult(text=text)
    if not regions:
        return result

    pieces: list[str] = []
    last = 0
    for region in regions:
        if region.kind == UNCLASSIFIED:
            result.unclassified.append(region.index)
        if region.index not in replacements:
            continue
        if region.kind == UNCLASSIFIED:
            logger.warning(
                "Region %d at offset %d holds markup that is neither text nor CDATA; left unchanged",
                region.index,
                region.start,
            )
            continue
        value = normalize_line_endings(replacements[region.index], line_ending)
        if _same_value(region, value):
            continue
        pieces.append(text[last : region.start])
        pieces.append(render_region(region, value))
        last = region.end
        result.changed.append(region.index)

    if not result.changed:
        return result
    pieces.append(text[last:])
    result.text = "".join(pieces)
    return result
