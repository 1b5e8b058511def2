"""Unit tests for encoding detection."""

from __future__ import annotations

import codecs

import pytest

from cttranslate.document.encoding import (
    DocumentError,
    EncodingContext,
    detect_bom,
    normalize_line_endings,
)


def test_detect_bom_variants():
    assert detect_bom(codecs.BOM_UTF8 + b"<a/>") == ("utf-8", 3)
    assert detect_bom(codecs.BOM_UTF16_LE + "<a/>".encode("utf-16-le")) == ("utf-16-le", 2)
    assert detect_bom(codecs.BOM_UTF16_BE + "<a/>".encode("utf-16-be")) == ("utf-16-be", 2)
    assert detect_bom(codecs.BOM_UTF32_LE + "<a/>".encode("utf-32-le")) == ("utf-32-le", 4)
    assert detect_bom(codecs.BOM_UTF32_BE + "<a/>".encode("utf-32-be")) == ("utf-32-be", 4)
    assert detect_bom(b"<a/>") == ("utf-8", 0)


def test_utf16_declared_generic_keeps_bom_byte_order():
    text = '<?xml version="1.0" encoding="utf-16"?>\r\n<CheatTable/>'
    raw = codecs.BOM_UTF16_LE + text.encode("utf-16-le")
    context, decoded = EncodingContext.detect(raw)
    assert decoded == text
    assert context.encoding == "utf-16-le"
    assert context.has_bom is True
    assert context.declared_encoding == "utf-16"
    assert context.line_ending == "\r\n"
    assert context.encode(decoded) == raw


def test_declared_single_byte_encoding_redecodes():
    text = '<?xml version="1.0" encoding="windows-1252"?>\n<T>café</T>'
    raw = text.encode("cp1252")
    context, decoded = EncodingContext.detect(raw)
    assert context.encoding == "cp1252"
    assert context.has_bom is False
    assert decoded == text
    assert context.encode(decoded) == raw


def test_utf8_bom_round_trip():
    raw = codecs.BOM_UTF8 + "<T>é</T>\n".encode("utf-8")
    context, decoded = EncodingContext.detect(raw)
    assert context.bom == codecs.BOM_UTF8
    assert context.line_ending == "\n"
    assert context.encode(decoded) == raw


def test_unknown_declared_encoding_is_ignored():
    raw = b'<?xml version="1.0" encoding="x-made-up"?><T/>'
    context, _ = EncodingContext.detect(raw)
    assert context.encoding == "utf-8"


def test_undecodable_bytes_raise_document_error():
    with pytest.raises(DocumentError):
        EncodingContext.detect(b"<T>\xc3\x28</T>")


def test_normalize_line_endings():
    assert normalize_line_endings("a\r\nb\rc\nd", "\r\n") == "a\r\nb\r\nc\r\nd"
    assert normalize_line_endings("a\r\nb", "\n") == "a\nb"
    assert normalize_line_endings("", "\r\n") == ""
