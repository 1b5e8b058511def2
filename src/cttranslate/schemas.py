"""Pydantic schema definitions."""

from typing import List, Optional

from pydantic import BaseModel

from .storage.config_store import ProviderKind


class OpenTableRequest(BaseModel):
    path: str


class Entry(BaseModel):
    index: int
    id: str
    original_text: str
    translated_text: str
    quoted: bool


class SessionInfo(BaseModel):
    session_id: str
    path: str
    encoding: str
    has_bom: bool
    line_ending: str
    entries: int


class EditEntryRequest(BaseModel):
    translated_text: str


class TranslateRequest(BaseModel):
    target_language: Optional[str] = None
    provider: Optional[ProviderKind] = None


class TranslateResponse(BaseModel):
    provider: str
    entries: int
    unique_texts: int
    matched: int
    elapsed: float
    log: List[str]


class SaveRequest(BaseModel):
    output_path: Optional[str] = None


class SaveResponse(BaseModel):
    path: str


class ProviderInfo(BaseModel):
    name: str
    selected: bool
