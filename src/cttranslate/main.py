"""FastAPI application entrypoint."""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, HTTPException, Response, status

from .config import get_settings
from .deps import get_config_store, get_session_store
from .document.encoding import DocumentError
from .document.table import Entry
from .logs import TranslationLog, configure_logging
from .schemas import (
    EditEntryRequest,
    Entry as EntrySchema,
    OpenTableRequest,
    ProviderInfo,
    SaveRequest,
    SaveResponse,
    SessionInfo,
    TranslateRequest,
    TranslateResponse,
)
from .session import SessionStore, TableSession
from .storage.config_store import AppConfig, ConfigStore, ProviderKind
from .translation.factory import build_provider
from .translation.orchestrator import TranslationOrchestrator


settings = get_settings()

configure_logging(settings.log_level)
logger = logging.getLogger("cttranslate.api")

app = FastAPI(title="Cheat Table Translator", version="0.1.0")


def _session_or_404(store: SessionStore, session_id: str) -> TableSession:
    try:
        return store.get(session_id)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown session") from None


def _session_info(session_id: str, session: TableSession) -> SessionInfo:
    try:
        table = session.require_table()
    except DocumentError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return SessionInfo(
        session_id=session_id,
        path=str(session.path),
        encoding=table.encoding.encoding,
        has_bom=table.encoding.has_bom,
        line_ending="crlf" if table.encoding.line_ending == "\r\n" else "lf",
        entries=len(session.entries),
    )


def _entry_schema(index: int, entry: Entry) -> EntrySchema:
    return EntrySchema(
        index=index,
        id=entry.id,
        original_text=entry.original_text,
        translated_text=entry.translated_text,
        quoted=entry.quoted,
    )


@app.get("/health", tags=["system"])
async def health() -> dict[str, str]:
    """Simple health probe endpoint."""

    return {"status": "ok", "env": settings.app_env}


@app.get("/providers", response_model=list[ProviderInfo], tags=["config"])
async def list_providers(config_store: ConfigStore = Depends(get_config_store)) -> list[ProviderInfo]:
    selected = config_store.config.selected_provider
    return [ProviderInfo(name=kind.value, selected=kind is selected) for kind in ProviderKind]


@app.get("/config", tags=["config"])
async def read_config(config_store: ConfigStore = Depends(get_config_store)) -> dict:
    return config_store.config.model_dump(mode="json", by_alias=True)


@app.put("/config", tags=["config"])
async def write_config(payload: AppConfig, config_store: ConfigStore = Depends(get_config_store)) -> dict:
    """Atomically persist a new provider configuration."""

    config_store.save(payload)
    return payload.model_dump(mode="json", by_alias=True)


@app.post("/sessions", response_model=SessionInfo, tags=["sessions"], status_code=status.HTTP_201_CREATED)
async def open_table(
    payload: OpenTableRequest,
    store: SessionStore = Depends(get_session_store),
) -> SessionInfo:
    session_id, session = store.create()
    try:
        session.load(payload.path)
    except DocumentError as exc:
        store.discard(session_id)
        logger.warning("Failed to open %s: %s", payload.path, exc)
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return _session_info(session_id, session)


@app.get("/sessions/{session_id}/entries", response_model=list[EntrySchema], tags=["sessions"])
async def list_entries(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> list[EntrySchema]:
    session = _session_or_404(store, session_id)
    return [_entry_schema(index, entry) for index, entry in enumerate(session.entries)]


@app.patch("/sessions/{session_id}/entries/{index}", response_model=EntrySchema, tags=["sessions"])
async def edit_entry(
    session_id: str,
    index: int,
    payload: EditEntryRequest,
    store: SessionStore = Depends(get_session_store),
) -> EntrySchema:
    session = _session_or_404(store, session_id)
    try:
        entry = session.edit(index, payload.translated_text)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown entry") from None
    return _entry_schema(index, entry)


@app.post("/sessions/{session_id}/translate", response_model=TranslateResponse, tags=["sessions"])
async def translate_session(
    session_id: str,
    payload: TranslateRequest,
    store: SessionStore = Depends(get_session_store),
    config_store: ConfigStore = Depends(get_config_store),
) -> TranslateResponse:
    """Translate every entry of the session with the selected (or requested) provider."""

    session = _session_or_404(store, session_id)
    messages: list[str] = []
    log = TranslationLog(sink=messages.append)
    provider = build_provider(config_store.config, settings, kind=payload.provider, log=log)
    target = payload.target_language or settings.target_language
    logger.info("POST /translate: session=%s provider=%s target=%s", session_id, provider.name, target)
    summary = await session.translate(TranslationOrchestrator(provider, log=log), target)
    return TranslateResponse(
        provider=provider.name,
        entries=summary.entries,
        unique_texts=summary.unique_texts,
        matched=summary.matched,
        elapsed=summary.elapsed,
        log=messages,
    )


@app.post("/sessions/{session_id}/save", response_model=SaveResponse, tags=["sessions"])
async def save_session(
    session_id: str,
    payload: SaveRequest,
    store: SessionStore = Depends(get_session_store),
) -> SaveResponse:
    session = _session_or_404(store, session_id)
    try:
        path = session.save(payload.output_path)
    except DocumentError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return SaveResponse(path=str(path))


@app.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["sessions"])
async def close_session(session_id: str, store: SessionStore = Depends(get_session_store)) -> Response:
    _session_or_404(store, session_id)
    store.discard(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
