"""FastAPI dependencies."""

from functools import lru_cache

from .config import get_settings
from .session import SessionStore
from .storage.config_store import ConfigStore


@lru_cache
def get_session_store() -> SessionStore:
    """Return the process-wide session registry."""

    return SessionStore()


@lru_cache
def get_config_store() -> ConfigStore:
    """Return the persisted provider configuration."""

    return ConfigStore(get_settings().config_path)
