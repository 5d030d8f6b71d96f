"""Persistence of sessions, messages and decks."""
import logging
from typing import Optional

from src.core import get_settings

from .base import SessionStore
from .grouping import date_category, group_sessions_by_date
from .local import FileKeyValueStore, LocalSessionStore
from .remote import SupabaseSessionStore
from .synchronizer import SessionSynchronizer

logger = logging.getLogger(__name__)

_session_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """
    Get the session store, chosen once from configuration.

    Supabase when SUPABASE_URL and SUPABASE_ANON_KEY are set, otherwise the
    local single-slot fallback.
    """
    global _session_store
    if _session_store is None:
        settings = get_settings()
        if settings.has_supabase:
            _session_store = SupabaseSessionStore()
        else:
            _session_store = LocalSessionStore(FileKeyValueStore(settings.local_store_dir))
        logger.info(f"Persistence backend: {_session_store.name}")
    return _session_store


def get_session_synchronizer() -> SessionSynchronizer:
    """
    Build a synchronizer over the configured store.

    Writes made before any session exists go to the local single slot.
    """
    store = get_session_store()
    if isinstance(store, LocalSessionStore):
        return SessionSynchronizer(store, fallback=store)
    local = LocalSessionStore(FileKeyValueStore(get_settings().local_store_dir))
    return SessionSynchronizer(store, fallback=local)


__all__ = [
    "SessionStore",
    "FileKeyValueStore",
    "LocalSessionStore",
    "SupabaseSessionStore",
    "SessionSynchronizer",
    "get_session_store",
    "get_session_synchronizer",
    "date_category",
    "group_sessions_by_date",
]
