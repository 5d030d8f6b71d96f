"""
Session synchronizer.

Mirrors the active conversation's message log and deck into the session
store. Saves are replace-on-write and best effort: a failed save is
logged and reported, in-memory state is never rolled back, and the next
successful save supersedes it.
"""
import asyncio
import logging
from typing import Any, Optional

from src.core import PersistenceWriteFailed, SessionLoadFailed
from src.models import Deck, Message, Session
from src.models.slide import from_persisted, tag_with_order

from .base import SessionStore

logger = logging.getLogger(__name__)

LOCAL_SLOT = "local"


class SessionSynchronizer:
    """Keeps one active session in step with a SessionStore."""

    def __init__(self, store: SessionStore, fallback: Optional[SessionStore] = None):
        self._store = store
        # Single-slot store for writes made while no session id exists
        self._fallback = fallback
        self.active_session_id: Optional[str] = None
        self.loading = False
        # Set when the active session could not be loaded; its stored data is unknown
        self.load_failed = False
        self.last_error: Optional[PersistenceWriteFailed] = None

    @property
    def store_name(self) -> str:
        return self._store.name

    @property
    def persistence_error(self) -> Optional[str]:
        """Plain-language warning for the last failed write, if any."""
        return self.last_error.user_message if self.last_error else None

    def is_current(self, session_id: Optional[str]) -> bool:
        """True when writes for ``session_id`` may be applied right now."""
        return (
            session_id is not None
            and session_id == self.active_session_id
            and not self.loading
            and not self.load_failed
        )

    def _target(self, session_id: Optional[str]) -> Optional[SessionStore]:
        if self.is_current(session_id):
            return self._store
        if session_id is None and self.active_session_id is None and not self.loading:
            return self._fallback
        return None

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    async def select(self, session_id: str) -> Optional[tuple[list[Message], Deck]]:
        """
        Make ``session_id`` active and load its messages and deck.

        While loading, writes for any session are refused. If the load
        fails, writes stay refused until a later select succeeds, so empty
        state never replaces the stored log. Returns None if another
        session was selected before this load finished.
        """
        self.active_session_id = session_id
        self.loading = True
        self.load_failed = False
        messages: list[Message] = []
        deck: Deck = []
        try:
            loaded_messages, rows = await asyncio.gather(
                self._store.list_messages(session_id),
                self._store.list_slides(session_id),
            )
            messages, deck = loaded_messages, from_persisted(rows)
            logger.info(f"Loaded {len(messages)} messages and {len(deck)} slides for session {session_id}")
            self.last_error = None
        except Exception as e:
            logger.error(f"Error loading session {session_id}: {e}")
            if self.active_session_id == session_id:
                self.load_failed = True
                self.last_error = SessionLoadFailed(f"Session {session_id} failed to load: {e}")
        finally:
            if self.active_session_id == session_id:
                self.loading = False

        if self.active_session_id != session_id:
            logger.info(f"Session {session_id} was replaced while loading; dropping its data")
            return None
        return messages, deck

    def activate(self, session_id: str) -> None:
        """Make a freshly created (empty) session active without loading."""
        self.active_session_id = session_id
        self.loading = False
        self.load_failed = False

    def deactivate(self) -> None:
        self.active_session_id = None
        self.loading = False
        self.load_failed = False

    async def list_sessions(self, owner: str) -> list[Session]:
        return await self._store.list_sessions(owner)

    async def create_session(self, owner: str, title: str) -> Session:
        return await self._store.create_session(owner, title)

    async def rename(self, session_id: str, title: str) -> bool:
        if self.load_failed and session_id == self.active_session_id:
            logger.debug(f"Skipping title update for unloaded session {session_id}")
            return False
        return await self._attempt(
            f"title for session {session_id}",
            self._store.update_session(session_id, {"title": title}),
        )

    async def delete_session(self, session_id: str) -> None:
        await self._store.delete_session(session_id)
        if session_id == self.active_session_id:
            self.deactivate()

    # -------------------------------------------------------------------------
    # Replace-on-write saves
    # -------------------------------------------------------------------------

    async def save_messages(self, session_id: Optional[str], messages: list[Message]) -> bool:
        store = self._target(session_id)
        if store is None:
            logger.debug(f"Skipping message save for inactive session {session_id}")
            return False
        return await self._attempt(
            f"{len(messages)} messages for session {session_id}",
            store.replace_messages(session_id or LOCAL_SLOT, list(messages)),
        )

    async def save_slides(self, session_id: Optional[str], deck: Deck) -> bool:
        store = self._target(session_id)
        if store is None:
            logger.debug(f"Skipping slide save for inactive session {session_id}")
            return False
        return await self._attempt(
            f"{len(deck)} slides for session {session_id}",
            store.replace_slides(session_id or LOCAL_SLOT, tag_with_order(deck)),
        )

    async def save(self, session_id: Optional[str], messages: list[Message], deck: Deck) -> bool:
        """Save both collections; True only if both writes succeeded."""
        saved_messages = await self.save_messages(session_id, messages)
        message_error = self.last_error
        saved_slides = await self.save_slides(session_id, deck)
        if not saved_messages and message_error is not None:
            # Keep the message failure visible after a successful slide write
            self.last_error = message_error
        return saved_messages and saved_slides

    async def clear_fallback(self) -> bool:
        """Drop whatever the local single slot holds."""
        if self._fallback is None:
            return True
        return await self._attempt("local slot clear", self._fallback.delete_session(LOCAL_SLOT))

    async def _attempt(self, what: str, operation: Any) -> bool:
        try:
            await operation
        except PersistenceWriteFailed as e:
            self.last_error = e
            logger.error(f"Error saving {what}: {e}")
            return False
        except Exception as e:
            self.last_error = PersistenceWriteFailed(str(e))
            logger.error(f"Error saving {what}: {e}")
            return False
        self.last_error = None
        logger.debug(f"Saved {what}")
        return True
