"""Persistence interface shared by the remote and local stores."""
from typing import Any, Optional

from src.models import Message, PersistedSlide, Session


class SessionStore:
    """
    Storage for sessions, their message logs and their decks.

    Writes are whole-collection replacements: saving messages or slides
    deletes what was stored for the session and writes the given set.
    """

    name = "base"

    async def list_sessions(self, owner: str) -> list[Session]:
        """Sessions owned by ``owner``, most recently updated first."""
        raise NotImplementedError

    async def create_session(self, owner: str, title: str) -> Session:
        raise NotImplementedError

    async def update_session(self, session_id: str, fields: dict[str, Any]) -> Optional[Session]:
        raise NotImplementedError

    async def delete_session(self, session_id: str) -> None:
        """Delete a session together with its messages and slides."""
        raise NotImplementedError

    async def replace_messages(self, session_id: str, messages: list[Message]) -> None:
        raise NotImplementedError

    async def list_messages(self, session_id: str) -> list[Message]:
        """Messages in chronological order."""
        raise NotImplementedError

    async def replace_slides(self, session_id: str, slides: list[PersistedSlide]) -> None:
        raise NotImplementedError

    async def list_slides(self, session_id: str) -> list[PersistedSlide]:
        """Slides ordered by ``order`` ascending."""
        raise NotImplementedError
