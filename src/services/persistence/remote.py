"""
Supabase-backed session store.

Tables:
- sessions: id, user_id, title, created_at, updated_at
- messages: id, session_id, role, content, created_at
- slides:   id, session_id, title, content (json array), order_index
"""
import logging
from datetime import datetime
from typing import Any, Optional

from supabase import AsyncClient, acreate_client

from src.core import PersistenceWriteFailed, get_settings
from src.models import Message, PersistedSlide, Session
from src.models.session import utcnow

from .base import SessionStore

logger = logging.getLogger(__name__)


def _session_from_row(row: dict) -> Session:
    return Session(
        id=str(row["id"]),
        owner=row["user_id"],
        title=row.get("title") or "",
        created_at=row.get("created_at") or utcnow(),
        updated_at=row.get("updated_at") or row.get("created_at") or utcnow(),
    )


def _message_from_row(row: dict) -> Message:
    return Message(
        id=str(row["id"]),
        role=row["role"],
        content=row["content"],
        timestamp=row.get("created_at") or utcnow(),
    )


def _slide_from_row(row: dict) -> PersistedSlide:
    content = row.get("content")
    return PersistedSlide(
        title=row.get("title") or "",
        content=content if isinstance(content, list) else [],
        order=row["order_index"],
    )


class SupabaseSessionStore(SessionStore):
    """Remote store keyed by session id."""

    name = "supabase"

    def __init__(self, client: Optional[AsyncClient] = None):
        self._settings = get_settings()
        self._client = client
        self.sessions_table = self._settings.supabase_sessions_table
        self.messages_table = self._settings.supabase_messages_table
        self.slides_table = self._settings.supabase_slides_table

    async def _get_client(self) -> AsyncClient:
        """
        Get or create the Supabase client.

        Raises:
            RuntimeError: If Supabase is not configured or connection fails
        """
        if self._client is None:
            if not self._settings.has_supabase:
                raise RuntimeError(
                    "Supabase configuration missing. "
                    "Please set SUPABASE_URL and SUPABASE_ANON_KEY environment variables."
                )
            try:
                self._client = await acreate_client(
                    self._settings.supabase_url,
                    self._settings.supabase_anon_key,
                )
                logger.info("Supabase async client initialized successfully")
            except Exception as e:
                logger.error(f"Failed to initialize Supabase client: {e}")
                raise RuntimeError(f"Cannot connect to Supabase: {str(e)}") from e
        return self._client

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    async def list_sessions(self, owner: str) -> list[Session]:
        client = await self._get_client()
        result = await (
            client.table(self.sessions_table)
            .select("*")
            .eq("user_id", owner)
            .order("updated_at", desc=True)
            .execute()
        )
        logger.info(f"Found {len(result.data or [])} sessions for {owner}")
        return [_session_from_row(row) for row in result.data or []]

    async def create_session(self, owner: str, title: str) -> Session:
        client = await self._get_client()
        try:
            result = await (
                client.table(self.sessions_table)
                .insert({"user_id": owner, "title": title})
                .execute()
            )
        except Exception as e:
            logger.error(f"Error creating session: {str(e)}")
            raise PersistenceWriteFailed(f"Could not create session: {e}") from e
        session = _session_from_row(result.data[0])
        logger.info(f"Created session: {session.id}")
        return session

    async def update_session(self, session_id: str, fields: dict[str, Any]) -> Optional[Session]:
        client = await self._get_client()
        updates = {**fields, "updated_at": utcnow().isoformat()}
        # Ownership is fixed once the session exists
        updates.pop("user_id", None)
        updates.pop("owner", None)
        try:
            result = await (
                client.table(self.sessions_table)
                .update(updates)
                .eq("id", session_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error updating session {session_id}: {str(e)}")
            raise PersistenceWriteFailed(f"Could not update session {session_id}: {e}") from e
        logger.info(f"Updated session {session_id}")
        return _session_from_row(result.data[0]) if result.data else None

    async def delete_session(self, session_id: str) -> None:
        client = await self._get_client()
        try:
            await client.table(self.messages_table).delete().eq("session_id", session_id).execute()
            await client.table(self.slides_table).delete().eq("session_id", session_id).execute()
            await client.table(self.sessions_table).delete().eq("id", session_id).execute()
        except Exception as e:
            logger.error(f"Error deleting session {session_id}: {str(e)}")
            raise PersistenceWriteFailed(f"Could not delete session {session_id}: {e}") from e
        logger.info(f"Deleted session {session_id}")

    # -------------------------------------------------------------------------
    # Messages and slides
    # -------------------------------------------------------------------------

    async def replace_messages(self, session_id: str, messages: list[Message]) -> None:
        rows = [
            {
                "session_id": session_id,
                "role": m.role,
                "content": m.content,
                "created_at": _iso(m.timestamp),
            }
            for m in messages
        ]
        await self._replace(self.messages_table, session_id, rows)

    async def list_messages(self, session_id: str) -> list[Message]:
        client = await self._get_client()
        result = await (
            client.table(self.messages_table)
            .select("*")
            .eq("session_id", session_id)
            .order("created_at")
            .execute()
        )
        return [_message_from_row(row) for row in result.data or []]

    async def replace_slides(self, session_id: str, slides: list[PersistedSlide]) -> None:
        rows = [
            {
                "session_id": session_id,
                "title": s.title,
                "content": s.content,
                "order_index": s.order,
            }
            for s in slides
        ]
        await self._replace(self.slides_table, session_id, rows)

    async def list_slides(self, session_id: str) -> list[PersistedSlide]:
        client = await self._get_client()
        result = await (
            client.table(self.slides_table)
            .select("*")
            .eq("session_id", session_id)
            .order("order_index")
            .execute()
        )
        return [_slide_from_row(row) for row in result.data or []]

    async def _replace(self, table: str, session_id: str, rows: list[dict]) -> None:
        """Delete every row for the session, then insert ``rows``."""
        client = await self._get_client()
        try:
            await client.table(table).delete().eq("session_id", session_id).execute()
            if rows:
                await client.table(table).insert(rows).execute()
        except Exception as e:
            logger.error(f"Error saving {table} for session {session_id}: {str(e)}")
            raise PersistenceWriteFailed(f"Could not save {table} for {session_id}: {e}") from e


def _iso(value: datetime) -> str:
    return value.isoformat()
