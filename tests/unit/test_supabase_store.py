"""
Unit tests for the Supabase session store against a mocked client.
"""
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import pytest

from src.core import PersistenceWriteFailed
from src.models import Message, PersistedSlide
from src.services.persistence.remote import SupabaseSessionStore


def _query(data=None, error: Exception | None = None) -> MagicMock:
    """A chainable query builder whose execute() resolves to ``data``."""
    query = MagicMock()
    for method in ("select", "eq", "order", "insert", "update", "delete"):
        getattr(query, method).return_value = query
    if error is not None:
        query.execute = AsyncMock(side_effect=error)
    else:
        query.execute = AsyncMock(return_value=Mock(data=data or []))
    return query


def _store(query: MagicMock) -> tuple[SupabaseSessionStore, MagicMock]:
    client = MagicMock()
    client.table.return_value = query
    settings = Mock()
    settings.supabase_sessions_table = "sessions"
    settings.supabase_messages_table = "messages"
    settings.supabase_slides_table = "slides"
    with patch("src.services.persistence.remote.get_settings", return_value=settings):
        store = SupabaseSessionStore(client=client)
    return store, client


class TestSupabaseSessionStore:
    """Tests for SupabaseSessionStore."""

    @pytest.mark.asyncio
    async def test_list_sessions_newest_first(self):
        rows = [
            {"id": "2", "user_id": "alice", "title": "Tea", "created_at": "2026-10-18T10:00:00+00:00",
             "updated_at": "2026-10-19T10:00:00+00:00"},
            {"id": "1", "user_id": "alice", "title": "Cats", "created_at": "2026-10-01T10:00:00+00:00",
             "updated_at": "2026-10-02T10:00:00+00:00"},
        ]
        query = _query(rows)
        store, client = _store(query)

        sessions = await store.list_sessions("alice")

        client.table.assert_called_with("sessions")
        query.eq.assert_called_with("user_id", "alice")
        query.order.assert_called_with("updated_at", desc=True)
        assert [s.id for s in sessions] == ["2", "1"]
        assert sessions[0].owner == "alice"

    @pytest.mark.asyncio
    async def test_create_session(self):
        query = _query([{"id": "abc", "user_id": "alice", "title": "New Chat",
                         "created_at": "2026-10-19T10:00:00+00:00"}])
        store, _ = _store(query)

        session = await store.create_session("alice", "New Chat")

        query.insert.assert_called_with({"user_id": "alice", "title": "New Chat"})
        assert session.id == "abc"
        assert session.title == "New Chat"

    @pytest.mark.asyncio
    async def test_update_never_changes_owner(self):
        query = _query([])
        store, _ = _store(query)

        await store.update_session("abc", {"title": "Tea", "user_id": "mallory"})

        updates = query.update.call_args.args[0]
        assert updates["title"] == "Tea"
        assert "user_id" not in updates
        assert "updated_at" in updates

    @pytest.mark.asyncio
    async def test_replace_slides_deletes_then_inserts(self):
        query = _query()
        store, client = _store(query)

        await store.replace_slides("abc", [PersistedSlide(title="A", content=["x"], order=0)])

        client.table.assert_called_with("slides")
        query.delete.assert_called_once()
        query.insert.assert_called_once_with([
            {"session_id": "abc", "title": "A", "content": ["x"], "order_index": 0}
        ])

    @pytest.mark.asyncio
    async def test_replace_with_nothing_only_deletes(self):
        query = _query()
        store, _ = _store(query)

        await store.replace_messages("abc", [])

        query.delete.assert_called_once()
        query.insert.assert_not_called()

    @pytest.mark.asyncio
    async def test_replace_messages_rows(self):
        query = _query()
        store, _ = _store(query)
        message = Message(role="user", content="hi")

        await store.replace_messages("abc", [message])

        rows = query.insert.call_args.args[0]
        assert rows[0]["session_id"] == "abc"
        assert rows[0]["role"] == "user"
        assert rows[0]["content"] == "hi"

    @pytest.mark.asyncio
    async def test_list_slides_maps_order_index(self):
        query = _query([
            {"title": "A", "content": ["x"], "order_index": 0},
            {"title": "B", "content": None, "order_index": 1},
        ])
        store, _ = _store(query)

        rows = await store.list_slides("abc")

        query.order.assert_called_with("order_index")
        assert [(r.title, r.order) for r in rows] == [("A", 0), ("B", 1)]
        assert rows[1].content == []

    @pytest.mark.asyncio
    async def test_delete_cascades(self):
        query = _query()
        store, client = _store(query)

        await store.delete_session("abc")

        assert [c.args[0] for c in client.table.call_args_list] == ["messages", "slides", "sessions"]

    @pytest.mark.asyncio
    async def test_write_failure_wrapped(self):
        store, _ = _store(_query(error=RuntimeError("network down")))

        with pytest.raises(PersistenceWriteFailed):
            await store.replace_slides("abc", [])

    @pytest.mark.asyncio
    async def test_unconfigured_client(self):
        settings = Mock()
        settings.has_supabase = False
        with patch("src.services.persistence.remote.get_settings", return_value=settings):
            store = SupabaseSessionStore()

        with pytest.raises(RuntimeError):
            await store.list_sessions("alice")
