"""
Local fallback store.

A flat key/value byte store with two fixed keys: one for the message log
and one for the deck. It holds a single slot, so session ids are ignored
for reads and writes. A missing key reads as an empty collection.
"""
import json
import logging
import re
import time
from pathlib import Path
from typing import Any, Optional

from src.core import PersistenceWriteFailed
from src.models import Message, PersistedSlide, Session

from .base import SessionStore

logger = logging.getLogger(__name__)

MESSAGES_KEY = "slidechat-messages"
SLIDES_KEY = "slidechat-slides"

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileKeyValueStore:
    """Byte values stored as one file per key under a directory."""

    def __init__(self, root: Path):
        self._root = Path(root)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid key: {key!r}")
        return self._root / key

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, key: str, value: bytes) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_bytes(value)
        tmp.replace(path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class LocalSessionStore(SessionStore):
    """Single-slot store used when no remote store is configured."""

    name = "local"

    def __init__(self, kv_store: FileKeyValueStore):
        self._kv = kv_store

    async def list_sessions(self, owner: str) -> list[Session]:
        return []

    async def create_session(self, owner: str, title: str) -> Session:
        session_id = f"session-{time.time_ns() // 1_000_000}"
        logger.info(f"Using local session: {session_id}")
        return Session(id=session_id, owner=owner, title=title)

    async def update_session(self, session_id: str, fields: dict[str, Any]) -> Optional[Session]:
        return None

    async def delete_session(self, session_id: str) -> None:
        self._kv.delete(MESSAGES_KEY)
        self._kv.delete(SLIDES_KEY)

    async def replace_messages(self, session_id: str, messages: list[Message]) -> None:
        self._write(MESSAGES_KEY, [m.model_dump(mode="json") for m in messages])

    async def list_messages(self, session_id: str) -> list[Message]:
        return [Message.model_validate(item) for item in self._read(MESSAGES_KEY)]

    async def replace_slides(self, session_id: str, slides: list[PersistedSlide]) -> None:
        self._write(SLIDES_KEY, [s.model_dump() for s in slides])

    async def list_slides(self, session_id: str) -> list[PersistedSlide]:
        rows = [PersistedSlide.model_validate(item) for item in self._read(SLIDES_KEY)]
        return sorted(rows, key=lambda r: r.order)

    def _write(self, key: str, items: list[dict]) -> None:
        try:
            if items:
                self._kv.set(key, json.dumps(items).encode("utf-8"))
            else:
                self._kv.delete(key)
        except OSError as e:
            raise PersistenceWriteFailed(f"Failed to write {key}: {e}") from e

    def _read(self, key: str) -> list[dict]:
        raw = self._kv.get(key)
        if not raw:
            return []
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable local value for {key}: {e}")
            return []
        return data if isinstance(data, list) else []
