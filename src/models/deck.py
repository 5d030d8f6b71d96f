"""Per-conversation mutable state."""
from dataclasses import dataclass, field
from typing import Optional

from .session import Message
from .slide import Deck, deck_to_json


@dataclass
class ConversationState:
    """
    In-memory state of the active conversation.

    Uses dataclass for mutable state management while a chat turn is
    processed. The deck held here is the canonical deck; persistence and
    export both read from it.
    """
    session_id: Optional[str] = None
    messages: list[Message] = field(default_factory=list)
    slides: Deck = field(default_factory=list)
    raw_json: Optional[str] = None
    title: Optional[str] = None
    titled_session_id: Optional[str] = None
    busy: bool = False
    artifact: Optional[bytes] = None
    exported_fingerprint: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert state to dictionary for API responses."""
        return {
            "session_id": self.session_id,
            "title": self.title,
            "slides": [slide.model_dump() for slide in self.slides],
            "message_count": len(self.messages),
            "slide_count": len(self.slides),
            "has_artifact": self.artifact is not None,
            "busy": self.busy,
        }

    def add_message(self, role: str, content: str) -> Message:
        """Append a message to the conversation log."""
        message = Message(role=role, content=content)
        self.messages = [*self.messages, message]
        return message

    def set_slides(self, slides: Deck) -> None:
        """Replace the canonical deck and its raw JSON view."""
        self.slides = list(slides)
        self.raw_json = deck_to_json(self.slides) if self.slides else None

    def invalidate_artifact(self) -> None:
        """Forget the last export so the next one re-renders."""
        self.artifact = None
        self.exported_fingerprint = None

    def reset(self, session_id: Optional[str] = None) -> None:
        """Drop everything held for the previous session."""
        self.session_id = session_id
        self.messages = []
        self.slides = []
        self.raw_json = None
        self.title = None
        self.titled_session_id = None
        self.busy = False
        self.invalidate_artifact()
