"""Conversation, session and progress Pydantic models."""
import time
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field, model_validator

Role = Literal["user", "assistant"]

_last_id = 0


def new_message_id() -> str:
    """Creation-time based id, strictly increasing within the process."""
    global _last_id
    candidate = time.time_ns() // 1_000_000
    _last_id = max(candidate, _last_id + 1)
    return str(_last_id)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Message(BaseModel):
    """A single chat turn, owned by exactly one session."""

    id: str = Field(default_factory=new_message_id, description="Unique message id")
    role: Role = Field(..., description="Either 'user' or 'assistant'")
    content: str = Field(..., description="The message content")
    timestamp: datetime = Field(default_factory=utcnow, description="Creation time")


class Session(BaseModel):
    """A saved conversation. The owner never changes once the session exists."""

    id: str = Field(..., description="Session identifier")
    owner: str = Field(..., frozen=True, description="User or anonymous identifier owning the session")
    title: str = Field(default="New Chat", description="Human-readable session label")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class GenerationProgress(BaseModel):
    """Transient export progress event. Never persisted."""

    current: int = Field(..., ge=0, description="Slides processed so far")
    total: int = Field(..., ge=0, description="Slides in the deck")
    status: str = Field(default="", description="Human-readable status line")

    @model_validator(mode="after")
    def check_bounds(self) -> "GenerationProgress":
        if self.current > self.total:
            raise ValueError("current cannot exceed total")
        return self
