"""Data models for SlideChat."""

from .slide import Slide, PersistedSlide, Deck, deck_to_json, deck_fingerprint
from .session import Message, Session, GenerationProgress
from .deck import ConversationState

__all__ = [
    "Slide",
    "PersistedSlide",
    "Deck",
    "deck_to_json",
    "deck_fingerprint",
    "Message",
    "Session",
    "GenerationProgress",
    "ConversationState",
]
