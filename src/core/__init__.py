"""Core configuration module for SlideChat."""

from .config import Settings, get_settings
from .exceptions import (
    SlideChatError,
    GenerationUnavailable,
    PayloadValidationError,
    MalformedPayload,
    EmptySlideSet,
    InvalidSlideShape,
    ExportFailed,
    PersistenceWriteFailed,
    SessionLoadFailed,
    InvalidImportedDeck,
    ConversationBusy,
)
from .logging import setup_logging
from .tracing import setup_tracing, is_tracing_enabled

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "setup_tracing",
    "is_tracing_enabled",
    "SlideChatError",
    "GenerationUnavailable",
    "PayloadValidationError",
    "MalformedPayload",
    "EmptySlideSet",
    "InvalidSlideShape",
    "ExportFailed",
    "PersistenceWriteFailed",
    "SessionLoadFailed",
    "InvalidImportedDeck",
    "ConversationBusy",
]
