"""Service layer for SlideChat."""

from .conversation import ChatService, get_chat_service
from .export import ExportPipeline, get_export_pipeline
from .generation import GenerationService, get_generation_service
from .persistence import SessionSynchronizer, get_session_store

__all__ = [
    "ChatService",
    "get_chat_service",
    "ExportPipeline",
    "get_export_pipeline",
    "GenerationService",
    "get_generation_service",
    "SessionSynchronizer",
    "get_session_store",
]
