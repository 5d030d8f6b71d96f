"""Conversation pipeline: intent, prompt, parsing, merging and titles."""

from .intent import Intent, classify_intent
from .merger import MergeResult, merge_slides
from .parser import parse_imported_deck, parse_slide_payload
from .prompts import GenerationRequest, build_generation_request
from .service import ChatService, TurnResult, get_chat_service
from .titles import infer_title

__all__ = [
    "Intent",
    "classify_intent",
    "MergeResult",
    "merge_slides",
    "parse_imported_deck",
    "parse_slide_payload",
    "GenerationRequest",
    "build_generation_request",
    "ChatService",
    "TurnResult",
    "get_chat_service",
    "infer_title",
]
