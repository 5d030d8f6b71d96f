"""Generation service for producing slide content with an LLM."""

from .service import GenerationService, get_generation_service
from .retry import call_with_retry, is_overloaded_error

__all__ = [
    "GenerationService",
    "get_generation_service",
    "call_with_retry",
    "is_overloaded_error",
]
