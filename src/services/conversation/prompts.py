"""Prompt construction for slide generation."""
from dataclasses import dataclass
from typing import Optional

from src.models import Deck, Message, deck_to_json

from .intent import Intent

NO_PREVIOUS_SLIDES = "No previous slides"


INTENT_INSTRUCTIONS = {
    Intent.CREATE: """1. Create NEW slides for a new presentation
2. This is the first request in the conversation
3. Create 5-10 slides on the requested topic""",
    Intent.APPEND: """1. ADD NEW slides based on the user's request - DO NOT include existing slides
2. Return ONLY the new slides that should be added to the presentation
3. The new slides should complement the existing content
4. Create 1-3 relevant slides based on the user's request
5. Each slide must have unique and different content""",
    Intent.MODIFY: """1. MODIFY the existing slides based on the user's request
2. Return ALL {slide_count} slides - update the ones that need changes, keep others as-is
3. Update only the slides that need changes based on the request
4. If the request doesn't specify which slide to modify, update the most relevant one(s)
5. Maintain the same slide order and structure""",
    Intent.REPLACE: """1. REPLACE or completely regenerate ALL slides based on the user's request
2. Return a complete new set of slides
3. Do not copy existing slides unless the user specifically requests it""",
}


@dataclass(frozen=True)
class GenerationRequest:
    """Everything the generation service needs for one utterance."""
    utterance: str
    transcript: str
    deck_snapshot: str
    intent: Intent
    instructions: str

    def to_prompt(self) -> str:
        """Render the request as a single user prompt."""
        return f"""User's current request: "{self.utterance}"

Conversation history:
{self.transcript}

Current slides (if any):
{self.deck_snapshot}

Based on the user's request, you need to:
{self.instructions}"""


def render_transcript(history: list[Message]) -> str:
    """Render prior messages as ``User: ...`` / ``Assistant: ...`` lines."""
    return "\n".join(
        f"{'User' if m.role == 'user' else 'Assistant'}: {m.content}"
        for m in history
    )


def build_generation_request(
    utterance: str,
    history: list[Message],
    deck: Deck,
    intent: Intent,
    history_window: int = 5,
) -> GenerationRequest:
    """
    Assemble a generation request.

    Args:
        utterance: The user's new message
        history: Prior messages in chronological order (the new utterance excluded)
        deck: The current canonical deck
        intent: Classified intent for the utterance
        history_window: How many trailing messages to include

    Returns:
        A GenerationRequest; building it has no side effects
    """
    recent: list[Message] = history[-history_window:] if history_window > 0 else []
    snapshot = deck_to_json(deck) if deck else NO_PREVIOUS_SLIDES
    instructions = INTENT_INSTRUCTIONS[intent].format(slide_count=len(deck))
    return GenerationRequest(
        utterance=utterance,
        transcript=render_transcript(recent),
        deck_snapshot=snapshot,
        intent=intent,
        instructions=instructions,
    )


def describe_request(request: Optional[GenerationRequest]) -> str:
    """Short log line for a request."""
    if request is None:
        return "<none>"
    return f"intent={request.intent} utterance={request.utterance[:80]!r}"
