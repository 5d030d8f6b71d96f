"""Merging generated slides into the canonical deck."""
import logging
from dataclasses import dataclass

from src.core import EmptySlideSet
from src.models import Deck

from .intent import Intent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeResult:
    """The new canonical deck plus the transcript line describing it."""
    deck: Deck
    summary: str


def _plural(count: int) -> str:
    return "s" if count > 1 else ""


def merge_slides(intent: Intent, current: Deck, generated: Deck) -> MergeResult:
    """
    Combine generated slides with the current deck.

    Pure function of its inputs; neither list is mutated.

    - CREATE / REPLACE: the generated slides become the deck.
    - APPEND: current slides first, generated slides after.
    - MODIFY: the generated slides become the deck. The generation service
      is asked to echo every slide back; a shorter reply is taken as the
      full new set.

    Raises:
        EmptySlideSet: ``generated`` is empty
    """
    if not generated:
        raise EmptySlideSet("Nothing to merge")

    count = len(generated)

    if intent == Intent.APPEND:
        deck = [*current, *generated]
        summary = (
            f"Added {count} new slide{_plural(count)} to your presentation "
            f"(now {len(deck)} total)!"
        )
    elif intent == Intent.MODIFY:
        if count < len(current):
            logger.warning(
                f"Modify returned {count} slides for a {len(current)}-slide deck; "
                f"treating the reply as the full set"
            )
        deck = list(generated)
        summary = f"Updated your presentation with {count} slide{_plural(count)}!"
    else:
        deck = list(generated)
        summary = f"Generated {count} slide{_plural(count)} for your presentation!"

    return MergeResult(deck=deck, summary=summary)
