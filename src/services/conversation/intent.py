"""Lexical intent classification for chat utterances."""
from enum import StrEnum


class Intent(StrEnum):
    """What an utterance wants done to the current deck."""
    CREATE = "create"
    APPEND = "append"
    MODIFY = "modify"
    REPLACE = "replace"


# Checked in order; APPEND wins over MODIFY when both match.
APPEND_KEYWORDS = ("add", "insert", "create another", "add another", "add more")
MODIFY_KEYWORDS = ("modify", "update", "change", "edit", "revise")


def classify_intent(utterance: str, has_existing_slides: bool) -> Intent:
    """
    Map an utterance to an intent.

    Case-insensitive substring matching against fixed keyword sets. Every
    input maps to exactly one intent.
    """
    if not has_existing_slides:
        return Intent.CREATE

    text = (utterance or "").lower()
    if any(keyword in text for keyword in APPEND_KEYWORDS):
        return Intent.APPEND
    if any(keyword in text for keyword in MODIFY_KEYWORDS):
        return Intent.MODIFY
    return Intent.REPLACE
