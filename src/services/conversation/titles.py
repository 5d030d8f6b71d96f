"""Session title inference from the first user message."""
import re
from typing import Optional

from src.models import Message

GREETING_PATTERN = re.compile(r"^(hi|hello|hey|thanks?|ok|yes|no)$", re.IGNORECASE)

IMPERATIVE_PREFIXES = (
    "create", "make", "generate", "design", "build", "write", "show", "explain",
    "tell me about", "i want", "i need", "can you", "please", "help me with",
    "start", "begin",
)
PREPOSITIONS = ("about", "for", "on", "regarding")

_PREFIX_PATTERN = re.compile(
    r"^(?:" + "|".join(re.escape(p) for p in IMPERATIVE_PREFIXES) + r")\b[\s,]*",
    re.IGNORECASE,
)
# "a presentation", "some slides", "a deck" and friends between the verb and the topic
_FILLER_PATTERN = re.compile(
    r"^(?:(?:a|an|the|some|me|us)\s+)?(?:short\s+|quick\s+|new\s+)?"
    r"(?:presentation|slide\s*deck|slideshow|deck|slides?|talk|pitch)\b\s*",
    re.IGNORECASE,
)
_PREPOSITION_PATTERN = re.compile(
    r"^(?:" + "|".join(PREPOSITIONS) + r")\s+",
    re.IGNORECASE,
)
_SLIDES_SUFFIX_PATTERN = re.compile(r"\s+slides?$", re.IGNORECASE)
_QUESTION_SUFFIX_PATTERN = re.compile(r"\?+$")

ELLIPSIS = "..."


def clean_title(utterance: str, max_length: int = 50) -> str:
    """
    Turn an utterance into a short label.

    Leading imperative phrases, filler ("a presentation") and prepositions
    are stripped repeatedly, then a trailing "slide(s)" and question marks.
    The first letter is capitalized and the result truncated with an
    ellipsis beyond ``max_length`` characters.
    """
    text = utterance.strip()

    previous = None
    while previous != text:
        previous = text
        text = _PREFIX_PATTERN.sub("", text).strip()
        text = _FILLER_PATTERN.sub("", text).strip()
        text = _PREPOSITION_PATTERN.sub("", text).strip()

    text = _QUESTION_SUFFIX_PATTERN.sub("", text).strip()
    text = _SLIDES_SUFFIX_PATTERN.sub("", text).strip()

    if not text:
        return ""
    text = text[0].upper() + text[1:]

    if len(text) > max_length:
        text = text[:max_length].strip() + ELLIPSIS
    return text


def infer_title(
    utterance: str,
    default_title: str = "New Chat",
    max_length: int = 50,
) -> Optional[str]:
    """
    Derive a session title, or None when the utterance is not worth one.

    Greetings, utterances shorter than three characters and anything that
    cleans down to nothing (or to the default title) are skipped.
    """
    text = (utterance or "").strip()
    if len(text) < 3 or GREETING_PATTERN.match(text):
        return None

    title = clean_title(text, max_length=max_length)
    if not title or title == default_title:
        return None
    return title


def should_infer_title(
    messages: list[Message],
    session_id: Optional[str],
    titled_session_id: Optional[str],
) -> bool:
    """
    Title inference runs once per session: exactly when the log holds the
    first user turn and the first assistant turn, and no title was applied
    for this session yet.
    """
    if not session_id or titled_session_id == session_id:
        return False
    if len(messages) != 2:
        return False
    return any(m.role == "user" for m in messages)


def first_user_message(messages: list[Message]) -> Optional[Message]:
    return next((m for m in messages if m.role == "user"), None)
