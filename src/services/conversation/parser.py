"""
Response parsing and validation.

The generation service returns free text. It is treated as untrusted:
everything is validated here into ``Slide`` objects before any other
component sees it.
"""
import json
import logging
import re
from typing import Any

from src.core import MalformedPayload, EmptySlideSet, InvalidSlideShape, InvalidImportedDeck
from src.models import Deck, Slide

logger = logging.getLogger(__name__)

CODE_FENCE_PATTERN = re.compile(r"```[a-zA-Z]*\n?")


def strip_code_fences(text: str) -> str:
    """Remove Markdown code-fence markers such as ```json and ```."""
    return CODE_FENCE_PATTERN.sub("", text)


def find_json_object(text: str) -> str | None:
    """
    Return the first balanced ``{...}`` span in ``text``.

    Braces inside JSON string literals are ignored so prose or content
    containing braces does not end the span early.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]
        # Unbalanced from this brace; try the next one
        start = text.find("{", start + 1)
    return None


def _load_document(raw_text: str) -> Any:
    cleaned = strip_code_fences((raw_text or "").strip()).strip()
    candidate = find_json_object(cleaned)
    if candidate is None:
        raise MalformedPayload("No JSON object found in response")
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        raise MalformedPayload(f"Invalid JSON in response: {e}") from e


def _validate_slide(index: int, entry: Any) -> Slide:
    if not isinstance(entry, dict):
        raise InvalidSlideShape(f"Slide {index + 1} is not an object")
    title = entry.get("title")
    if not isinstance(title, str):
        raise InvalidSlideShape(f"Slide {index + 1} has no string title")
    content = entry.get("content")
    if not isinstance(content, list) or not content:
        raise InvalidSlideShape(f"Slide {index + 1} has no content points")
    if not all(isinstance(item, str) for item in content):
        raise InvalidSlideShape(f"Slide {index + 1} content must be a list of strings")
    return Slide(title=title, content=list(content))


def parse_slide_payload(raw_text: str) -> Deck:
    """
    Extract and validate the slide list from a raw generation response.

    Raises:
        MalformedPayload: No JSON object could be located or parsed
        EmptySlideSet: ``slides`` is present but empty
        InvalidSlideShape: ``slides`` is missing or an entry lacks its fields
    """
    document = _load_document(raw_text)
    if not isinstance(document, dict):
        raise MalformedPayload("Response JSON is not an object")

    slides = document.get("slides")
    if not isinstance(slides, list):
        raise InvalidSlideShape('Response has no "slides" list')
    if not slides:
        raise EmptySlideSet("Response contained no slides")

    deck = [_validate_slide(i, entry) for i, entry in enumerate(slides)]
    logger.debug(f"Parsed {len(deck)} slides from response")
    return deck


def parse_imported_deck(json_string: str) -> Deck:
    """
    Validate a deck document supplied by the user (JSON editor, slide editor).

    Titles may be empty strings; content may be an empty list. Anything
    else that does not match ``{"slides": [{"title": str, "content": [str]}]}``
    is rejected.

    Raises:
        InvalidImportedDeck: The document is not valid JSON or has the wrong shape
    """
    try:
        document = json.loads(json_string)
    except (json.JSONDecodeError, TypeError) as e:
        raise InvalidImportedDeck(f"Invalid JSON: {e}") from e

    if not isinstance(document, dict) or not isinstance(document.get("slides"), list):
        raise InvalidImportedDeck('Invalid JSON structure. Expected { "slides": [...] }')
    if not document["slides"]:
        raise InvalidImportedDeck("No slides found in JSON")

    deck: Deck = []
    for entry in document["slides"]:
        if (
            not isinstance(entry, dict)
            or not isinstance(entry.get("title"), str)
            or not isinstance(entry.get("content"), list)
            or not all(isinstance(item, str) for item in entry["content"])
        ):
            raise InvalidImportedDeck(
                'Invalid slide structure. Each slide must have "title" and "content" fields'
            )
        deck.append(Slide(title=entry["title"], content=list(entry["content"])))
    return deck
