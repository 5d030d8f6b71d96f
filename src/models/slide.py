"""Slide and deck Pydantic models."""
import hashlib
import json

from pydantic import BaseModel, Field


class Slide(BaseModel):
    """A single slide: a heading and its ordered bullet points."""

    title: str = Field(default="", description="Slide heading, may be empty")
    content: list[str] = Field(default_factory=list, description="Ordered bullet points")


class PersistedSlide(BaseModel):
    """A slide as stored by a persistence backend, tagged with its deck position."""

    title: str = Field(default="", description="Slide heading")
    content: list[str] = Field(default_factory=list, description="Ordered bullet points")
    order: int = Field(..., ge=0, description="0-based position in the deck")

    def to_slide(self) -> Slide:
        return Slide(title=self.title, content=list(self.content))


# A deck is an ordered list of slides; list order is presentation order.
Deck = list[Slide]


def deck_to_dict(deck: Deck) -> dict:
    """Render a deck as the ``{"slides": [...]}`` document shape."""
    return {"slides": [slide.model_dump() for slide in deck]}


def deck_to_json(deck: Deck, indent: int | None = 2) -> str:
    """Serialize a deck to the JSON document users can view and re-import."""
    return json.dumps(deck_to_dict(deck), indent=indent, ensure_ascii=False)


def deck_fingerprint(deck: Deck) -> str:
    """
    Content hash of a deck.

    Two decks with equal titles and content in the same order share a
    fingerprint regardless of object identity.
    """
    canonical = json.dumps(deck_to_dict(deck), sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def tag_with_order(deck: Deck) -> list[PersistedSlide]:
    """Attach dense 0-based ``order`` indexes for storage."""
    return [
        PersistedSlide(title=slide.title, content=list(slide.content), order=index)
        for index, slide in enumerate(deck)
    ]


def from_persisted(rows: list[PersistedSlide]) -> Deck:
    """Rebuild a deck from stored rows, ordering by ``order``."""
    return [row.to_slide() for row in sorted(rows, key=lambda r: r.order)]
