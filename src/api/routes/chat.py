"""Chat and deck API endpoints."""
import logging
from typing import Any, Optional

from fastapi import APIRouter, BackgroundTasks, HTTPException
from pydantic import BaseModel, Field

from src.core import ConversationBusy, InvalidImportedDeck
from src.services import get_chat_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["chat"])


class ChatRequest(BaseModel):
    """Request payload for a chat turn."""

    message: str = Field(
        ...,
        min_length=1,
        max_length=10000,
        description="User message"
    )
    session_id: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Session to run the turn in; the active one when omitted"
    )
    owner: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Owner identifier used when a session has to be created"
    )


class DeckImportRequest(BaseModel):
    """A hand-edited deck document."""
    json_text: str = Field(..., min_length=1, description="JSON document of the form {\"slides\": [...]}")


@router.post("/chat")
async def chat(request: ChatRequest, background_tasks: BackgroundTasks) -> dict[str, Any]:
    """
    Run one utterance against the active session.

    Returns the assistant reply, the classified intent and the resulting
    deck. Generation failures come back as a normal reply with ``error``
    set; the deck is unchanged in that case.
    """
    service = get_chat_service()

    if request.session_id and request.session_id != service.state.session_id:
        if service.state.busy:
            raise HTTPException(status_code=409, detail="A chat turn is already in progress")
        await service.select_session(request.session_id)

    try:
        result = await service.send_message(request.message, owner=request.owner)
    except ConversationBusy as e:
        raise HTTPException(status_code=409, detail=str(e))

    if result.slides and not result.error and not result.discarded:
        background_tasks.add_task(service.auto_export)

    return result.to_dict()


@router.delete("/chat/history")
async def clear_history() -> dict[str, Any]:
    """Clear the message log and the deck of the active session."""
    service = get_chat_service()
    await service.clear_history()
    return {
        **service.state.to_dict(),
        "persistence_error": service.persistence_error,
    }


@router.get("/deck")
async def get_deck() -> dict[str, Any]:
    """Get the current deck together with its raw JSON view."""
    state = get_chat_service().state
    return {
        **state.to_dict(),
        "raw_json": state.raw_json,
    }


@router.put("/deck")
async def import_deck(request: DeckImportRequest, background_tasks: BackgroundTasks) -> dict[str, Any]:
    """Replace the deck with an edited JSON document."""
    service = get_chat_service()
    try:
        await service.import_deck_json(request.json_text)
    except InvalidImportedDeck as e:
        raise HTTPException(status_code=422, detail=e.user_message)

    background_tasks.add_task(service.auto_export)
    return {
        **service.state.to_dict(),
        "raw_json": service.state.raw_json,
        "persistence_error": service.persistence_error,
    }
