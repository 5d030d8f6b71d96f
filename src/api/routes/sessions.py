"""Session management API endpoints."""
import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from src.core import ConversationBusy
from src.services import get_chat_service
from src.services.persistence import group_sessions_by_date

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/sessions", tags=["sessions"])


class NewSessionRequest(BaseModel):
    """Request payload for starting a session."""
    owner: Optional[str] = Field(default=None, max_length=200, description="Owner identifier")


def _state_payload(service) -> dict[str, Any]:
    state = service.state
    return {
        **state.to_dict(),
        "messages": [m.model_dump(mode="json") for m in state.messages],
        "raw_json": state.raw_json,
        "persistence_error": service.persistence_error,
    }


def _reject_if_busy(service) -> None:
    if service.state.busy:
        raise HTTPException(status_code=409, detail=ConversationBusy.user_message)


@router.get("")
async def list_sessions(owner: Optional[str] = Query(default=None, max_length=200)) -> dict[str, Any]:
    """List the owner's sessions grouped by creation date, newest first."""
    service = get_chat_service()
    try:
        sessions = await service.list_sessions(owner)
    except Exception as e:
        logger.exception(f"Error loading sessions: {e}")
        raise HTTPException(status_code=502, detail="Failed to load sessions")

    groups = group_sessions_by_date(sessions)
    return {
        "active_session_id": service.state.session_id,
        "groups": [
            {
                "category": group["category"],
                "sessions": [s.model_dump(mode="json") for s in group["sessions"]],
            }
            for group in groups
        ],
    }


@router.post("")
async def new_session(request: NewSessionRequest) -> dict[str, Any]:
    """Start a new chat, reusing an empty one when nothing is selected."""
    service = get_chat_service()
    _reject_if_busy(service)
    try:
        await service.new_session(request.owner)
    except Exception as e:
        logger.exception(f"Error creating session: {e}")
        raise HTTPException(status_code=502, detail="Failed to create session")
    return _state_payload(service)


@router.post("/{session_id}/select")
async def select_session(session_id: str) -> dict[str, Any]:
    """Make a session active and load its messages and deck."""
    service = get_chat_service()
    _reject_if_busy(service)
    await service.select_session(session_id)
    return _state_payload(service)


@router.delete("/{session_id}")
async def delete_session(session_id: str) -> dict[str, Any]:
    """Delete a session with its messages and slides."""
    service = get_chat_service()
    try:
        await service.delete_session(session_id)
    except Exception as e:
        logger.exception(f"Error deleting session {session_id}: {e}")
        raise HTTPException(status_code=502, detail="Failed to delete session")
    return {"deleted": session_id, "active_session_id": service.state.session_id}
