"""
Chat Service - conversation to deck reconciliation.

One user utterance runs the whole pipeline:
classify intent -> build request -> generate (with retry) -> parse ->
merge -> persist -> infer title. Results are applied only if the session
that started the turn is still the active one.
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from src.core import (
    ConversationBusy,
    ExportFailed,
    GenerationUnavailable,
    PayloadValidationError,
    SlideChatError,
    get_settings,
)
from src.models import ConversationState, Deck, Message, Session, deck_fingerprint
from src.services.export import ExportArtifact, ExportPipeline, get_export_pipeline
from src.services.export.pipeline import ProgressCallback
from src.services.generation import GenerationService, get_generation_service
from src.services.persistence import SessionSynchronizer, get_session_synchronizer

from .intent import Intent, classify_intent
from .merger import merge_slides
from .parser import parse_imported_deck, parse_slide_payload
from .prompts import build_generation_request, describe_request
from .titles import first_user_message, infer_title, should_infer_title

logger = logging.getLogger(__name__)


@dataclass
class TurnResult:
    """Outcome of one utterance."""
    session_id: Optional[str]
    intent: Optional[Intent] = None
    reply: Optional[Message] = None
    slides: Deck = field(default_factory=list)
    title: Optional[str] = None
    error: Optional[str] = None
    discarded: bool = False
    persistence_error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "intent": str(self.intent) if self.intent else None,
            "reply": self.reply.model_dump(mode="json") if self.reply else None,
            "slides": [s.model_dump() for s in self.slides],
            "title": self.title,
            "error": self.error,
            "discarded": self.discarded,
            "persistence_error": self.persistence_error,
        }


class ChatService:
    """Owns the active conversation and runs chat turns against it."""

    def __init__(
        self,
        generation: Optional[GenerationService] = None,
        synchronizer: Optional[SessionSynchronizer] = None,
        exporter: Optional[ExportPipeline] = None,
    ):
        self._settings = get_settings()
        self._generation = generation or get_generation_service()
        self._sync = synchronizer or get_session_synchronizer()
        self._exporter = exporter or get_export_pipeline()
        self._anonymous_owner: Optional[str] = None
        self._export_task: Optional[tuple[str, asyncio.Task]] = None
        self.state = ConversationState()

    @property
    def synchronizer(self) -> SessionSynchronizer:
        return self._sync

    @property
    def persistence_error(self) -> Optional[str]:
        """Warning for the last save that did not reach the store."""
        return self._sync.persistence_error

    def resolve_owner(self, owner: Optional[str] = None) -> str:
        """Use the caller's identifier, or a per-process anonymous one."""
        if owner:
            return owner
        if self._anonymous_owner is None:
            self._anonymous_owner = f"anonymous-{time.time_ns() // 1_000_000}"
        return self._anonymous_owner

    def _is_active(self, session_id: Optional[str]) -> bool:
        return self.state.session_id == session_id and (
            session_id is None or self._sync.active_session_id == session_id
        )

    # -------------------------------------------------------------------------
    # Chat turns
    # -------------------------------------------------------------------------

    async def send_message(self, content: str, owner: Optional[str] = None) -> TurnResult:
        """
        Process one user utterance end to end.

        Generation and parsing failures become a plain-language assistant
        message; the deck is left as it was.

        Raises:
            ConversationBusy: Another utterance is still being processed
        """
        state = self.state
        if state.busy:
            raise ConversationBusy("A chat turn is already in progress")

        state.busy = True
        session_id = state.session_id
        try:
            session_id = await self._ensure_session(owner)
            if state.session_id != session_id:
                return TurnResult(session_id=session_id, discarded=True)

            history = list(state.messages)
            state.add_message("user", content)
            await self._sync.save_messages(session_id, state.messages)

            # Snapshot taken at decision time; the merge reads only this
            current: Deck = list(state.slides)
            intent = classify_intent(content, bool(current))
            request = build_generation_request(
                content, history, current, intent, history_window=self._settings.history_window,
            )
            logger.info(f"Chat turn for session {session_id}: {describe_request(request)}")

            try:
                raw = await self._generation.generate(
                    request.to_prompt(), operation_name=f"Slide generation ({intent})",
                )
                generated = parse_slide_payload(raw)
                merged = merge_slides(intent, current, generated)
            except (GenerationUnavailable, PayloadValidationError) as e:
                logger.error(f"Chat turn failed ({type(e).__name__}): {e}")
                return await self._fail_turn(session_id, intent, e.user_message)
            except Exception as e:
                logger.exception(f"Unexpected chat error: {e}")
                return await self._fail_turn(session_id, intent, SlideChatError.user_message)

            if not self._is_active(session_id):
                logger.warning(f"Session changed during generation; discarding result for {session_id}")
                return TurnResult(session_id=session_id, intent=intent, discarded=True)

            state.set_slides(merged.deck)
            reply = state.add_message("assistant", merged.summary)
            await self._sync.save(session_id, state.messages, state.slides)
            save_error = self.persistence_error
            await self._maybe_apply_title(session_id)

            logger.info(f"{intent} produced a {len(state.slides)}-slide deck for session {session_id}")
            return TurnResult(
                session_id=session_id,
                intent=intent,
                reply=reply,
                slides=list(state.slides),
                title=state.title,
                persistence_error=save_error or self.persistence_error,
            )
        finally:
            if state.session_id == session_id:
                state.busy = False

    async def _fail_turn(self, session_id: Optional[str], intent: Intent, text: str) -> TurnResult:
        if not self._is_active(session_id):
            return TurnResult(session_id=session_id, intent=intent, error=text, discarded=True)
        reply = self.state.add_message("assistant", text)
        await self._sync.save_messages(session_id, self.state.messages)
        save_error = self.persistence_error
        await self._maybe_apply_title(session_id)
        return TurnResult(
            session_id=session_id,
            intent=intent,
            reply=reply,
            slides=list(self.state.slides),
            title=self.state.title,
            error=text,
            persistence_error=save_error or self.persistence_error,
        )

    async def _ensure_session(self, owner: Optional[str]) -> Optional[str]:
        """
        Create a session lazily on the first utterance.

        If another session was selected while the create call was pending,
        the new session is left unused and its id returned, so the caller
        sees that the state no longer belongs to this turn.
        """
        if self.state.session_id:
            return self.state.session_id
        previous_active = self._sync.active_session_id
        try:
            session = await self._sync.create_session(
                self.resolve_owner(owner), self._settings.default_session_title,
            )
        except Exception as e:
            logger.error(f"Error creating session: {e}")
            return None
        if self.state.session_id is not None or self._sync.active_session_id != previous_active:
            logger.warning(f"Session changed while creating {session.id}; leaving it unused")
            return session.id
        self.state.session_id = session.id
        self.state.title = session.title
        self._sync.activate(session.id)
        return session.id

    async def _maybe_apply_title(self, session_id: Optional[str]) -> None:
        state = self.state
        if not should_infer_title(state.messages, session_id, state.titled_session_id):
            return
        first = first_user_message(state.messages)
        title = infer_title(
            first.content,
            default_title=self._settings.default_session_title,
            max_length=self._settings.title_max_length,
        )
        if not title:
            return
        logger.info(f"Updating session title: {title}")
        if await self._sync.rename(session_id, title) and self._is_active(session_id):
            state.title = title
            state.titled_session_id = session_id

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    async def list_sessions(self, owner: Optional[str] = None) -> list[Session]:
        return await self._sync.list_sessions(self.resolve_owner(owner))

    async def select_session(self, session_id: str) -> ConversationState:
        """Switch to a session, dropping the previous session's state first."""
        state = self.state
        state.reset(session_id)
        self._export_task = None

        loaded = await self._sync.select(session_id)
        if loaded is None or state.session_id != session_id:
            return state

        messages, deck = loaded
        state.messages = messages
        state.set_slides(deck)
        if messages:
            # A session with history already had its one chance at a title
            state.titled_session_id = session_id
        return state

    async def new_session(self, owner: Optional[str] = None) -> ConversationState:
        """
        Start a fresh session. With no session selected, an existing empty
        default-titled session is reused instead of creating another one.
        """
        resolved = self.resolve_owner(owner)
        if not self.state.session_id:
            for session in await self._sync.list_sessions(resolved):
                if session.title == self._settings.default_session_title:
                    logger.info(f"Reusing existing empty session: {session.id}")
                    return await self.select_session(session.id)

        session = await self._sync.create_session(resolved, self._settings.default_session_title)
        self.state.reset(session.id)
        self.state.title = session.title
        self._export_task = None
        self._sync.activate(session.id)
        return self.state

    async def delete_session(self, session_id: str) -> None:
        await self._sync.delete_session(session_id)
        if self.state.session_id == session_id:
            self.state.reset()
            self._export_task = None

    # -------------------------------------------------------------------------
    # Manual edits
    # -------------------------------------------------------------------------

    async def import_deck_json(self, json_string: str) -> Deck:
        """
        Replace the deck with a user-edited JSON document.

        Raises:
            InvalidImportedDeck: The document failed shape validation; state is untouched
        """
        deck = parse_imported_deck(json_string)
        state = self.state
        state.set_slides(deck)
        state.raw_json = json_string
        state.invalidate_artifact()
        await self._sync.save_slides(state.session_id, state.slides)
        logger.info(f"Imported {len(deck)} slides")
        return list(state.slides)

    async def clear_history(self) -> None:
        state = self.state
        state.messages = []
        state.set_slides([])
        state.invalidate_artifact()
        self._export_task = None
        await self._sync.clear_fallback()
        await self._sync.save(state.session_id, state.messages, state.slides)

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    async def export(self, on_progress: Optional[ProgressCallback] = None) -> ExportArtifact:
        """
        Export the current deck, rendering at most once per deck snapshot.

        An unchanged deck returns the cached artifact; a call arriving while
        the same snapshot is rendering waits for that render.

        Raises:
            ExportFailed: Nothing to export, or the encoder failed
        """
        state = self.state
        deck = list(state.slides)
        if not deck:
            raise ExportFailed("No slides to export")

        fingerprint = deck_fingerprint(deck)
        if state.artifact is not None and state.exported_fingerprint == fingerprint:
            return self._cached_artifact()

        if self._export_task is not None and self._export_task[0] == fingerprint:
            return await asyncio.shield(self._export_task[1])

        session_id = state.session_id
        task = asyncio.create_task(self._exporter.export(deck, on_progress))
        self._export_task = (fingerprint, task)
        try:
            artifact = await task
        finally:
            if self._export_task is not None and self._export_task[1] is task:
                self._export_task = None

        if state.session_id == session_id:
            state.artifact = artifact.data
            state.exported_fingerprint = artifact.fingerprint
        return artifact

    async def export_if_changed(self, on_progress: Optional[ProgressCallback] = None) -> Optional[ExportArtifact]:
        """Re-export only when the deck differs from the last export."""
        state = self.state
        if not state.slides or state.exported_fingerprint == deck_fingerprint(state.slides):
            return None
        return await self.export(on_progress)

    async def auto_export(self) -> None:
        """Background re-export after a deck change. Failures are only logged."""
        try:
            artifact = await self.export_if_changed()
        except ExportFailed as e:
            logger.error(f"Automatic export failed: {e}")
            return
        if artifact is not None:
            logger.info(f"Presentation refreshed ({artifact.slide_count} slides)")

    def download(self) -> Optional[ExportArtifact]:
        """The last exported artifact, if it still matches the deck."""
        state = self.state
        if state.artifact is None or not state.slides:
            return None
        if state.exported_fingerprint != deck_fingerprint(state.slides):
            return None
        return self._cached_artifact()

    def _cached_artifact(self) -> ExportArtifact:
        state = self.state
        return ExportArtifact(
            data=state.artifact,
            filename=self._settings.export_filename,
            slide_count=len(state.slides),
            fingerprint=state.exported_fingerprint,
        )


_chat_service: Optional[ChatService] = None


def get_chat_service() -> ChatService:
    """Get the singleton chat service instance."""
    global _chat_service
    if _chat_service is None:
        _chat_service = ChatService()
    return _chat_service
