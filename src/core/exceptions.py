"""
Error taxonomy for SlideChat.

Every failure is scoped to the operation that raised it. Errors carry a
plain-language ``user_message`` that the chat pipeline shows as an
assistant turn instead of the technical detail.
"""


class SlideChatError(Exception):
    """Base class for all SlideChat errors."""

    user_message = "An unexpected error occurred"

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.user_message)
        self.detail = detail or self.user_message


class GenerationUnavailable(SlideChatError):
    """The content-generation service could not produce a response."""

    OVERLOADED = "overloaded"
    CONFIGURATION = "configuration"
    SERVICE = "service"

    _MESSAGES = {
        OVERLOADED: "The AI service is currently overloaded. Please try again in a moment.",
        CONFIGURATION: "API key not configured. Please check your environment variables.",
        SERVICE: "The AI service failed to respond. Please try again.",
    }

    def __init__(self, detail: str = "", reason: str = SERVICE):
        self.reason = reason
        super().__init__(detail)

    @property
    def user_message(self) -> str:
        return self._MESSAGES.get(self.reason, self._MESSAGES[self.SERVICE])


class PayloadValidationError(SlideChatError):
    """The generated response could not be turned into a deck."""

    user_message = "Failed to parse AI response. Please try rephrasing your request."


class MalformedPayload(PayloadValidationError):
    """No JSON object could be located or parsed in the response."""


class EmptySlideSet(PayloadValidationError):
    """The response parsed but contained zero slides."""

    user_message = "No slides were generated. Please try rephrasing your request."


class InvalidSlideShape(PayloadValidationError):
    """A slide entry is missing its title or content."""


class ExportFailed(SlideChatError):
    """The presentation encoder failed; no artifact was produced."""

    user_message = "Failed to generate PowerPoint presentation"


class PersistenceWriteFailed(SlideChatError):
    """A save to the persistence backend failed. Non-fatal."""

    user_message = "Your changes could not be saved. They will be retried on the next change."


class SessionLoadFailed(PersistenceWriteFailed):
    """The active session could not be loaded, so its saves are held back."""

    user_message = "This chat could not be loaded. Changes will not be saved until it is reopened."


class InvalidImportedDeck(SlideChatError):
    """A manually supplied deck JSON document failed shape validation."""

    user_message = "Failed to update slides: invalid JSON"


class ConversationBusy(SlideChatError):
    """A new utterance arrived while another one is still being processed."""

    user_message = "Still working on your previous request. Please wait for it to finish."
