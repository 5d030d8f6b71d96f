"""
Slide Generation Service

Sends a generation request to Azure OpenAI through Microsoft Agent
Framework and returns the raw text reply. Parsing happens elsewhere.
"""
import logging
from typing import Optional

from agent_framework import ChatMessage, Role
from agent_framework.azure import AzureOpenAIChatClient
from azure.identity import DefaultAzureCredential

from src.core import GenerationUnavailable, get_settings
from .prompts import GENERATION_SYSTEM_INSTRUCTIONS
from .retry import call_with_retry

logger = logging.getLogger(__name__)


class GenerationService:
    """Raw-text slide generation with overload retries."""

    def __init__(self):
        self._settings = get_settings()
        self._chat_client: Optional[AzureOpenAIChatClient] = None
        self._agent = None

    @property
    def is_available(self) -> bool:
        return self._settings.has_azure_openai

    def _ensure_client(self) -> None:
        """Create the chat client and agent on first use."""
        if self._agent is not None:
            return
        if not self.is_available:
            raise GenerationUnavailable(
                "Azure OpenAI is not configured",
                reason=GenerationUnavailable.CONFIGURATION,
            )

        if self._settings.azure_openai_api_key:
            auth = {"api_key": self._settings.azure_openai_api_key}
        else:
            auth = {"credential": DefaultAzureCredential()}

        self._chat_client = AzureOpenAIChatClient(
            **auth,
            endpoint=self._settings.azure_openai_endpoint or "",
            deployment_name=self._settings.azure_openai_deployment,
            api_version=self._settings.azure_openai_api_version,
        )
        self._agent = self._chat_client.create_agent(
            name="SlideGenerationAgent",
            instructions=GENERATION_SYSTEM_INSTRUCTIONS,
        )
        logger.info(f"Generation agent ready on deployment {self._settings.azure_openai_deployment}")

    async def _invoke(self, prompt: str) -> str:
        response = await self._agent.run([ChatMessage(role=Role.USER, text=prompt)])
        return (response.text or "").strip()

    async def generate(self, prompt: str, operation_name: str = "Slide generation") -> str:
        """
        Run one generation prompt.

        Args:
            prompt: The fully rendered user prompt
            operation_name: Label used in retry logging

        Returns:
            The raw response text

        Raises:
            GenerationUnavailable: Not configured, retries exhausted, or the call failed
        """
        self._ensure_client()

        text = await call_with_retry(
            lambda: self._invoke(prompt),
            max_attempts=self._settings.generation_max_attempts,
            base_delay=self._settings.generation_base_delay,
            operation_name=operation_name,
        )
        if not text:
            raise GenerationUnavailable("Empty response from the AI service")

        logger.debug(f"Raw generation output: {text}")
        return text


_generation_service: Optional[GenerationService] = None


def get_generation_service() -> GenerationService:
    """Get the singleton generation service instance."""
    global _generation_service
    if _generation_service is None:
        _generation_service = GenerationService()
    return _generation_service
