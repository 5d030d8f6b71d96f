"""
Unit tests for the generation service and its retry policy.
"""
from unittest.mock import AsyncMock, Mock, patch

import pytest

from src.core import GenerationUnavailable
from src.services.generation.retry import backoff_delay, call_with_retry, is_overloaded_error
from src.services.generation.service import GenerationService


class OverloadedError(Exception):
    status_code = 503


class TestIsOverloadedError:
    """Tests for is_overloaded_error."""

    def test_status_code(self):
        assert is_overloaded_error(OverloadedError("boom")) is True

    @pytest.mark.parametrize("message", [
        "503 Service Unavailable",
        "The model is overloaded",
        "service unavailable, try later",
    ])
    def test_message_markers(self, message):
        assert is_overloaded_error(Exception(message)) is True

    def test_other_errors(self):
        assert is_overloaded_error(ValueError("bad request")) is False


class TestCallWithRetry:
    """Tests for call_with_retry."""

    def test_backoff_doubles(self):
        assert [backoff_delay(n, 1.0) for n in (1, 2, 3)] == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_first_call_succeeds(self):
        func = AsyncMock(return_value="ok")
        sleep = AsyncMock()

        result = await call_with_retry(func, sleep=sleep)

        assert result == "ok"
        assert func.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retries_overloaded_then_succeeds(self):
        func = AsyncMock(side_effect=[OverloadedError("503"), OverloadedError("503"), "ok"])
        sleep = AsyncMock()

        result = await call_with_retry(func, max_attempts=3, base_delay=1.0, sleep=sleep)

        assert result == "ok"
        assert func.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhausted_attempts(self):
        func = AsyncMock(side_effect=OverloadedError("503"))
        sleep = AsyncMock()

        with pytest.raises(GenerationUnavailable) as exc_info:
            await call_with_retry(func, max_attempts=3, base_delay=1.0, sleep=sleep)

        assert exc_info.value.reason == GenerationUnavailable.OVERLOADED
        assert func.await_count == 3
        # No sleep after the final attempt
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]
        assert "overloaded" in exc_info.value.user_message

    @pytest.mark.asyncio
    async def test_non_retryable_error_fails_fast(self):
        func = AsyncMock(side_effect=ValueError("400 bad request"))
        sleep = AsyncMock()

        with pytest.raises(GenerationUnavailable) as exc_info:
            await call_with_retry(func, sleep=sleep)

        assert exc_info.value.reason == GenerationUnavailable.SERVICE
        assert func.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_generation_unavailable_passes_through(self):
        error = GenerationUnavailable("nope", reason=GenerationUnavailable.CONFIGURATION)
        func = AsyncMock(side_effect=error)

        with pytest.raises(GenerationUnavailable) as exc_info:
            await call_with_retry(func, sleep=AsyncMock())

        assert exc_info.value is error


class TestGenerationService:
    """Tests for GenerationService."""

    def _settings(self, configured: bool = True) -> Mock:
        settings = Mock()
        settings.has_azure_openai = configured
        settings.azure_openai_api_key = "key" if configured else None
        settings.azure_openai_endpoint = "https://test.openai.azure.com/"
        settings.azure_openai_deployment = "gpt-4o"
        settings.azure_openai_api_version = "2024-10-21"
        settings.generation_max_attempts = 3
        settings.generation_base_delay = 0
        return settings

    @pytest.mark.asyncio
    @patch("src.services.generation.service.get_settings")
    async def test_not_configured(self, mock_get_settings):
        mock_get_settings.return_value = self._settings(configured=False)
        service = GenerationService()

        with pytest.raises(GenerationUnavailable) as exc_info:
            await service.generate("prompt")

        assert exc_info.value.reason == GenerationUnavailable.CONFIGURATION
        assert exc_info.value.user_message == (
            "API key not configured. Please check your environment variables."
        )

    @pytest.mark.asyncio
    @patch("src.services.generation.service.AzureOpenAIChatClient")
    @patch("src.services.generation.service.get_settings")
    async def test_generate_returns_text(self, mock_get_settings, mock_client_cls):
        mock_get_settings.return_value = self._settings()
        agent = Mock()
        agent.run = AsyncMock(return_value=Mock(text='  {"slides": []}  '))
        mock_client_cls.return_value.create_agent.return_value = agent

        service = GenerationService()
        text = await service.generate("Make slides on tea")

        assert text == '{"slides": []}'
        mock_client_cls.assert_called_once()
        assert mock_client_cls.call_args.kwargs["api_key"] == "key"
        messages = agent.run.await_args.args[0]
        assert messages[0].text == "Make slides on tea"

    @pytest.mark.asyncio
    @patch("src.services.generation.service.AzureOpenAIChatClient")
    @patch("src.services.generation.service.get_settings")
    async def test_empty_response(self, mock_get_settings, mock_client_cls):
        mock_get_settings.return_value = self._settings()
        agent = Mock()
        agent.run = AsyncMock(return_value=Mock(text=""))
        mock_client_cls.return_value.create_agent.return_value = agent

        with pytest.raises(GenerationUnavailable):
            await GenerationService().generate("prompt")

    @pytest.mark.asyncio
    @patch("src.services.generation.service.AzureOpenAIChatClient")
    @patch("src.services.generation.service.get_settings")
    async def test_overloaded_then_success(self, mock_get_settings, mock_client_cls):
        mock_get_settings.return_value = self._settings()
        agent = Mock()
        agent.run = AsyncMock(side_effect=[OverloadedError("503"), Mock(text="reply")])
        mock_client_cls.return_value.create_agent.return_value = agent

        text = await GenerationService().generate("prompt")

        assert text == "reply"
        assert agent.run.await_count == 2
