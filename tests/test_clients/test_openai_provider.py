"""Tests for the OpenAI Chat Completions adapter."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from resume_insight.clients.base import CompletionRequest
from resume_insight.clients.openai_provider import OpenAIProvider, provider_error_details
from resume_insight.errors import (
    ConfigurationError,
    EmptyResponseError,
    ProviderError,
    ProviderTimeoutError,
    TransportError,
)
from resume_insight.models.llm import ChatMessage

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _make_completion(content: str | None, prompt_tokens: int = 10, completion_tokens: int = 5) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.usage.prompt_tokens = prompt_tokens
    response.usage.completion_tokens = completion_tokens
    response.usage.total_tokens = prompt_tokens + completion_tokens
    return response


def _make_provider(create: AsyncMock) -> OpenAIProvider:
    client = MagicMock()
    client.chat.completions.create = create
    return OpenAIProvider(client=client)


def _request(temperature: float | None = 0.0) -> CompletionRequest:
    return CompletionRequest(
        messages=[ChatMessage("system", "sys"), ChatMessage("user", "resume")],
        model="gpt-4o-mini",
        temperature=temperature,
    )


class TestOpenAIProviderInit:
    def test_missing_key_raises(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
            OpenAIProvider()

    def test_builds_client_without_sdk_retries(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        with patch("resume_insight.clients.openai_provider.openai.AsyncOpenAI") as mock_cls:
            OpenAIProvider(timeout=30)
            mock_cls.assert_called_once_with(api_key="sk-test", max_retries=0, timeout=30)


class TestOpenAIProviderCreate:
    async def test_sends_json_object_format_and_temperature(self):
        create = AsyncMock(return_value=_make_completion('{"a": 1}'))
        provider = _make_provider(create)

        result = await provider.create(_request())

        kwargs = create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["temperature"] == 0.0
        assert kwargs["messages"][0] == {"role": "system", "content": "sys"}
        assert result.text == '{"a": 1}'
        assert result.usage.total_tokens == 15

    async def test_omits_temperature_when_none(self):
        create = AsyncMock(return_value=_make_completion("{}"))
        provider = _make_provider(create)

        await provider.create(_request(temperature=None))

        assert "temperature" not in create.call_args.kwargs

    async def test_empty_content_raises(self):
        provider = _make_provider(AsyncMock(return_value=_make_completion("   ")))
        with pytest.raises(EmptyResponseError):
            await provider.create(_request())

    async def test_missing_choices_raises(self):
        response = _make_completion("{}")
        response.choices = []
        provider = _make_provider(AsyncMock(return_value=response))
        with pytest.raises(EmptyResponseError):
            await provider.create(_request())

    async def test_status_error_maps_to_provider_error(self):
        err = openai.BadRequestError(
            "Error code: 400",
            response=httpx.Response(400, request=REQUEST),
            body={
                "message": "Unsupported value: 'temperature' does not support 0",
                "type": "invalid_request_error",
            },
        )
        provider = _make_provider(AsyncMock(side_effect=err))

        with pytest.raises(ProviderError) as exc_info:
            await provider.create(_request())

        assert exc_info.value.status_code == 400
        assert exc_info.value.error_type == "invalid_request_error"
        assert "temperature" in str(exc_info.value)

    async def test_timeout_maps_to_provider_timeout(self):
        provider = _make_provider(AsyncMock(side_effect=openai.APITimeoutError(request=REQUEST)))
        with pytest.raises(ProviderTimeoutError):
            await provider.create(_request())

    async def test_connection_error_maps_to_transport(self):
        err = openai.APIConnectionError(message="connection reset", request=REQUEST)
        provider = _make_provider(AsyncMock(side_effect=err))
        with pytest.raises(TransportError):
            await provider.create(_request())


class TestProviderErrorDetails:
    def test_flat_body(self):
        err = MagicMock(spec=["message", "body"])
        err.message = "fallback"
        err.body = {"message": "bad temperature", "type": "invalid_request_error"}
        assert provider_error_details(err) == ("bad temperature", "invalid_request_error")

    def test_nested_body(self):
        err = MagicMock(spec=["message", "body"])
        err.message = "fallback"
        err.body = {"type": "error", "error": {"message": "overloaded", "type": "overloaded_error"}}
        assert provider_error_details(err) == ("overloaded", "overloaded_error")

    def test_no_body_uses_message(self):
        err = MagicMock(spec=["message", "body"])
        err.message = "plain"
        err.body = None
        assert provider_error_details(err) == ("plain", "")
