"""OpenAI Chat Completions adapter."""

from __future__ import annotations

import logging
import os
from typing import Any

import openai

from resume_insight.clients.base import CompletionProvider, CompletionRequest
from resume_insight.errors import (
    ConfigurationError,
    EmptyResponseError,
    ProviderError,
    ProviderTimeoutError,
    TransportError,
)
from resume_insight.models.llm import CompletionResult, TokenUsage

logger = logging.getLogger(__name__)


def provider_error_details(err: Exception) -> tuple[str, str]:
    """Pull (message, type) out of an SDK status error body.

    OpenAI puts the error object at the top of the body, Anthropic nests it
    under "error".
    """
    message = getattr(err, "message", "") or str(err)
    error_type = getattr(err, "type", None) or ""
    body = getattr(err, "body", None)
    if isinstance(body, dict):
        inner = body.get("error") if isinstance(body.get("error"), dict) else body
        message = inner.get("message") or message
        error_type = error_type or inner.get("type") or ""
    return str(message), str(error_type)


class OpenAIProvider(CompletionProvider):
    name = "openai"

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        client: Any | None = None,
    ):
        if client is None:
            key = api_key or os.environ.get("OPENAI_API_KEY", "")
            if not key.strip():
                raise ConfigurationError("OPENAI_API_KEY is required")
            kwargs: dict = {"api_key": key, "max_retries": 0}
            if timeout is not None:
                kwargs["timeout"] = timeout
            client = openai.AsyncOpenAI(**kwargs)
        self.client = client

    async def create(self, request: CompletionRequest) -> CompletionResult:
        kwargs: dict = {
            "model": request.model,
            "messages": [{"role": m.role, "content": m.content} for m in request.messages],
            "response_format": {"type": "json_object"},
        }
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature

        logger.debug("OpenAI call: model=%s temperature=%s", request.model, request.temperature)
        try:
            response = await self.client.chat.completions.create(**kwargs)
        except openai.APITimeoutError as e:
            raise ProviderTimeoutError("openai request timeout") from e
        except openai.APIConnectionError as e:
            raise TransportError(f"openai connection error: {e}") from e
        except openai.APIStatusError as e:
            message, error_type = provider_error_details(e)
            raise ProviderError(message, error_type, status_code=e.status_code) from e
        except openai.OpenAIError as e:
            raise TransportError(f"openai response parse: {e}") from e

        if not response.choices:
            raise EmptyResponseError("openai response missing choices")
        content = (response.choices[0].message.content or "").strip()
        if not content:
            raise EmptyResponseError("openai response empty content")

        usage = None
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
                total_tokens=response.usage.total_tokens or 0,
            )
        return CompletionResult(text=content, model=request.model, usage=usage)
