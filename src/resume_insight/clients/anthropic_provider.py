"""Anthropic Messages adapter.

The Messages API has no developer role and no JSON response format, so system
and developer messages are folded into the system prompt together with a
JSON-only instruction.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import anthropic

from resume_insight.clients.base import CompletionProvider, CompletionRequest
from resume_insight.clients.openai_provider import provider_error_details
from resume_insight.errors import (
    ConfigurationError,
    EmptyResponseError,
    ProviderError,
    ProviderTimeoutError,
    TransportError,
)
from resume_insight.models.llm import CompletionResult, TokenUsage

logger = logging.getLogger(__name__)

JSON_OBJECT_INSTRUCTION = "Respond with a single JSON object and nothing else."


class AnthropicProvider(CompletionProvider):
    name = "anthropic"

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        client: Any | None = None,
    ):
        if client is None:
            key = api_key or os.environ.get("ANTHROPIC_API_KEY", "")
            if not key.strip():
                raise ConfigurationError("ANTHROPIC_API_KEY is required")
            kwargs: dict = {"api_key": key, "max_retries": 0}
            if timeout is not None:
                kwargs["timeout"] = timeout
            client = anthropic.AsyncAnthropic(**kwargs)
        self.client = client

    @staticmethod
    def split_messages(request: CompletionRequest) -> tuple[str, list[dict]]:
        system_parts = [m.content for m in request.messages if m.role in ("system", "developer")]
        system_parts.append(JSON_OBJECT_INSTRUCTION)
        messages = [
            {"role": "user", "content": m.content}
            for m in request.messages
            if m.role == "user"
        ]
        return "\n\n".join(system_parts), messages

    async def create(self, request: CompletionRequest) -> CompletionResult:
        system, messages = self.split_messages(request)
        kwargs: dict = {
            "model": request.model,
            "max_tokens": request.max_tokens,
            "system": system,
            "messages": messages,
        }
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature

        logger.debug("Anthropic call: model=%s temperature=%s", request.model, request.temperature)
        try:
            message = await self.client.messages.create(**kwargs)
        except anthropic.APITimeoutError as e:
            raise ProviderTimeoutError("anthropic request timeout") from e
        except anthropic.APIConnectionError as e:
            raise TransportError(f"anthropic connection error: {e}") from e
        except anthropic.APIStatusError as e:
            msg, error_type = provider_error_details(e)
            raise ProviderError(msg, error_type, status_code=e.status_code) from e
        except anthropic.AnthropicError as e:
            raise TransportError(f"anthropic response parse: {e}") from e

        text = "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        ).strip()
        if not text:
            raise EmptyResponseError("anthropic response empty content")

        usage = None
        if message.usage is not None:
            input_tokens = message.usage.input_tokens or 0
            output_tokens = message.usage.output_tokens or 0
            usage = TokenUsage(
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            )
        return CompletionResult(text=text, model=request.model, usage=usage)
