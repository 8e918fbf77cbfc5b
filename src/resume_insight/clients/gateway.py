"""Completion gateway: temperature policy, timeout and usage accounting."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt

from resume_insight.clients.base import CompletionProvider, CompletionRequest
from resume_insight.errors import ProviderError, ProviderTimeoutError, ResumeInsightError, sanitize_error
from resume_insight.logging.cost_calculator import calculate_cost
from resume_insight.logging.models import UsageRecord
from resume_insight.logging.usage_store import UsageStore
from resume_insight.models.llm import ChatMessage, CompletionResult

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.0
DEFAULT_TIMEOUT_SECONDS = 120.0

# Model families that only accept the default temperature
FIXED_TEMPERATURE_PREFIXES = ("gpt-5", "o1", "o3", "o4")

_TEMPERATURE_REJECTION_MARKERS = (
    "unsupported",
    "does not support",
    "not supported",
    "only the default",
)


def is_temperature_rejection(err: BaseException) -> bool:
    """True when a provider error rejects the temperature parameter."""
    if not isinstance(err, ProviderError):
        return False
    msg = str(err).lower()
    return "temperature" in msg and any(marker in msg for marker in _TEMPERATURE_REJECTION_MARKERS)


class CompletionGateway:
    """Sends chat messages to a provider with at most one temperature retry."""

    def __init__(
        self,
        provider: CompletionProvider,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_tokens: int = 8192,
        no_temperature_models: Iterable[str] = (),
        usage_store: UsageStore | None = None,
    ):
        self.provider = provider
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.no_temperature_models = tuple(
            m.strip().lower() for m in no_temperature_models if m.strip()
        )
        self.usage_store = usage_store

    def temperature_for(self, model: str) -> float | None:
        """Return 0 or None when the model must not receive a temperature."""
        name = model.strip().lower()
        for entry in self.no_temperature_models:
            if name == entry or name.startswith(entry):
                return None
        if name.startswith(FIXED_TEMPERATURE_PREFIXES):
            return None
        return DEFAULT_TEMPERATURE

    async def complete(
        self,
        messages: list[ChatMessage],
        model: str,
        *,
        schema_version: str = "",
    ) -> CompletionResult:
        temperature = self.temperature_for(model)
        retrying = AsyncRetrying(
            stop=stop_after_attempt(2 if temperature is not None else 1),
            retry=retry_if_exception(is_temperature_rejection),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            "Model %s rejected temperature, retrying without it", model
                        )
                        temperature = None
                    result = await self._send(
                        CompletionRequest(
                            messages=messages,
                            model=model,
                            temperature=temperature,
                            max_tokens=self.max_tokens,
                        )
                    )
        except ResumeInsightError as e:
            logger.error(
                "LLM call failed: provider=%s model=%s schema_version=%s error=%s",
                self.provider.name,
                model,
                schema_version,
                sanitize_error(e),
                exc_info=True,
            )
            self._save_record(
                UsageRecord(
                    provider=self.provider.name,
                    model=model,
                    schema_version=schema_version,
                    success=False,
                    error_message=sanitize_error(e),
                )
            )
            raise

        self._record_usage(result, schema_version)
        return result

    async def _send(self, request: CompletionRequest) -> CompletionResult:
        try:
            return await asyncio.wait_for(self.provider.create(request), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise ProviderTimeoutError(
                f"{self.provider.name} request timeout after {self.timeout:g}s"
            ) from e

    def _record_usage(self, result: CompletionResult, schema_version: str) -> None:
        usage = result.usage
        if usage is None:
            logger.info("LLM response: model=%s schema_version=%s", result.model, schema_version)
            self._save_record(
                UsageRecord(
                    provider=self.provider.name,
                    model=result.model,
                    schema_version=schema_version,
                )
            )
            return
        logger.info(
            "LLM response: model=%s schema_version=%s prompt_tokens=%d completion_tokens=%d total_tokens=%d",
            result.model,
            schema_version,
            usage.prompt_tokens,
            usage.completion_tokens,
            usage.total_tokens,
        )
        self._save_record(
            UsageRecord(
                provider=self.provider.name,
                model=result.model,
                schema_version=schema_version,
                prompt_tokens=usage.prompt_tokens,
                completion_tokens=usage.completion_tokens,
                total_tokens=usage.total_tokens,
                estimated_cost_usd=calculate_cost(
                    [(result.model, usage.prompt_tokens, usage.completion_tokens)]
                ),
            )
        )

    def _save_record(self, record: UsageRecord) -> None:
        if self.usage_store is None:
            return
        try:
            self.usage_store.save_record(record)
        except Exception:
            logger.exception("Failed to save usage record")
