"""Resume LLM client: raw prompt completion and JSON analysis."""

from __future__ import annotations

import logging

from resume_insight.clients.anthropic_provider import AnthropicProvider
from resume_insight.clients.base import CompletionProvider
from resume_insight.clients.gateway import CompletionGateway
from resume_insight.clients.openai_provider import OpenAIProvider
from resume_insight.config import LLMConfig
from resume_insight.errors import ConfigurationError
from resume_insight.logging.usage_store import UsageStore
from resume_insight.models.llm import (
    AnalysisCompletion,
    AnalyzeInput,
    AnalyzeOptions,
    ChatMessage,
)
from resume_insight.pipeline.repair import JSONRepairLoop
from resume_insight.prompts.registry import PromptTemplateRegistry

logger = logging.getLogger(__name__)

PROVIDERS: dict[str, type[CompletionProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
}


class ResumeLLMClient:
    """Two operations over one gateway and model.

    complete() sends a single user prompt and returns the raw text.
    analyze_resume() runs the direct-then-repair loop and returns valid JSON.
    """

    def __init__(
        self,
        gateway: CompletionGateway,
        model: str,
        registry: PromptTemplateRegistry | None = None,
    ):
        if not model or not model.strip():
            raise ConfigurationError("LLM model is required")
        self.gateway = gateway
        self.model = model.strip()
        self.registry = registry or PromptTemplateRegistry.default()
        self._loop = JSONRepairLoop(gateway, self.registry, self.model)

    async def complete(self, prompt: str) -> str:
        result = await self.gateway.complete([ChatMessage("user", prompt)], self.model)
        return result.text

    async def analyze_resume(
        self, data: AnalyzeInput, options: AnalyzeOptions | None = None
    ) -> AnalysisCompletion:
        return await self._loop.run(data, options)


def create_llm_client(
    config: LLMConfig,
    *,
    api_key: str | None = None,
    registry: PromptTemplateRegistry | None = None,
    usage_store: UsageStore | None = None,
) -> ResumeLLMClient:
    """Build a client for the configured provider.

    Raises ConfigurationError for an unknown provider, a blank model or a
    missing API key.
    """
    provider_cls = PROVIDERS.get(config.provider.strip().lower())
    if provider_cls is None:
        raise ConfigurationError(
            f"Unknown LLM provider {config.provider!r}, expected one of: {', '.join(PROVIDERS)}"
        )
    if not config.model.strip():
        raise ConfigurationError("LLM model is required")

    provider = provider_cls(api_key=api_key, timeout=config.timeout)
    gateway = CompletionGateway(
        provider,
        timeout=config.timeout,
        max_tokens=config.max_tokens,
        no_temperature_models=config.no_temperature_models,
        usage_store=usage_store,
    )
    logger.info("LLM client ready: provider=%s model=%s", provider.name, config.model)
    return ResumeLLMClient(gateway, config.model, registry)
