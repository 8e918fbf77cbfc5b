"""Provider and client interfaces for LLM completions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Protocol

from resume_insight.models.llm import (
    AnalysisCompletion,
    AnalyzeInput,
    AnalyzeOptions,
    ChatMessage,
    CompletionResult,
)


@dataclass(frozen=True)
class CompletionRequest:
    """One provider call. temperature=None means the field is omitted."""

    messages: list[ChatMessage]
    model: str
    temperature: float | None = 0.0
    max_tokens: int = 8192


class CompletionProvider(ABC):
    """Adapter over a vendor SDK that always asks for a JSON object."""

    name: str = ""

    @abstractmethod
    async def create(self, request: CompletionRequest) -> CompletionResult:
        """Send the request and return the completion text.

        Raises ProviderTimeoutError, ProviderError, EmptyResponseError or
        TransportError.
        """


class LLMClient(Protocol):
    model: str

    async def complete(self, prompt: str) -> str: ...

    async def analyze_resume(
        self, data: AnalyzeInput, options: AnalyzeOptions | None = None
    ) -> AnalysisCompletion: ...
