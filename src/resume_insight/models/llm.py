"""Value types passed between the prompt builder, gateway and pipelines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from resume_insight.errors import InvalidInputError

Role = Literal["system", "developer", "user"]


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True)
class CompletionResult:
    """Raw completion text plus optional usage counters."""

    text: str
    model: str
    usage: TokenUsage | None = None


@dataclass(frozen=True)
class AnalyzeInput:
    """Inputs for one resume analysis."""

    resume_text: str
    job_description: str = ""
    schema_version: str = "v1"
    target_role: str = ""

    def __post_init__(self) -> None:
        if not self.resume_text or not self.resume_text.strip():
            raise InvalidInputError("resume_text must not be empty")
        object.__setattr__(self, "schema_version", (self.schema_version or "").strip())
        object.__setattr__(self, "job_description", self.job_description or "")
        object.__setattr__(self, "target_role", (self.target_role or "").strip())

    @property
    def has_job_description(self) -> bool:
        return bool(self.job_description.strip())


@dataclass(frozen=True)
class AnalyzeOptions:
    """Per-call overrides for an analyze request.

    repair_raw: a previous raw response; skips the direct attempt and asks the
        model to fix it.
    extra_system_message: prepended as an additional system message.
    """

    repair_raw: str | None = None
    extra_system_message: str | None = None


@dataclass
class AnalysisCompletion:
    """Syntactically valid JSON returned by the repair loop."""

    raw: str
    prompt_hash: str
    calls: int
    usage: list[TokenUsage] = field(default_factory=list)
