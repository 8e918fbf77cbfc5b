"""Data models for the resume analysis and generation pipelines."""

from resume_insight.models.analysis import (
    AnalysisResult,
    AnalysisResultV1,
    AnalysisResultV2,
    AnalysisResultV2_1,
    AnalysisResultV2_2,
    AnalysisResultV2_3,
)
from resume_insight.models.artifact import (
    ANALYSIS_STATUS_COMPLETED,
    AnalysisRecord,
    DocumentRecord,
    GeneratedArtifact,
)
from resume_insight.models.llm import (
    AnalysisCompletion,
    AnalyzeInput,
    AnalyzeOptions,
    ChatMessage,
    CompletionResult,
    TokenUsage,
)
from resume_insight.models.resume import (
    ResumeExperience,
    ResumeHeader,
    ResumeModel,
    validate_resume_model,
)

__all__ = [
    "ANALYSIS_STATUS_COMPLETED",
    "AnalysisCompletion",
    "AnalysisRecord",
    "AnalysisResult",
    "AnalysisResultV1",
    "AnalysisResultV2",
    "AnalysisResultV2_1",
    "AnalysisResultV2_2",
    "AnalysisResultV2_3",
    "AnalyzeInput",
    "AnalyzeOptions",
    "ChatMessage",
    "CompletionResult",
    "DocumentRecord",
    "GeneratedArtifact",
    "ResumeExperience",
    "ResumeHeader",
    "ResumeModel",
    "TokenUsage",
    "validate_resume_model",
]
