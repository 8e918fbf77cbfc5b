"""Exception hierarchy shared by the analyze and apply pipelines."""

from __future__ import annotations


class ResumeInsightError(Exception):
    """Base class for every error raised by resume_insight."""


class ConfigurationError(ResumeInsightError):
    """Client could not be constructed (missing model, credential, provider)."""


class InvalidInputError(ResumeInsightError, ValueError):
    """Missing or malformed caller arguments, unsupported template or version."""


class NotFoundError(ResumeInsightError):
    """Referenced entity is absent or not owned by the caller."""


class PreconditionFailedError(ResumeInsightError):
    """Entity exists but is not in a usable state (analysis pending, no text)."""


class ProviderTimeoutError(ResumeInsightError):
    """The LLM provider call exceeded the configured timeout."""


class ProviderError(ResumeInsightError):
    """The LLM provider reported a failure."""

    def __init__(self, message: str, error_type: str = "", *, status_code: int | None = None):
        super().__init__(f"{message} ({error_type})" if error_type else message)
        self.message = message
        self.error_type = error_type
        self.status_code = status_code


class EmptyResponseError(ResumeInsightError):
    """The provider answered without any completion content."""


class TransportError(ResumeInsightError):
    """The request never produced a provider response (network, decode)."""


class InvalidLLMOutputError(ResumeInsightError):
    """Response is not valid JSON after all permitted repairs."""


class InvalidResultSchemaError(ResumeInsightError):
    """Valid JSON that fails the structural rules of its target shape."""


class UnsupportedClaimError(InvalidResultSchemaError):
    """A rewritten bullet claims impact the resume does not support."""


class RenderFailureError(ResumeInsightError):
    """The document renderer could not produce an artifact."""


class StorageFailureError(ResumeInsightError):
    """Reading or writing through a storage collaborator failed."""


def sanitize_error(err: BaseException | str, max_len: int = 500) -> str:
    """Flatten an error message to a single bounded line for logs."""
    msg = str(err).replace("\n", " ").replace("\r", " ").strip()
    if len(msg) > max_len:
        msg = msg[:max_len]
    return msg
