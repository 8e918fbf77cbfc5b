"""Records read and written by the apply pipeline."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ANALYSIS_STATUS_COMPLETED = "completed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalysisRecord(BaseModel):
    """Stored analysis as seen by the apply pipeline."""

    id: str
    user_id: str
    document_id: str
    status: str = "pending"
    result: dict[str, Any] | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == ANALYSIS_STATUS_COMPLETED and self.result is not None


class DocumentRecord(BaseModel):
    id: str
    user_id: str
    extracted_text_key: str | None = None


class GeneratedArtifact(BaseModel):
    """Persisted metadata for one rendered resume document."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    document_id: str
    analysis_id: str
    template_id: str
    storage_key: str
    mime_type: str
    size_bytes: int
    created_at: datetime = Field(default_factory=_utcnow)
    deleted_at: datetime | None = None
