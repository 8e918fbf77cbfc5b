"""Repository interfaces read and written by the apply pipeline."""

from __future__ import annotations

from typing import Protocol

from resume_insight.models.artifact import (
    AnalysisRecord,
    DocumentRecord,
    GeneratedArtifact,
)


class AnalysisRepository(Protocol):
    def get_by_id(self, analysis_id: str) -> AnalysisRecord | None: ...


class DocumentRepository(Protocol):
    def get_by_id(self, document_id: str) -> DocumentRecord | None: ...


class ArtifactRepository(Protocol):
    def create(self, artifact: GeneratedArtifact) -> GeneratedArtifact: ...

    def get(self, user_id: str, artifact_id: str) -> GeneratedArtifact | None: ...

    def list_by_user(self, user_id: str, limit: int = 50) -> list[GeneratedArtifact]: ...


class MemoryAnalysisRepository:
    def __init__(self, records: list[AnalysisRecord] | None = None):
        self._records = {r.id: r for r in records or []}

    def add(self, record: AnalysisRecord) -> None:
        self._records[record.id] = record

    def get_by_id(self, analysis_id: str) -> AnalysisRecord | None:
        return self._records.get(analysis_id)


class MemoryDocumentRepository:
    def __init__(self, records: list[DocumentRecord] | None = None):
        self._records = {r.id: r for r in records or []}

    def add(self, record: DocumentRecord) -> None:
        self._records[record.id] = record

    def get_by_id(self, document_id: str) -> DocumentRecord | None:
        return self._records.get(document_id)
