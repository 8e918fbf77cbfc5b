"""Apply pipeline: turn a completed analysis into a rendered resume document."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable

from pydantic import ValidationError

from resume_insight.clients.base import LLMClient
from resume_insight.config import DEFAULT_TEMPLATE_ID
from resume_insight.errors import (
    InvalidInputError,
    InvalidLLMOutputError,
    InvalidResultSchemaError,
    NotFoundError,
    PreconditionFailedError,
    RenderFailureError,
    StorageFailureError,
)
from resume_insight.models.artifact import AnalysisRecord, DocumentRecord, GeneratedArtifact
from resume_insight.models.resume import ResumeModel, validate_resume_model
from resume_insight.prompts.templates import RESUME_GEN_V1
from resume_insight.storage.object_store import ObjectStore
from resume_insight.storage.repositories import (
    AnalysisRepository,
    ArtifactRepository,
    DocumentRepository,
)
from resume_insight.templates.docx_renderer import render_resume
from resume_insight.utils.json_parser import extract_json_object

logger = logging.getLogger(__name__)

Renderer = Callable[[ResumeModel], bytes]

_GENERATION_PLACEHOLDER = re.compile(r"\{\{(RESUME_TEXT|ANALYSIS_JSON)\}\}")


def build_generation_prompt(resume_text: str, analysis_result: dict) -> str:
    """Fill the generation template in one pass; inserted text is never rescanned."""
    values = {
        "RESUME_TEXT": resume_text,
        "ANALYSIS_JSON": json.dumps(analysis_result, ensure_ascii=False),
    }
    return _GENERATION_PLACEHOLDER.sub(lambda m: values[m.group(1)], RESUME_GEN_V1)


def output_file_name(template_id: str) -> str:
    return f"resume_generated_{template_id}.docx"


class ApplyPipeline:
    """Generates, renders and stores one resume per call. No retries."""

    def __init__(
        self,
        llm: LLMClient,
        analyses: AnalysisRepository,
        documents: DocumentRepository,
        artifacts: ArtifactRepository,
        store: ObjectStore,
        renderer: Renderer = render_resume,
    ):
        self.llm = llm
        self.analyses = analyses
        self.documents = documents
        self.artifacts = artifacts
        self.store = store
        self.renderer = renderer

    def _check_preconditions(
        self, user_id: str, analysis_id: str, template_id: str
    ) -> tuple[AnalysisRecord, DocumentRecord]:
        if not user_id or not analysis_id:
            raise InvalidInputError("user_id and analysis_id are required")
        if template_id != DEFAULT_TEMPLATE_ID:
            raise InvalidInputError(f"unsupported template: {template_id}")

        analysis = self.analyses.get_by_id(analysis_id)
        if analysis is None or analysis.user_id != user_id:
            raise NotFoundError(f"analysis {analysis_id} not found")
        if not analysis.is_completed:
            raise PreconditionFailedError(f"analysis {analysis_id} is not complete")

        document = self.documents.get_by_id(analysis.document_id)
        if document is None or document.user_id != user_id:
            raise NotFoundError(f"document {analysis.document_id} not found")
        if not (document.extracted_text_key or "").strip():
            raise PreconditionFailedError(f"document {document.id} has no extracted text")
        return analysis, document

    def _decode_model(self, raw: str, analysis_id: str) -> ResumeModel:
        try:
            payload = extract_json_object(raw)
        except InvalidLLMOutputError as e:
            logger.warning("Apply pipeline invalid json: analysis_id=%s error=%s", analysis_id, e)
            raise
        try:
            model = ResumeModel.model_validate_json(payload)
        except ValidationError as e:
            logger.warning("Apply decode failed: analysis_id=%s error=%s", analysis_id, e)
            raise InvalidResultSchemaError("invalid resume model") from e
        try:
            validate_resume_model(model)
        except ValueError as e:
            logger.warning("Apply resume model invalid: analysis_id=%s error=%s", analysis_id, e)
            raise InvalidResultSchemaError(f"invalid resume model: {e}") from e
        return model

    async def apply(
        self,
        user_id: str,
        analysis_id: str,
        template_id: str = "",
    ) -> GeneratedArtifact:
        template_id = template_id.strip() or DEFAULT_TEMPLATE_ID
        analysis, document = self._check_preconditions(user_id, analysis_id, template_id)

        try:
            resume_text = self.store.open(document.extracted_text_key).decode("utf-8", errors="replace")
        except (OSError, ValueError) as e:
            raise StorageFailureError(f"load extracted text: {e}") from e

        prompt = build_generation_prompt(resume_text, analysis.result)
        raw = await self.llm.complete(prompt)
        logger.info("Apply generation received: analysis_id=%s chars=%d", analysis.id, len(raw))

        model = self._decode_model(raw, analysis.id)

        try:
            data = self.renderer(model)
        except Exception as e:
            logger.error("Render failed: analysis_id=%s", analysis.id, exc_info=True)
            raise RenderFailureError(str(e)) from e

        try:
            stored = self.store.save(user_id, output_file_name(template_id), data)
        except (OSError, ValueError) as e:
            raise StorageFailureError(f"save artifact: {e}") from e

        artifact = GeneratedArtifact(
            user_id=user_id,
            document_id=document.id,
            analysis_id=analysis.id,
            template_id=template_id,
            storage_key=stored.key,
            mime_type=stored.mime_type,
            size_bytes=stored.size,
        )
        try:
            created = self.artifacts.create(artifact)
        except Exception as e:
            raise StorageFailureError(f"create artifact record: {e}") from e
        logger.info(
            "Apply completed: analysis_id=%s artifact_id=%s size=%d",
            analysis.id,
            created.id,
            created.size_bytes,
        )
        return created
