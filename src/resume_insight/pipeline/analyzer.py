"""Analyze pipeline: one validated analysis per resume."""

from __future__ import annotations

import logging
import time

from resume_insight.clients.base import LLMClient
from resume_insight.models.analysis import AnalysisResultV2_3
from resume_insight.models.llm import AnalyzeInput
from resume_insight.pipeline.apply_plan import build_apply_plan
from resume_insight.pipeline.recommendations import generate_recommendations
from resume_insight.pipeline.validators import AnalysisOutcome, validate_with_retry

logger = logging.getLogger(__name__)


class AnalyzePipeline:
    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def analyze(self, data: AnalyzeInput) -> AnalysisOutcome:
        """Run the versioned analysis and return the validated result.

        The outcome also carries ranked recommendations and, for v2_3
        results, the apply plan.
        """
        start = time.monotonic()
        logger.info(
            "Analysis started: schema_version=%s model=%s job_description=%s",
            data.schema_version,
            self.llm.model,
            data.has_job_description,
        )
        outcome = await validate_with_retry(self.llm, data)
        outcome.recommendations = generate_recommendations(outcome.result)
        if isinstance(outcome.result, AnalysisResultV2_3):
            outcome.apply_plan = build_apply_plan(outcome.result)
        logger.info(
            "Analysis completed: schema_version=%s validated_as=%s recommendations=%d elapsed=%.1fs",
            data.schema_version,
            outcome.version,
            len(outcome.recommendations),
            time.monotonic() - start,
        )
        return outcome
