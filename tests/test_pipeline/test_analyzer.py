"""End-to-end tests for AnalyzePipeline over a scripted provider."""

from __future__ import annotations

import json

import pytest

from resume_insight.clients.llm_client import ResumeLLMClient
from resume_insight.errors import InvalidLLMOutputError, ProviderError
from resume_insight.models.llm import AnalyzeInput
from resume_insight.pipeline.analyzer import AnalyzePipeline
from resume_insight.pipeline.validators import V2_REPAIR_MESSAGE

TEMPERATURE_REJECTED = ProviderError(
    "temperature is not supported with this model", "invalid_request_error", status_code=400
)


@pytest.fixture
def pipeline(gateway) -> AnalyzePipeline:
    return AnalyzePipeline(ResumeLLMClient(gateway, "gpt-4o-mini"))


class TestAnalyzePipeline:
    async def test_v1_single_call(self, pipeline, scripted_provider, analysis_v1, sample_resume_text):
        scripted_provider.responses = [json.dumps(analysis_v1)]

        outcome = await pipeline.analyze(AnalyzeInput(resume_text=sample_resume_text))

        assert outcome.version == "v1"
        assert outcome.result.summary.overall_assessment.startswith("Solid")
        assert len(scripted_provider.requests) == 1

    async def test_fenced_response_is_repaired(
        self, pipeline, scripted_provider, analysis_v1, sample_resume_text
    ):
        scripted_provider.responses = [
            f"```json\n{json.dumps(analysis_v1)}\n```",
            json.dumps(analysis_v1),
        ]

        outcome = await pipeline.analyze(AnalyzeInput(resume_text=sample_resume_text))

        assert outcome.version == "v1"
        assert len(scripted_provider.requests) == 2

    async def test_invalid_json_twice_fails(self, pipeline, scripted_provider, sample_resume_text):
        scripted_provider.responses = ["not json", "still not json"]

        with pytest.raises(InvalidLLMOutputError):
            await pipeline.analyze(AnalyzeInput(resume_text=sample_resume_text))

        assert len(scripted_provider.requests) == 2

    async def test_schema_repair_sends_version_message(
        self, pipeline, scripted_provider, analysis_v2_3, sample_resume_text, sample_job_description
    ):
        bad = dict(analysis_v2_3, meta={**analysis_v2_3["meta"], "promptVersion": ""})
        scripted_provider.responses = [json.dumps(bad), json.dumps(analysis_v2_3)]

        outcome = await pipeline.analyze(
            AnalyzeInput(
                resume_text=sample_resume_text,
                job_description=sample_job_description,
                schema_version="v2_3",
            )
        )

        assert outcome.version == "v2_3"
        repair = scripted_provider.requests[1].messages
        assert repair[0].content == V2_REPAIR_MESSAGE
        assert repair[-1].content.endswith(json.dumps(bad))

    async def test_temperature_rejection_recovers(
        self, pipeline, scripted_provider, analysis_v1, sample_resume_text
    ):
        scripted_provider.responses = [TEMPERATURE_REJECTED, json.dumps(analysis_v1)]

        outcome = await pipeline.analyze(AnalyzeInput(resume_text=sample_resume_text))

        assert outcome.version == "v1"
        assert [r.temperature for r in scripted_provider.requests] == [0.0, None]

    async def test_unknown_version_echoes_requested_version(
        self, pipeline, scripted_provider, analysis_v1, sample_resume_text
    ):
        scripted_provider.responses = [json.dumps(analysis_v1)]

        outcome = await pipeline.analyze(
            AnalyzeInput(resume_text=sample_resume_text, schema_version="v7")
        )

        assert outcome.version == "v1"
        developer = scripted_provider.requests[0].messages[1].content
        assert "Prompt version: v7." in developer

    async def test_attaches_recommendations(self, pipeline, scripted_provider, analysis_v1, sample_resume_text):
        scripted_provider.responses = [json.dumps(analysis_v1)]

        outcome = await pipeline.analyze(AnalyzeInput(resume_text=sample_resume_text))

        assert outcome.recommendations[0].id == "ATS_MISSING_JD_KEYWORDS"
        assert outcome.apply_plan is None

    async def test_v2_3_attaches_apply_plan(
        self, pipeline, scripted_provider, analysis_v2_3, sample_resume_text, sample_job_description
    ):
        scripted_provider.responses = [json.dumps(analysis_v2_3)]

        outcome = await pipeline.analyze(
            AnalyzeInput(
                resume_text=sample_resume_text,
                job_description=sample_job_description,
                schema_version="v2_3",
            )
        )

        assert outcome.apply_plan is not None
        assert outcome.apply_plan.needs_input == ["metrics"]
