"""Shared test fixtures."""

from __future__ import annotations

import copy
from unittest.mock import AsyncMock

import pytest

from resume_insight.clients.base import CompletionProvider, CompletionRequest
from resume_insight.clients.gateway import CompletionGateway
from resume_insight.models.llm import AnalysisCompletion, CompletionResult, TokenUsage
from resume_insight.models.resume import (
    ResumeEducation,
    ResumeExperience,
    ResumeHeader,
    ResumeModel,
)


class ScriptedProvider(CompletionProvider):
    """Provider that replays queued responses and records each request.

    Queue items are either response text or an exception to raise.
    """

    name = "scripted"

    def __init__(self, responses: list[str | BaseException] | None = None):
        self.responses = list(responses or [])
        self.requests: list[CompletionRequest] = []

    async def create(self, request: CompletionRequest) -> CompletionResult:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("unexpected provider call")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return CompletionResult(
            text=item,
            model=request.model,
            usage=TokenUsage(prompt_tokens=100, completion_tokens=50, total_tokens=150),
        )


@pytest.fixture
def scripted_provider() -> ScriptedProvider:
    return ScriptedProvider()


@pytest.fixture
def gateway(scripted_provider: ScriptedProvider) -> CompletionGateway:
    return CompletionGateway(scripted_provider, timeout=5)


@pytest.fixture
def sample_resume_text() -> str:
    return """Jane Doe
jane@example.com | +1 555 0100 | Berlin

Experience
- Acme Payments (2021-03 - Present), Backend Engineer
  - Built settlement API in Go serving 1M requests/day
  - Reduced DB load 60% by introducing Redis caching
- Startly (2019-01 - 2021-02), Junior Developer
  - Maintained Django REST services on AWS

Education
- B.Sc. Computer Science, Example University (2015 - 2019)

Skills
Go, Python, PostgreSQL, Redis, Docker, AWS
"""


@pytest.fixture
def sample_job_description() -> str:
    return """Senior Backend Engineer

- 4+ years building high-traffic APIs in Go or Java
- PostgreSQL, Redis, Kafka
- Kubernetes in production
"""


@pytest.fixture
def analysis_v1() -> dict:
    return {
        "summary": {
            "overallAssessment": "Solid backend profile with clear impact statements.",
            "strengths": ["Quantified results"],
            "weaknesses": ["No leadership examples"],
        },
        "ats": {
            "score": 72,
            "missingKeywords": ["Kafka"],
            "formattingIssues": [],
        },
        "issues": [
            {
                "severity": "medium",
                "section": "Experience",
                "problem": "Older role lacks metrics",
                "whyItMatters": "Recruiters skim for outcomes",
                "suggestion": "Add one measurable result",
            }
        ],
        "bulletRewrites": [
            {
                "section": "Experience",
                "before": "Maintained Django REST services on AWS",
                "after": "Maintained Django REST services on AWS for 3 product teams",
                "rationale": "Adds scope",
            }
        ],
        "missingInformation": ["Team size"],
        "actionPlan": {
            "quickWins": ["Add Kafka if used"],
            "mediumEffort": [],
            "deepFixes": [],
        },
    }


def _score_component(key: str, label: str) -> dict:
    return {
        "key": key,
        "label": label,
        "score": 75,
        "weight": 25,
        "explanation": f"{label} is reasonable.",
        "helped": ["Clear section headings"],
        "dragged": ["Few keywords from the posting"],
    }


@pytest.fixture
def analysis_v2_3() -> dict:
    return {
        "meta": {
            "promptVersion": "v2_3",
            "model": "gpt-4o-mini",
            "jobDescriptionProvided": True,
            "confidence": 0.8,
            "assumptions": [],
            "limitations": [],
        },
        "summary": {
            "overallAssessment": "Strong match on backend fundamentals.",
            "strengths": ["Go", "Caching"],
            "weaknesses": ["No Kubernetes"],
        },
        "ats": {
            "score": 78,
            "scoreBreakdown": {
                "skills": 30,
                "experience": 25,
                "impact": 15,
                "formatting": 10,
                "roleFit": 20,
            },
            "missingKeywords": {"fromJobDescription": ["Kafka"], "industryCommon": []},
            "formattingIssues": [],
            "scoreReasoning": [
                "Core languages match",
                "Caching experience is relevant",
                "Kubernetes is missing",
            ],
            "scoreExplanation": {
                "components": [
                    _score_component("atsReadability", "ATS Readability"),
                    _score_component("skillMatch", "Skill Match"),
                    _score_component("experienceRelevance", "Experience Relevance"),
                    _score_component("resumeStructure", "Resume Structure"),
                ]
            },
        },
        "issues": [
            {
                "severity": "high",
                "section": "Skills",
                "problem": "Kafka not mentioned",
                "whyItMatters": "Listed as required",
                "suggestion": "Mention any queue experience",
                "evidence": "Skills: Go, Python, PostgreSQL, Redis",
                "fixEffort": "low",
                "priority": 1,
                "autoFixable": False,
                "requiresUserInput": ["metrics"],
            }
        ],
        "bulletRewrites": [
            {
                "section": "Experience",
                "before": "Reduced DB load 60% by introducing Redis caching",
                "after": "Cut database load 60% by introducing Redis caching for settlement reads",
                "rationale": "Leads with the result",
                "metricsSource": "resume",
                "placeholdersNeeded": [],
                "claimSupport": "supported",
                "evidence": "Reduced DB load 60% by introducing Redis caching",
            }
        ],
        "missingInformation": [],
        "actionPlan": {"quickWins": [], "mediumEffort": [], "deepFixes": []},
    }


@pytest.fixture
def analysis_v2_2(analysis_v2_3: dict) -> dict:
    data = copy.deepcopy(analysis_v2_3)
    data["meta"]["promptVersion"] = "v2_2"
    del data["ats"]["scoreExplanation"]
    for br in data["bulletRewrites"]:
        del br["claimSupport"]
        del br["evidence"]
    return data


@pytest.fixture
def sample_resume_model() -> ResumeModel:
    return ResumeModel(
        header=ResumeHeader(
            name="Jane Doe",
            title="Backend Engineer",
            email="jane@example.com",
            location="Berlin",
            links=["https://github.com/janedoe"],
        ),
        summary=["Backend engineer building payment APIs in Go."],
        skills={"languages": ["Go", "Python"], "databases": ["PostgreSQL", "Redis"]},
        experience=[
            ResumeExperience(
                company="Acme Payments",
                role="Backend Engineer",
                start="2021-03",
                end="Present",
                highlights=["Built settlement API serving 1M requests/day."],
            )
        ],
        education=[
            ResumeEducation(
                institution="Example University",
                degree="B.Sc.",
                field="Computer Science",
                start="2015-09",
                end="2019-06",
            )
        ],
    )


@pytest.fixture
def mock_llm_client() -> AsyncMock:
    """LLM client double with the complete/analyze_resume surface."""
    client = AsyncMock()
    client.model = "gpt-4o-mini"
    client.complete = AsyncMock(return_value="{}")
    client.analyze_resume = AsyncMock(
        return_value=AnalysisCompletion(raw="{}", prompt_hash="h", calls=1)
    )
    return client
