"""Pydantic models for the versioned analysis results.

Each version is an independent shape; newer versions reuse sub-models only
where the JSON is identical. Keys are camelCase on the wire.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Severity = Literal["critical", "high", "medium", "low"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- v1 ---


class SummaryV1(CamelModel):
    overall_assessment: str
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)


class ATSV1(CamelModel):
    score: float
    missing_keywords: list[str] = Field(default_factory=list)
    formatting_issues: list[str] = Field(default_factory=list)


class IssueV1(CamelModel):
    severity: Severity
    section: str = ""
    problem: str = ""
    why_it_matters: str = ""
    suggestion: str = ""


class BulletRewriteV1(CamelModel):
    section: str = ""
    before: str = ""
    after: str = ""
    rationale: str = ""


class ActionPlanV1(CamelModel):
    quick_wins: list[str] = Field(default_factory=list)
    medium_effort: list[str] = Field(default_factory=list)
    deep_fixes: list[str] = Field(default_factory=list)


class AnalysisResultV1(CamelModel):
    summary: SummaryV1
    ats: ATSV1
    issues: list[IssueV1]
    bullet_rewrites: list[BulletRewriteV1]
    missing_information: list[str]
    action_plan: ActionPlanV1


# --- v2 ---


class MetaV2(CamelModel):
    prompt_version: str = ""
    model: str = ""
    job_description_provided: bool = False
    confidence: float = 0.0
    assumptions: list[str] = Field(default_factory=list)
    limitations: list[str] = Field(default_factory=list)
    mode: str = ""
    primary_score_type: str = ""


class ScoreBreakdownV2(CamelModel):
    skills: float = 0
    experience: float = 0
    impact: float = 0
    formatting: float = 0
    role_fit: float = 0

    def named_values(self) -> list[tuple[str, float]]:
        return [
            ("skills", self.skills),
            ("experience", self.experience),
            ("impact", self.impact),
            ("formatting", self.formatting),
            ("roleFit", self.role_fit),
        ]


class MissingKeywordsV2(CamelModel):
    from_job_description: list[str] = Field(default_factory=list)
    industry_common: list[str] = Field(default_factory=list)


class ATSV2(CamelModel):
    score: float
    score_breakdown: ScoreBreakdownV2
    missing_keywords: MissingKeywordsV2 = Field(default_factory=MissingKeywordsV2)
    formatting_issues: list[str] = Field(default_factory=list)


class IssueV2(IssueV1):
    evidence: str = ""
    fix_effort: str = ""


class AnalysisResultV2(CamelModel):
    meta: MetaV2
    summary: SummaryV1
    ats: ATSV2
    issues: list[IssueV2]
    bullet_rewrites: list[BulletRewriteV1]
    missing_information: list[str]
    action_plan: ActionPlanV1


# --- v2_1 ---


class IssueV2_1(IssueV2):
    priority: int = 0


class BulletRewriteV2_1(BulletRewriteV1):
    metrics_source: str = ""
    placeholders_needed: list[str] = Field(default_factory=list)


class AnalysisResultV2_1(CamelModel):
    meta: MetaV2
    summary: SummaryV1
    ats: ATSV2
    issues: list[IssueV2_1]
    bullet_rewrites: list[BulletRewriteV2_1]
    missing_information: list[str]
    action_plan: ActionPlanV1


# --- v2_2 ---


class ATSV2_2(ATSV2):
    score_reasoning: list[str] = Field(default_factory=list)


class IssueV2_2(IssueV2_1):
    auto_fixable: bool = False
    requires_user_input: list[str] = Field(default_factory=list)


class AnalysisResultV2_2(CamelModel):
    meta: MetaV2
    summary: SummaryV1
    ats: ATSV2_2
    issues: list[IssueV2_2]
    bullet_rewrites: list[BulletRewriteV2_1]
    missing_information: list[str]
    action_plan: ActionPlanV1


# --- v2_3 ---


class ScoreComponentV1(CamelModel):
    key: str = ""
    label: str = ""
    score: float = 0
    weight: float = 0
    explanation: str = ""
    helped: list[str] = Field(default_factory=list)
    dragged: list[str] = Field(default_factory=list)


class ScoreExplanationV1(CamelModel):
    components: list[ScoreComponentV1] = Field(default_factory=list)


class ATSV2_3(ATSV2_2):
    score_explanation: ScoreExplanationV1 = Field(default_factory=ScoreExplanationV1)


class BulletRewriteV2_3(BulletRewriteV2_1):
    claim_support: str = ""
    evidence: str = ""


class AnalysisResultV2_3(CamelModel):
    meta: MetaV2
    summary: SummaryV1
    ats: ATSV2_3
    issues: list[IssueV2_2]
    bullet_rewrites: list[BulletRewriteV2_3]
    missing_information: list[str]
    action_plan: ActionPlanV1


AnalysisResult = (
    AnalysisResultV1
    | AnalysisResultV2
    | AnalysisResultV2_1
    | AnalysisResultV2_2
    | AnalysisResultV2_3
)
