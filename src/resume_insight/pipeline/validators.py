"""Per-version schema validation with a single repair retry."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from pydantic import BaseModel, ValidationError

from resume_insight.clients.base import LLMClient
from resume_insight.errors import (
    InvalidResultSchemaError,
    UnsupportedClaimError,
    sanitize_error,
)
from resume_insight.models.analysis import (
    AnalysisResult,
    AnalysisResultV1,
    AnalysisResultV2,
    AnalysisResultV2_1,
    AnalysisResultV2_2,
    AnalysisResultV2_3,
    ATSV2,
    MetaV2,
    ScoreBreakdownV2,
    ScoreExplanationV1,
    SummaryV1,
)
from resume_insight.models.llm import AnalyzeInput, AnalyzeOptions
from resume_insight.pipeline import content_guard
from resume_insight.pipeline.apply_plan import ApplyPlan
from resume_insight.pipeline.recommendations import Recommendation
from resume_insight.prompts.registry import DEFAULT_PROMPT_VERSION

logger = logging.getLogger(__name__)

V2_REPAIR_MESSAGE = (
    "Fix the JSON to satisfy all schema constraints. Keep content same, but ensure "
    "ats.scoreBreakdown integers sum to 100. Output JSON only."
)

ALLOWED_USER_INPUT_KEYS = frozenset({
    "email",
    "phone",
    "linkedin",
    "crm_tools",
    "metrics",
    "team_size",
    "award_dates",
    "target_role",
})

SCORE_EXPLANATION_KEYS = {
    "atsReadability": "ATS Readability",
    "skillMatch": "Skill Match",
    "experienceRelevance": "Experience Relevance",
    "resumeStructure": "Resume Structure",
}

_EPSILON = 0.000001


@dataclass
class AnalysisOutcome:
    """A validated analysis and the raw JSON it was decoded from."""

    version: str
    result: AnalysisResult
    raw: str
    prompt_hash: str
    recommendations: list[Recommendation] = field(default_factory=list)
    apply_plan: ApplyPlan | None = None


def clamp_score(value: float) -> float:
    return min(max(value, 0), 100)


def _is_integer(value: float) -> bool:
    return abs(value - round(value)) <= _EPSILON


def _decode(model_cls: type[BaseModel], raw: str):
    try:
        return model_cls.model_validate_json(raw)
    except ValidationError as e:
        raise InvalidResultSchemaError(f"unmarshal: {e}") from e


def _clamp_ats(ats: ATSV2) -> None:
    ats.score = clamp_score(ats.score)
    b = ats.score_breakdown
    b.skills = clamp_score(b.skills)
    b.experience = clamp_score(b.experience)
    b.impact = clamp_score(b.impact)
    b.formatting = clamp_score(b.formatting)
    b.role_fit = clamp_score(b.role_fit)


def _check_meta_and_summary(meta: MetaV2, summary: SummaryV1) -> None:
    if not meta.prompt_version or not meta.model:
        raise InvalidResultSchemaError("meta.promptVersion and meta.model are required")
    if not summary.overall_assessment:
        raise InvalidResultSchemaError("summary.overallAssessment is required")


def _check_breakdown_integers(b: ScoreBreakdownV2) -> float:
    total = 0.0
    for name, value in b.named_values():
        if value < 0 or value > 100:
            raise InvalidResultSchemaError(f"ats.scoreBreakdown.{name} must be between 0 and 100")
        if not _is_integer(value):
            raise InvalidResultSchemaError(f"ats.scoreBreakdown.{name} must be an integer")
        total += value
    return total


def normalize_score_breakdown(b: ScoreBreakdownV2) -> None:
    """Force the breakdown to total 100 by adjusting formatting."""
    total = _check_breakdown_integers(b)
    if abs(total - 100) <= _EPSILON:
        return
    b.formatting += 100 - total
    if b.formatting < 0 or b.formatting > 100:
        raise InvalidResultSchemaError(
            f"ats.scoreBreakdown.formatting adjustment out of range: {b.formatting:.3f}"
        )


def _check_breakdown_total(b: ScoreBreakdownV2) -> None:
    total = _check_breakdown_integers(b)
    if abs(total - 100) > _EPSILON:
        raise InvalidResultSchemaError(f"ats.scoreBreakdown must total 100, got {total:.3f}")


def _check_score_and_keywords(result: AnalysisResultV2_1 | AnalysisResultV2_2 | AnalysisResultV2_3) -> None:
    if not result.meta.job_description_provided and result.ats.missing_keywords.from_job_description:
        raise InvalidResultSchemaError(
            "missingKeywords.fromJobDescription must be empty when jobDescriptionProvided=false"
        )
    if result.ats.score < 0 or result.ats.score > 100:
        raise InvalidResultSchemaError("ats.score must be between 0 and 100")
    if not _is_integer(result.ats.score):
        raise InvalidResultSchemaError("ats.score must be an integer")


def _check_issue_evidence(i: int, priority: int, evidence: str) -> None:
    if priority < 1 or priority > 10:
        raise InvalidResultSchemaError(f"issues[{i}].priority must be between 1 and 10")
    if evidence != content_guard.EVIDENCE_NOT_FOUND and len(evidence) > content_guard.MAX_EVIDENCE_CHARS:
        raise InvalidResultSchemaError(f"issues[{i}].evidence must be <= 160 chars")


def _check_metrics_source(i: int, metrics_source: str, placeholders_needed: list[str]) -> None:
    source = metrics_source.strip().lower()
    if source == "resume":
        return
    if source == "placeholder":
        if not placeholders_needed:
            raise InvalidResultSchemaError(
                f"bulletRewrites[{i}].placeholdersNeeded required when metricsSource=placeholder"
            )
        return
    raise InvalidResultSchemaError(f"bulletRewrites[{i}].metricsSource must be resume or placeholder")


def _check_user_input(result: AnalysisResultV2_2 | AnalysisResultV2_3) -> None:
    n = len(result.ats.score_reasoning)
    if n < 3 or n > 6:
        raise InvalidResultSchemaError("ats.scoreReasoning must have 3-6 items")
    for i, issue in enumerate(result.issues):
        if issue.auto_fixable and issue.requires_user_input:
            raise InvalidResultSchemaError(
                f"issues[{i}].requiresUserInput must be empty when autoFixable=true"
            )
        for key in issue.requires_user_input:
            if key not in ALLOWED_USER_INPUT_KEYS:
                raise InvalidResultSchemaError(
                    f"issues[{i}].requiresUserInput contains invalid key: {key}"
                )


def validate_score_explanation(explanation: ScoreExplanationV1) -> None:
    components = explanation.components
    if len(components) != len(SCORE_EXPLANATION_KEYS):
        raise InvalidResultSchemaError(
            f"ats.scoreExplanation.components must contain {len(SCORE_EXPLANATION_KEYS)} items"
        )
    prefix = "ats.scoreExplanation.components"
    seen: set[str] = set()
    total_weight = 0.0
    for i, c in enumerate(components):
        key = c.key.strip()
        if not key:
            raise InvalidResultSchemaError(f"{prefix}[{i}].key is required")
        if key not in SCORE_EXPLANATION_KEYS:
            raise InvalidResultSchemaError(
                f"{prefix}[{i}].key must be one of: {', '.join(SCORE_EXPLANATION_KEYS)}"
            )
        if key in seen:
            raise InvalidResultSchemaError(f"{prefix}[{i}].key must be unique")
        seen.add(key)
        if not c.label.strip():
            raise InvalidResultSchemaError(f"{prefix}[{i}].label is required")
        for field_name, value in (("score", c.score), ("weight", c.weight)):
            if value < 0 or value > 100:
                raise InvalidResultSchemaError(f"{prefix}[{i}].{field_name} must be between 0 and 100")
            if not _is_integer(value):
                raise InvalidResultSchemaError(f"{prefix}[{i}].{field_name} must be an integer")
        total_weight += c.weight
        if not c.explanation.strip():
            raise InvalidResultSchemaError(f"{prefix}[{i}].explanation is required")
        for field_name, items in (("helped", c.helped), ("dragged", c.dragged)):
            if not items:
                raise InvalidResultSchemaError(f"{prefix}[{i}].{field_name} must have at least 1 item")
            if any(not item.strip() for item in items):
                raise InvalidResultSchemaError(f"{prefix}[{i}].{field_name} must not include empty items")
    if abs(total_weight - 100) > _EPSILON:
        raise InvalidResultSchemaError(
            f"ats.scoreExplanation.components weights must total 100, got {total_weight:.3f}"
        )


# --- per-version validators ---


def validate_v1(raw: str) -> AnalysisResultV1:
    result = _decode(AnalysisResultV1, raw)
    if result.ats.score < 0 or result.ats.score > 100:
        raise InvalidResultSchemaError("ats.score must be between 0 and 100")
    return result


def validate_v2(raw: str) -> AnalysisResultV2:
    result = _decode(AnalysisResultV2, raw)
    _clamp_ats(result.ats)
    _check_meta_and_summary(result.meta, result.summary)
    normalize_score_breakdown(result.ats.score_breakdown)
    return result


def validate_v2_1(raw: str) -> AnalysisResultV2_1:
    result = _decode(AnalysisResultV2_1, raw)
    _check_meta_and_summary(result.meta, result.summary)
    _check_score_and_keywords(result)
    _check_breakdown_total(result.ats.score_breakdown)
    for i, issue in enumerate(result.issues):
        _check_issue_evidence(i, issue.priority, issue.evidence)
    for i, br in enumerate(result.bullet_rewrites):
        _check_metrics_source(i, br.metrics_source, br.placeholders_needed)
    return result


def validate_v2_2(raw: str) -> AnalysisResultV2_2:
    result = _decode(AnalysisResultV2_2, raw)
    _clamp_ats(result.ats)
    _check_meta_and_summary(result.meta, result.summary)
    _check_score_and_keywords(result)
    _check_user_input(result)
    _check_breakdown_total(result.ats.score_breakdown)
    for i, issue in enumerate(result.issues):
        _check_issue_evidence(i, issue.priority, issue.evidence)
    for i, br in enumerate(result.bullet_rewrites):
        _check_metrics_source(i, br.metrics_source, br.placeholders_needed)
    return result


def _check_v2_3(result: AnalysisResultV2_3) -> None:
    _check_meta_and_summary(result.meta, result.summary)
    _check_score_and_keywords(result)
    _check_user_input(result)
    _check_breakdown_total(result.ats.score_breakdown)
    validate_score_explanation(result.ats.score_explanation)
    for i, issue in enumerate(result.issues):
        _check_issue_evidence(i, issue.priority, issue.evidence)
    for i, br in enumerate(result.bullet_rewrites):
        _check_metrics_source(i, br.metrics_source, br.placeholders_needed)
        if br.claim_support not in ("supported", "inferred", "placeholder"):
            raise InvalidResultSchemaError(
                f"bulletRewrites[{i}].claimSupport must be supported, inferred, or placeholder"
            )
        if br.claim_support == "supported" and br.evidence == content_guard.EVIDENCE_NOT_FOUND:
            raise InvalidResultSchemaError(
                f"bulletRewrites[{i}].evidence required when claimSupport=supported"
            )
        if br.metrics_source == "resume" and br.claim_support == "placeholder":
            raise InvalidResultSchemaError(
                f"bulletRewrites[{i}].claimSupport cannot be placeholder when metricsSource=resume"
            )
        if (
            br.evidence != content_guard.EVIDENCE_NOT_FOUND
            and len(br.evidence) > content_guard.MAX_EVIDENCE_CHARS
        ):
            raise InvalidResultSchemaError(f"bulletRewrites[{i}].evidence must be <= 160 chars")


def validate_v2_3(raw: str) -> AnalysisResultV2_3:
    result = _decode(AnalysisResultV2_3, raw)
    content_guard.sanitize_evidence_fields(result)
    _check_v2_3(result)
    return result


def _checked_v2_2(raw: str) -> AnalysisResultV2_2:
    result = validate_v2_2(raw)
    content_guard.check_bullet_rewrites(result.bullet_rewrites)
    return result


def _checked_v2_3(raw: str) -> AnalysisResultV2_3:
    result = validate_v2_3(raw)
    content_guard.check_bullet_rewrites(result.bullet_rewrites)
    return result


def _sanitized_v2_3(raw: str) -> AnalysisResultV2_3 | None:
    """Last resort for v2_3: rewrite forbidden terms as placeholders."""
    result = validate_v2_3(raw)
    if not content_guard.sanitize_bullet_claims(result):
        return None
    _check_v2_3(result)
    content_guard.check_bullet_rewrites(result.bullet_rewrites)
    return result


@dataclass(frozen=True)
class VersionRules:
    check: Callable[[str], AnalysisResult]
    repair_message: str | None = None
    sanitize: Callable[[str], AnalysisResult | None] | None = None


VERSION_RULES: dict[str, VersionRules] = {
    "v1": VersionRules(validate_v1),
    "v2": VersionRules(validate_v2, V2_REPAIR_MESSAGE),
    "v2_1": VersionRules(validate_v2_1, V2_REPAIR_MESSAGE),
    "v2_2": VersionRules(_checked_v2_2, V2_REPAIR_MESSAGE),
    "v2_3": VersionRules(_checked_v2_3, V2_REPAIR_MESSAGE, _sanitized_v2_3),
}


def validator_version(version: str) -> str:
    """Version whose rules apply; unknown versions use the default."""
    return version if version in VERSION_RULES else DEFAULT_PROMPT_VERSION


def validate(version: str, raw: str) -> AnalysisResult:
    """Validate raw JSON against one version's rules without calling the model."""
    return VERSION_RULES[validator_version(version)].check(raw)


async def validate_with_retry(client: LLMClient, data: AnalyzeInput) -> AnalysisOutcome:
    """Analyze, validate and on failure repair once before validating again."""
    version = validator_version(data.schema_version)
    rules = VERSION_RULES[version]

    completion = await client.analyze_resume(data)
    try:
        result = rules.check(completion.raw)
        return AnalysisOutcome(version, result, completion.raw, completion.prompt_hash)
    except UnsupportedClaimError as e:
        logger.warning("%s content attempt=1 error=%s", version, sanitize_error(e))
        repair_message = content_guard.CONTENT_REPAIR_MESSAGE
    except InvalidResultSchemaError as e:
        logger.warning("%s validation attempt=1 error=%s", version, sanitize_error(e))
        repair_message = rules.repair_message

    retry = await client.analyze_resume(
        data,
        AnalyzeOptions(repair_raw=completion.raw, extra_system_message=repair_message),
    )
    try:
        result = rules.check(retry.raw)
        return AnalysisOutcome(version, result, retry.raw, retry.prompt_hash)
    except UnsupportedClaimError as e:
        logger.warning("%s content attempt=2 error=%s", version, sanitize_error(e))
        if rules.sanitize is None:
            raise
        sanitized = rules.sanitize(retry.raw)
        if sanitized is None:
            raise
        raw = sanitized.model_dump_json(by_alias=True)
        return AnalysisOutcome(version, sanitized, raw, retry.prompt_hash)
    except InvalidResultSchemaError as e:
        logger.warning("%s validation attempt=2 error=%s", version, sanitize_error(e))
        raise
