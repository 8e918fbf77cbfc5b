"""Apply plan for v2_3 analyses: what can be applied now and what needs input."""

from __future__ import annotations

from pydantic import Field

from resume_insight.models.analysis import (
    AnalysisResultV2_3,
    BulletRewriteV2_3,
    CamelModel,
    IssueV2_2,
)


class ApplyPlan(CamelModel):
    auto_fixes: list[IssueV2_2] = Field(default_factory=list)
    safe_rewrites: list[BulletRewriteV2_3] = Field(default_factory=list)
    needs_input: list[str] = Field(default_factory=list)
    blocked_rewrites: list[BulletRewriteV2_3] = Field(default_factory=list)


def is_safe_rewrite(rewrite: BulletRewriteV2_3) -> bool:
    return (
        rewrite.metrics_source == "resume"
        and rewrite.claim_support == "supported"
        and not rewrite.placeholders_needed
    )


def build_apply_plan(result: AnalysisResultV2_3) -> ApplyPlan:
    """Split a v2_3 analysis into auto-fixes, safe rewrites and blocked items.

    Issues are ordered by priority (stable). needs_input lists each
    requested user input once, in first-seen order.
    """
    plan = ApplyPlan()
    for issue in sorted(result.issues, key=lambda i: i.priority):
        if issue.auto_fixable:
            plan.auto_fixes.append(issue)
        for key in issue.requires_user_input:
            if key not in plan.needs_input:
                plan.needs_input.append(key)

    for rewrite in result.bullet_rewrites:
        if is_safe_rewrite(rewrite):
            plan.safe_rewrites.append(rewrite)
        if rewrite.placeholders_needed:
            plan.blocked_rewrites.append(rewrite)
    return plan
