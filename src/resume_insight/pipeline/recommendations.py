"""Deterministic recommendations derived from a validated analysis.

Candidates are mapped from issues, missing job keywords, formatting issues,
the action plan and missing information, then deduplicated by id, ranked and
capped at MAX_RECOMMENDATIONS.
"""

from __future__ import annotations

from pydantic import BaseModel

from resume_insight.models.analysis import (
    ActionPlanV1,
    AnalysisResult,
    AnalysisResultV1,
    IssueV1,
)

MAX_RECOMMENDATIONS = 7
MAX_FORMATTING_RECOMMENDATIONS = 2
MAX_ACTION_PLAN_RECOMMENDATIONS = 2

_SEVERITY_RANK = {"critical": 3, "warning": 2}
_IMPACT_RANK = {"high": 3, "medium": 2}
_CATEGORY_RANK = {"ATS": 5, "SKILLS": 4, "EXPERIENCE": 3, "STRUCTURE": 2, "FORMATTING": 1}

# issue severity -> (recommendation severity, impact)
_ISSUE_SEVERITY = {
    "critical": ("critical", "high"),
    "high": ("warning", "high"),
    "medium": ("warning", "medium"),
}

_CATEGORY_KEYWORDS = (
    ("SKILLS", ("skill", "keyword")),
    ("FORMATTING", ("format", "bullet", "font", "layout")),
    ("EXPERIENCE", ("experience", "role", "project")),
    ("STRUCTURE", ("structure", "section", "summary", "header", "order")),
)

# group key, matching words, title, action prefix
_FORMATTING_GROUPS = (
    ("bullets", ("bullet",), "Standardize bullet formatting", "Standardize bullet formatting by fixing: "),
    ("headers", ("header", "heading"), "Fix heading consistency", "Fix heading consistency by correcting: "),
    ("sections", ("section",), "Fix section structure", "Fix section structure by correcting: "),
    ("other", (), "Fix ATS formatting issues", "Fix formatting issues: "),
)


class Recommendation(BaseModel):
    id: str
    category: str = ""
    severity: str = ""
    title: str = ""
    why: str = ""
    action: str = ""
    impact: str = ""
    order: int = 0


def severity_rank(value: str) -> int:
    return _SEVERITY_RANK.get(value.strip().lower(), 1)


def impact_rank(value: str) -> int:
    return _IMPACT_RANK.get(value.strip().lower(), 1)


def category_rank(value: str) -> int:
    return _CATEGORY_RANK.get(value.strip().upper(), 0)


def slugify(text: str) -> str:
    """Lowercase letters and digits joined by single dashes."""
    parts: list[str] = []
    last_dash = False
    for ch in text.strip().lower():
        if ch.isalnum():
            parts.append(ch)
            last_dash = False
        elif not last_dash:
            parts.append("-")
            last_dash = True
    return "".join(parts).strip("-") or "item"


def infer_category(section: str, title: str) -> str:
    combined = f"{section} {title}".strip().lower()
    for category, words in _CATEGORY_KEYWORDS:
        if any(w in combined for w in words):
            return category
    return "ATS"


def unique_sorted(items: list[str]) -> list[str]:
    """Trimmed, case-insensitively unique, sorted case-insensitively."""
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        trimmed = item.strip()
        if not trimmed or trimmed.lower() in seen:
            continue
        seen.add(trimmed.lower())
        out.append(trimmed)
    return sorted(out, key=str.lower)


# --- mappers ---


def from_issues(issues: list[IssueV1]) -> list[Recommendation]:
    out = []
    for issue in issues:
        title = issue.problem.strip() or issue.section.strip() or "Issue found"
        severity, impact = _ISSUE_SEVERITY.get(issue.severity.strip().lower(), ("info", "low"))
        out.append(
            Recommendation(
                id=f"ISSUE_{slugify(title)}",
                category=infer_category(issue.section, title),
                severity=severity,
                title=title,
                why=issue.why_it_matters.strip() or "Improves clarity and relevance for recruiters.",
                action=issue.suggestion.strip() or f"Fix: {title}",
                impact=impact,
            )
        )
    return out


def from_missing_keywords(keywords: list[str]) -> list[Recommendation]:
    keywords = unique_sorted(keywords)
    if not keywords:
        return []
    return [
        Recommendation(
            id="ATS_MISSING_JD_KEYWORDS",
            category="ATS",
            severity="warning",
            title="Add missing job keywords",
            why="Improves ATS match and helps recruiters quickly spot relevant skills.",
            action=(
                "Add 5-10 missing keywords naturally into Skills + Experience bullets to mirror "
                f"the job description. Focus on: {', '.join(keywords)}"
            ),
            impact="high",
        )
    ]


def from_formatting_issues(issues: list[str]) -> list[Recommendation]:
    grouped: dict[str, list[str]] = {key: [] for key, *_ in _FORMATTING_GROUPS}
    for item in unique_sorted(issues):
        lower = item.lower()
        key = next(
            (k for k, words, *_ in _FORMATTING_GROUPS if any(w in lower for w in words)),
            "other",
        )
        grouped[key].append(item)

    out = []
    for key, _, title, action_prefix in _FORMATTING_GROUPS:
        if not grouped[key]:
            continue
        out.append(
            Recommendation(
                id=f"ATS_FORMATTING_{key.upper()}",
                category="FORMATTING",
                severity="warning",
                title=title,
                why="Formatting issues reduce ATS readability and can hide key details.",
                action=action_prefix + "; ".join(grouped[key]),
                impact="medium",
            )
        )
        if len(out) == MAX_FORMATTING_RECOMMENDATIONS:
            break
    return out


def from_action_plan(plan: ActionPlanV1) -> list[Recommendation]:
    candidates = [
        (text.strip(), impact, severity)
        for items, impact, severity in (
            (plan.deep_fixes, "high", "warning"),
            (plan.medium_effort, "medium", "warning"),
            (plan.quick_wins, "low", "info"),
        )
        for text in items
        if text.strip()
    ]
    candidates.sort(key=lambda c: (-impact_rank(c[1]), c[0].lower()))
    return [
        Recommendation(
            id=f"ACTION_PLAN_{slugify(title)}",
            category=infer_category("", title),
            severity=severity,
            title=title,
            why="High-impact action from the plan.",
            action=title,
            impact=impact,
        )
        for title, impact, severity in candidates[:MAX_ACTION_PLAN_RECOMMENDATIONS]
    ]


def from_missing_information(items: list[str]) -> list[Recommendation]:
    return [
        Recommendation(
            id=f"MISSING_INFO_{slugify(item)}",
            category="STRUCTURE",
            severity="warning",
            title=f"Add missing information: {item}",
            why="Recruiters expect this detail to evaluate fit quickly.",
            action=f"Add the missing information: {item}",
            impact="medium",
        )
        for item in unique_sorted(items)
    ]


# --- ranking ---


def _merge(a: Recommendation, b: Recommendation) -> Recommendation:
    """Fill a's blank fields from b."""
    updates = {
        name: getattr(b, name)
        for name in ("title", "why", "action", "category", "severity", "impact")
        if not getattr(a, name).strip()
    }
    return a.model_copy(update=updates) if updates else a


def dedupe(items: list[Recommendation]) -> list[Recommendation]:
    seen: dict[str, Recommendation] = {}
    for item in items:
        key = item.id.strip()
        if not key:
            continue
        seen[key] = _merge(seen[key], item) if key in seen else item
    return list(seen.values())


def sort_recommendations(items: list[Recommendation]) -> None:
    items.sort(
        key=lambda r: (
            -severity_rank(r.severity),
            -impact_rank(r.impact),
            -category_rank(r.category),
            r.title.lower(),
        )
    )


def _missing_keywords(result: AnalysisResult) -> list[str]:
    if isinstance(result, AnalysisResultV1):
        return result.ats.missing_keywords
    return result.ats.missing_keywords.from_job_description


def generate_recommendations(result: AnalysisResult) -> list[Recommendation]:
    """Return at most seven ranked recommendations with 1-based order."""
    candidates = [
        *from_issues(result.issues),
        *from_missing_keywords(_missing_keywords(result)),
        *from_formatting_issues(result.ats.formatting_issues),
        *from_action_plan(result.action_plan),
        *from_missing_information(result.missing_information),
    ]
    ranked = dedupe(candidates)
    sort_recommendations(ranked)
    return [
        rec.model_copy(update={"order": i})
        for i, rec in enumerate(ranked[:MAX_RECOMMENDATIONS], start=1)
    ]
