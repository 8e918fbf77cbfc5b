"""Guardrails against unsupported impact claims in bullet rewrites."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from resume_insight.errors import UnsupportedClaimError
from resume_insight.models.analysis import (
    AnalysisResultV2_3,
    BulletRewriteV2_1,
    BulletRewriteV2_3,
)

logger = logging.getLogger(__name__)

CONTENT_REPAIR_MESSAGE = (
    "Remove any unsupported impact claims (e.g., double-digit, significant) unless explicitly "
    'stated in resume. Never use "double-digit" unless it appears verbatim in resume evidence. '
    'If an exact value is missing, replace with placeholder "X% (replace with exact figure)", '
    "set claimSupport=placeholder, metricsSource=placeholder, and add placeholdersNeeded "
    "(e.g., revenue_growth_pct). Keep JSON only."
)

FORBIDDEN_IMPACT_TERMS = (
    "double-digit",
    "double digit",
    "significant",
    "substantial",
    "massive",
    "remarkable",
)

EXACT_FIGURE_PLACEHOLDER = "X% (replace with exact figure)"
DEFAULT_PLACEHOLDER_KEY = "revenue_growth_pct"
RATIONALE_NOTE = "Replace placeholders before final submission."
EVIDENCE_NOT_FOUND = "notFound"
MAX_EVIDENCE_CHARS = 160

_DASHES = "‐‑‒–—−"
_DASH_TABLE = str.maketrans({c: "-" for c in _DASHES})

_REPLACEMENTS = (
    (re.compile(rf"double[\s\-{_DASHES}]+digit", re.IGNORECASE), EXACT_FIGURE_PLACEHOLDER),
    (re.compile(r"significant", re.IGNORECASE), "measurable"),
    (re.compile(r"substantial", re.IGNORECASE), "measurable"),
    (re.compile(r"massive", re.IGNORECASE), "measurable"),
    (re.compile(r"remarkable", re.IGNORECASE), "measurable"),
)


def normalize_for_match(text: str) -> str:
    """Lowercase, map unicode dashes to '-', collapse whitespace."""
    return " ".join(text.lower().translate(_DASH_TABLE).split())


def find_forbidden_term(text: str) -> str | None:
    normalized = normalize_for_match(text)
    for term in FORBIDDEN_IMPACT_TERMS:
        if term in normalized:
            return term
    return None


def check_bullet_rewrites(rewrites: Sequence[BulletRewriteV2_1]) -> None:
    """Raise UnsupportedClaimError for a forbidden term without placeholders."""
    for i, br in enumerate(rewrites):
        term = find_forbidden_term(br.after)
        if term is None:
            continue
        source = br.metrics_source.strip().lower()
        if source == "resume":
            raise UnsupportedClaimError(
                f"bulletRewrites[{i}].after contains unsupported term {term!r}"
            )
        if source == "placeholder" and not br.placeholders_needed:
            raise UnsupportedClaimError(
                f"bulletRewrites[{i}].placeholdersNeeded required when using placeholders with {term!r}"
            )


def replace_forbidden_terms(text: str) -> tuple[str, list[str]]:
    updated = text
    applied: list[str] = []
    for pattern, replacement in _REPLACEMENTS:
        updated, count = pattern.subn(replacement, updated)
        if count:
            applied.append(f"{pattern.pattern}->{replacement}")
    return updated, applied


def sanitize_evidence(value: str, max_chars: int = MAX_EVIDENCE_CHARS) -> str:
    normalized = " ".join(value.split())
    if normalized.lower() == EVIDENCE_NOT_FOUND.lower():
        return EVIDENCE_NOT_FOUND
    if len(normalized) <= max_chars:
        return normalized
    return normalized[: max_chars - 1] + "…"


def sanitize_evidence_fields(result: AnalysisResultV2_3) -> None:
    """Normalize display-only evidence strings in place."""
    for issue in result.issues:
        issue.evidence = sanitize_evidence(issue.evidence)
    for br in result.bullet_rewrites:
        br.evidence = sanitize_evidence(br.evidence)


def _mark_placeholder(br: BulletRewriteV2_3) -> None:
    br.claim_support = "placeholder"
    br.metrics_source = "placeholder"
    br.evidence = EVIDENCE_NOT_FOUND
    if not any(p.lower() == DEFAULT_PLACEHOLDER_KEY for p in br.placeholders_needed):
        br.placeholders_needed.append(DEFAULT_PLACEHOLDER_KEY)
    if RATIONALE_NOTE.lower() in br.rationale.lower():
        return
    rationale = br.rationale.strip()
    br.rationale = f"{rationale} {RATIONALE_NOTE}" if rationale else RATIONALE_NOTE


def sanitize_bullet_claims(result: AnalysisResultV2_3) -> bool:
    """Replace forbidden terms with placeholders. Returns True if anything changed."""
    changed = False
    for i, br in enumerate(result.bullet_rewrites):
        if not br.after:
            continue
        updated, applied = replace_forbidden_terms(br.after)
        if not applied:
            continue
        br.after = updated
        _mark_placeholder(br)
        changed = True
        logger.info("bulletRewrites[%d] sanitized: %s", i, ", ".join(applied))
    return changed
