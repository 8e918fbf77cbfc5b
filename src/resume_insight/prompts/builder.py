"""Chat message construction for analysis and repair calls."""

from __future__ import annotations

import hashlib
import re

from resume_insight.models.llm import ChatMessage
from resume_insight.prompts.registry import ResolvedTemplate
from resume_insight.prompts.templates import (
    SYSTEM_PROMPT_FIX_JSON,
    SYSTEM_PROMPT_STRICT,
    SYSTEM_PROMPT_V2,
)

_PLACEHOLDER = re.compile(r"\{\{(PROMPT_VERSION|MODEL|JOB_DESCRIPTION_PROVIDED)\}\}")


def render_developer_prompt(resolved: ResolvedTemplate, job_description: str, model: str) -> str:
    """Substitute placeholders in one pass.

    Replacement values are never rescanned, so a model id containing
    "{{MODEL}}" stays literal.
    """
    values = {
        "PROMPT_VERSION": resolved.requested_version,
        "MODEL": model,
        "JOB_DESCRIPTION_PROVIDED": "true" if job_description.strip() else "false",
    }
    return _PLACEHOLDER.sub(lambda m: values[m.group(1)], resolved.template.developer)


def build_user_prompt(resume_text: str, job_description: str, target_role: str = "") -> str:
    jd = job_description if job_description.strip() else "N/A"
    prompt = f"Resume Text:\n{resume_text}\n\nJob Description:\n{jd}"
    if target_role.strip():
        prompt += f"\n\nTarget Role:\n{target_role.strip()}"
    return prompt


def build_messages(
    resolved: ResolvedTemplate,
    resume_text: str,
    job_description: str,
    model: str,
    target_role: str = "",
) -> list[ChatMessage]:
    """Build the [system, developer, user] sequence for an analysis call."""
    system = SYSTEM_PROMPT_V2 if resolved.template.strict else SYSTEM_PROMPT_STRICT
    return [
        ChatMessage("system", system),
        ChatMessage("developer", render_developer_prompt(resolved, job_description, model)),
        ChatMessage("user", build_user_prompt(resume_text, job_description, target_role)),
    ]


def build_repair_messages(
    resolved: ResolvedTemplate,
    job_description: str,
    model: str,
    raw: str,
) -> list[ChatMessage]:
    """Build the sequence asking the model to fix a previous raw response."""
    return [
        ChatMessage("system", SYSTEM_PROMPT_FIX_JSON),
        ChatMessage("developer", render_developer_prompt(resolved, job_description, model)),
        ChatMessage("user", f"Fix this JSON to match the schema exactly. Output JSON only:\n{raw}"),
    ]


def prepend_system_message(messages: list[ChatMessage], content: str | None) -> list[ChatMessage]:
    if not content or not content.strip():
        return messages
    return [ChatMessage("system", content), *messages]


def prompt_hash(messages: list[ChatMessage]) -> str:
    """SHA-256 hex digest of the message sequence."""
    joined = "\n\n".join(f"{m.role}: {m.content}" for m in messages)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()
