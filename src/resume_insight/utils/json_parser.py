"""Helpers to locate JSON payloads in LLM responses."""

from __future__ import annotations

import json

from resume_insight.errors import InvalidLLMOutputError


def is_valid_json(text: str) -> bool:
    """Strict syntactic check, no cleanup applied."""
    if not text or not text.strip():
        return False
    try:
        json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return False
    return True


def extract_json_object(raw: str) -> str:
    """Return the JSON object text embedded in a model response.

    The full trimmed response wins when it is valid JSON. Otherwise the span
    from the first '{' to the last '}' must be valid JSON.

    Raises InvalidLLMOutputError when neither holds.
    """
    payload = (raw or "").strip()
    if not payload:
        raise InvalidLLMOutputError("empty llm response")
    if is_valid_json(payload):
        return payload

    start = payload.find("{")
    end = payload.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise InvalidLLMOutputError("no json object found")

    candidate = payload[start : end + 1]
    if not is_valid_json(candidate):
        raise InvalidLLMOutputError("invalid json object")
    return candidate


def extract_json(text: str) -> dict | list:
    """Lenient parse for hand-supplied JSON (pasted responses, saved files).

    Tries in order:
    1. Direct json.loads on the full text
    2. Strip fenced code block markers and parse
    3. First '{' to last '}'
    4. Close braces/brackets left open by a truncated response
    """
    text = text.strip()

    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        pass

    stripped = _strip_code_fences(text)
    if stripped != text:
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            pass

    try:
        return json.loads(extract_json_object(stripped))
    except InvalidLLMOutputError:
        pass

    result = _close_truncated(stripped)
    if result is not None:
        return result

    raise ValueError(f"Could not extract JSON from text: {text[:200]}...")


def _strip_code_fences(text: str) -> str:
    lines = text.split("\n")
    if lines and lines[0].strip().startswith("```"):
        lines = lines[1:]
    while lines and lines[-1].strip() in ("```", ""):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def _close_truncated(text: str) -> dict | None:
    start = text.find("{")
    if start == -1:
        return None

    candidate = text[start:].rstrip().rstrip(",")
    open_braces = candidate.count("{") - candidate.count("}")
    open_brackets = candidate.count("[") - candidate.count("]")
    if open_braces <= 0 and open_brackets <= 0:
        return None

    repaired = candidate + "]" * max(0, open_brackets) + "}" * max(0, open_braces)
    try:
        return json.loads(repaired)
    except json.JSONDecodeError:
        return None
