"""Cost estimates for OpenAI and Anthropic completion usage."""

from __future__ import annotations

# Pricing per 1M tokens (USD)
MODEL_PRICING: dict[str, dict[str, float]] = {
    "gpt-4o": {"input": 2.50, "output": 10.00},
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4.1": {"input": 2.00, "output": 8.00},
    "gpt-4.1-mini": {"input": 0.40, "output": 1.60},
    "gpt-5": {"input": 1.25, "output": 10.00},
    "gpt-5-mini": {"input": 0.25, "output": 2.00},
    "claude-haiku-4-5-20251001": {"input": 0.80, "output": 4.00},
    "claude-sonnet-4-5-20250929": {"input": 3.00, "output": 15.00},
}


def calculate_cost(calls: list[tuple[str, int, int]]) -> float:
    """Calculate total cost for a set of completion calls.

    Args:
        calls: List of (model_id, prompt_tokens, completion_tokens) tuples.

    Returns:
        Total estimated cost in USD. Unknown models count as zero.
    """
    total = 0.0
    for model_id, prompt_tokens, completion_tokens in calls:
        pricing = MODEL_PRICING.get(model_id)
        if pricing is None:
            continue
        total += (prompt_tokens / 1_000_000) * pricing["input"]
        total += (completion_tokens / 1_000_000) * pricing["output"]
    return total
