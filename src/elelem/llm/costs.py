"""
Cost estimation per provider and model family.

Prices are USD per 1000 tokens (input, output). Unknown models cost 0 so
accounting never fails because of a missing price.
"""

from elelem.models.usage import UsageRecord


def compute_cost(
    usage: UsageRecord,
    price_per_thousand_input_tokens: float,
    price_per_thousand_output_tokens: float,
) -> float:
    return (
        price_per_thousand_input_tokens * usage.prompt_tokens / 1000
        + price_per_thousand_output_tokens * usage.completion_tokens / 1000
    )


def estimate_openai_cost(usage: UsageRecord, model: str) -> float:
    """Estimate the cost of an OpenAI chat completion."""
    if model.startswith("gpt-4"):
        if "32k" in model:
            return compute_cost(usage, 0.06, 0.12)
        # 8k
        return compute_cost(usage, 0.03, 0.06)
    if model.startswith("gpt-3.5-turbo"):
        if "16k" in model:
            return compute_cost(usage, 0.003, 0.004)
        # 4k
        return compute_cost(usage, 0.0015, 0.002)
    return 0.0


def estimate_cohere_cost(usage: UsageRecord, model: str) -> float:
    """Estimate the cost of a Cohere generation."""
    if model.startswith("command-light"):
        return compute_cost(usage, 0.0003, 0.0006)
    if model.startswith("command"):
        return compute_cost(usage, 0.001, 0.002)
    return 0.0
