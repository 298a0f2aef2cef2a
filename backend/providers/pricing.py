"""Static per-provider token pricing, used only to annotate usage logs."""

# USD per one million tokens
PROVIDER_PRICING: dict[str, dict[str, float]] = {
    "anthropic": {"input": 3.00, "output": 15.00},
    "openai": {"input": 2.50, "output": 10.00},
    "google": {"input": 1.25, "output": 5.00},
    "mistral": {"input": 2.00, "output": 6.00},
    "deepseek": {"input": 0.27, "output": 1.10},
    "groq": {"input": 0.59, "output": 0.79},
}


def estimate_cost(
    provider: str,
    input_tokens: int,
    output_tokens: int,
    pricing: dict[str, dict[str, float]] = PROVIDER_PRICING,
) -> float:
    """Estimated USD cost of one call. Unknown providers cost nothing."""
    rates = pricing.get(provider)
    if not rates:
        return 0.0
    cost = (input_tokens * rates["input"] + output_tokens * rates["output"]) / 1_000_000
    return round(cost, 6)
