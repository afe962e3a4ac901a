"""
Cost calculation for AI API usage.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from .schemas import Provider


@dataclass(frozen=True)
class ModelPricing:
    """USD price per one million tokens."""
    input: float
    output: float


PRICING_PER_MILLION_TOKENS: Dict[Provider, Dict[str, ModelPricing]] = {
    Provider.OPENAI: {
        'gpt-4o': ModelPricing(input=2.50, output=10.00),
        'gpt-4o-mini': ModelPricing(input=0.15, output=0.60),
        'gpt-4-turbo': ModelPricing(input=10.00, output=30.00),
        'gpt-4': ModelPricing(input=30.00, output=60.00),
        'gpt-3.5-turbo': ModelPricing(input=0.50, output=1.50),
        'o1': ModelPricing(input=15.00, output=60.00),
        'o1-mini': ModelPricing(input=3.00, output=12.00),
        'o1-preview': ModelPricing(input=15.00, output=60.00),
    },
    Provider.GEMINI: {
        'gemini-1.5-flash': ModelPricing(input=0.075, output=0.30),
        'gemini-1.5-pro': ModelPricing(input=3.50, output=10.50),
        'gemini-2.0-flash': ModelPricing(input=0.10, output=0.40),
    },
    Provider.CLAUDE: {
        'claude-3-5-sonnet-20241022': ModelPricing(input=3.00, output=15.00),
        'claude-3-opus-20240229': ModelPricing(input=15.00, output=75.00),
        'claude-3-haiku-20240307': ModelPricing(input=0.25, output=1.25),
    },
}


def get_model_pricing(provider: Provider, model_id: str) -> Optional[ModelPricing]:
    """
    Look up the price of a model.

    Args:
        provider: Provider the model belongs to
        model_id: Model identifier as sent to the vendor

    Returns:
        ModelPricing, or None if the model is not in the table
    """
    try:
        provider = Provider(provider)
    except ValueError:
        return None
    return PRICING_PER_MILLION_TOKENS.get(provider, {}).get(model_id)


def calculate_cost(
    input_tokens: int,
    output_tokens: int,
    pricing: Optional[ModelPricing]
) -> float:
    """
    Calculate the cost of an AI API call.

    Args:
        input_tokens: Number of input tokens used
        output_tokens: Number of output tokens generated
        pricing: Price per 1 million tokens, or None when unknown

    Returns:
        Total cost in USD, 0.0 if the pricing is unknown

    Example:
        1000 input and 500 output tokens at $2.50/$10.00 per 1M cost
        0.0025 + 0.005 = 0.0075 USD.
    """
    if pricing is None:
        return 0.0

    # cost = (input_tokens / 1_000_000 * input_price) + (output_tokens / 1_000_000 * output_price)
    input_cost = (input_tokens / 1_000_000) * pricing.input
    output_cost = (output_tokens / 1_000_000) * pricing.output

    return input_cost + output_cost


def estimate_cost(provider: Provider, model_id: str, input_tokens: int, output_tokens: int) -> float:
    """Cost of a call to ``model_id``, falling back to 0.0 for unpriced models."""
    return calculate_cost(input_tokens, output_tokens, get_model_pricing(provider, model_id))
