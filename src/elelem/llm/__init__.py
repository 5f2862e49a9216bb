"""
LLM provider clients.

Components:
- BaseLLMClient: Abstract base class for provider clients
- OpenAIClient: OpenAI chat completions
- CohereClient: Cohere generate
- costs: Per-model cost estimation
- exceptions: Provider-specific exceptions
"""

from elelem.llm.base_client import BaseLLMClient, Completion, CostEstimator
from elelem.llm.cohere_client import CohereClient
from elelem.llm.costs import estimate_cohere_cost, estimate_openai_cost
from elelem.llm.exceptions import (
    LLMAuthenticationError,
    LLMClientError,
    LLMConnectionError,
    LLMGenerationError,
    LLMRateLimitError,
    LLMTimeoutError,
)
from elelem.llm.openai_client import OpenAIClient

__all__ = [
    "BaseLLMClient",
    "Completion",
    "CostEstimator",
    "OpenAIClient",
    "CohereClient",
    "estimate_openai_cost",
    "estimate_cohere_cost",
    "LLMClientError",
    "LLMConnectionError",
    "LLMTimeoutError",
    "LLMRateLimitError",
    "LLMAuthenticationError",
    "LLMGenerationError",
]
