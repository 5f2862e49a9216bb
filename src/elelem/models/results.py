"""
Result and cache-key models for the generation pipeline.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from elelem.models.usage import UsageRecord

T = TypeVar("T")


@dataclass(frozen=True)
class ElelemResult(Generic[T]):
    """
    Value returned by generate calls and sessions.

    Attributes:
        result: Validated, typed value (or whatever the session body returned)
        usage: Usage accumulated by the call or session
    """

    result: T
    usage: UsageRecord


def generation_cache_key(
    system_prompt_with_format: str,
    user_prompt: str,
    model_options: dict[str, Any],
) -> dict[str, Any]:
    """
    Structured cache key of a generate call.

    Covers every value that decides whether a cached response is reusable.
    Hashing is left to the cache backend.
    """
    return {
        "system_prompt_with_format": system_prompt_with_format,
        "user_prompt": user_prompt,
        "model_options": model_options,
    }
