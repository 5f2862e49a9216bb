"""
Span attribute helpers.

Every generate attempt writes the same attribute set to its own span and to
the enclosing call span, so a trace viewer shows the latest state of a call
on the parent without expanding attempts.
"""

import json
from typing import Any, Optional, TypedDict

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode, Tracer

from elelem.models.usage import UsageRecord

TRACER_NAME = "elelem"

CACHE_HIT = "elelem.cache.hit"
ERROR = "elelem.error"
PROMPT_OPTIONS = "elelem.prompt.options"
PROMPT_SYSTEM = "elelem.prompt.system"
PROMPT_USER = "elelem.prompt.user"
PROMPT_RESPONSE = "elelem.prompt.response"
PROMPT_RESPONSE_EXTRACTED = "elelem.prompt.response.extracted"

USAGE_COMPLETION_TOKENS = "elelem.usage.completion_tokens"
USAGE_PROMPT_TOKENS = "elelem.usage.prompt_tokens"
USAGE_TOTAL_TOKENS = "elelem.usage.total_tokens"
USAGE_COST_USD = "elelem.usage.cost_usd"


class ConfigAttributes(TypedDict):
    cache_hit: bool
    error: Optional[str]
    options: dict[str, Any]
    system_prompt: str
    user_prompt: str
    response: Optional[str]
    extracted_json: Optional[str]


def get_tracer(tracer: Tracer | None = None) -> Tracer:
    """Return the given tracer, or the process-wide one named "elelem"."""
    return tracer if tracer is not None else trace.get_tracer(TRACER_NAME)


def mark_error(span: Span, error: BaseException) -> None:
    """Record the exception on the span and flag the span as errored."""
    span.record_exception(error)
    span.set_status(Status(StatusCode.ERROR, str(error)))


def set_usage_attributes(span: Span, usage: UsageRecord) -> None:
    span.set_attribute(USAGE_COMPLETION_TOKENS, usage.completion_tokens)
    span.set_attribute(USAGE_PROMPT_TOKENS, usage.prompt_tokens)
    span.set_attribute(USAGE_TOTAL_TOKENS, usage.total_tokens)
    span.set_attribute(USAGE_COST_USD, usage.cost_usd)


def set_config_attributes(span: Span, attributes: ConfigAttributes) -> None:
    # Absent values are written as the string "null" so every key is always present
    span.set_attribute(CACHE_HIT, attributes["cache_hit"])
    span.set_attribute(ERROR, attributes["error"] or "null")
    span.set_attribute(PROMPT_OPTIONS, json.dumps(attributes["options"], sort_keys=True, default=str))
    span.set_attribute(PROMPT_SYSTEM, attributes["system_prompt"])
    span.set_attribute(PROMPT_USER, attributes["user_prompt"])
    span.set_attribute(PROMPT_RESPONSE, attributes["response"] or "null")
    span.set_attribute(PROMPT_RESPONSE_EXTRACTED, attributes["extracted_json"] or "null")
