"""
Cache-augmented generate protocol.

One generate call runs inside one retry engine invocation named after the
chat id. Each attempt:

1. appends the formatter output to the system prompt
2. builds the cache key from the formatted system prompt, the user prompt
   and the merged model options
3. reads the cache (own nested retries); an entry only counts as a hit if
   it still parses and validates against the schema
4. on a miss, calls the provider and records its usage in the attempt,
   call and session ledgers
5. extracts the last JSON object from the response (absent JSON is retryable)
6. parses it and 7. validates it against the schema; at temperature 0 both
   failures are permanent, since deterministic decoding would repeat them
8. on success after a miss, writes the extracted JSON back to the cache
9. writes the same attribute set to the attempt span and the call span

When every attempt fails, the last error is wrapped in an ElelemError
carrying the call-level usage.
"""

import asyncio
import json
from typing import Any, Optional, TypeVar

import structlog
from opentelemetry.trace import Span, Tracer

from elelem.cache.base import ElelemCache
from elelem.formatters import ElelemFormatter
from elelem.llm.base_client import BaseLLMClient, Completion
from elelem.models.results import ElelemResult, generation_cache_key
from elelem.models.usage import UsageLedgers, UsageRecord
from elelem.monitoring.metrics import cache_lookups_total
from elelem.retry.backoff import BackoffConfig, SleepFn
from elelem.retry.engine import with_retries
from elelem.retry.exceptions import ElelemError, FailureKind, error_message
from elelem.tracing.attributes import (
    CACHE_HIT,
    PROMPT_RESPONSE,
    PROMPT_SYSTEM,
    PROMPT_USER,
    ConfigAttributes,
    get_tracer,
    mark_error,
    set_config_attributes,
    set_usage_attributes,
)
from elelem.validation.exceptions import JSONParseError, SchemaValidationError, ValidationError
from elelem.validation.stage1_json_parse import Stage1JSONParse
from elelem.validation.stage2_schema import ResponseSchema, SchemaLike, as_schema

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Failures that deterministic decoding would reproduce on every retry
DETERMINISTIC_FAILURES = (JSONParseError, SchemaValidationError)


def is_deterministic(model_options: dict[str, Any]) -> bool:
    """Temperature 0 means the same prompt yields the same completion."""
    return model_options.get("temperature") == 0


def _cached_entry_is_valid(cached: str, schema: ResponseSchema) -> bool:
    try:
        parsed = json.loads(cached)
    except json.JSONDecodeError:
        return False
    return schema.is_valid(parsed)


def _attempt_error(error: Exception, attempt_usage: UsageRecord, deterministic: bool) -> ElelemError:
    kind = FailureKind.TRANSIENT
    if deterministic and isinstance(error, DETERMINISTIC_FAILURES):
        kind = FailureKind.PERMANENT
    details = dict(getattr(error, "details", None) or {})
    if isinstance(error, ValidationError):
        details["stage"] = error.stage
    return ElelemError(error_message(error), usage=attempt_usage, kind=kind, details=details)


async def call_provider(
    client: BaseLLMClient,
    system_prompt_with_format: str,
    user_prompt: str,
    model_options: dict[str, Any],
    ledgers: UsageLedgers,
    tracer: Tracer,
) -> Completion:
    """
    Run one provider call in its own span and record its usage in all ledgers.
    """
    with tracer.start_as_current_span(
        f"{client.provider_name}-call", record_exception=False, set_status_on_exception=False
    ) as span:
        span.set_attribute(PROMPT_SYSTEM, system_prompt_with_format)
        span.set_attribute(PROMPT_USER, user_prompt)
        try:
            completion = await client.complete(system_prompt_with_format, user_prompt, model_options)
        except Exception as e:
            mark_error(span, e)
            raise

        ledgers.record(completion.usage)
        set_usage_attributes(span, completion.usage)
        span.set_attribute(PROMPT_RESPONSE, completion.text)
        return completion


async def generate(
    chat_id: str,
    *,
    client: BaseLLMClient,
    model_options: dict[str, Any],
    system_prompt: str,
    user_prompt: str,
    schema: SchemaLike,
    formatter: ElelemFormatter,
    cache: ElelemCache,
    session_usage: UsageRecord,
    backoff: Optional[BackoffConfig] = None,
    tracer: Optional[Tracer] = None,
    sleep: SleepFn = asyncio.sleep,
) -> ElelemResult[Any]:
    """
    Request a validated, typed result from a provider.

    Args:
        chat_id: Name of the call (span name, log field)
        client: Provider client
        model_options: Fully merged model options
        system_prompt: System prompt before format instructions
        user_prompt: User prompt
        schema: Pydantic model class, JSON Schema dict, or ResponseSchema
        formatter: Turns the schema into format instructions
        cache: Cache backend
        session_usage: Session-level ledger; provider usage is added to it
        backoff: Attempt bound and delays for the call and its cache access
        tracer: OpenTelemetry tracer
        sleep: Coroutine used for backoff delays

    Returns:
        ElelemResult with the validated value and call-level usage

    Raises:
        ElelemError: All attempts failed; usage is the call-level total
    """
    response_schema = as_schema(schema)
    tracer = get_tracer(tracer)
    stage1 = Stage1JSONParse()

    call_usage = UsageRecord.zero()
    system_prompt_with_format = f"{system_prompt}\n{formatter(response_schema)}"
    cache_key = generation_cache_key(system_prompt_with_format, user_prompt, model_options)
    deterministic = is_deterministic(model_options)

    async def read_cache(span: Span, parent_span: Span) -> Optional[str]:
        cached = await cache.read(cache_key)
        span.set_attribute(CACHE_HIT, cached is not None)
        return cached

    async def attempt(span: Span, parent_span: Span) -> ElelemResult[Any]:
        attempt_usage = UsageRecord.zero()
        ledgers = UsageLedgers(attempt=attempt_usage, call=call_usage, session=session_usage)

        cache_hit = False
        error: Optional[str] = None
        response: Optional[str] = None
        extracted_json: Optional[str] = None

        try:
            cached = await with_retries("cache-read", read_cache, backoff, tracer=tracer, sleep=sleep)

            if cached is None:
                cache_lookups_total.labels(result="miss").inc()
            elif _cached_entry_is_valid(cached, response_schema):
                cache_hit = True
                cache_lookups_total.labels(result="hit").inc()
            else:
                cache_lookups_total.labels(result="stale").inc()
                logger.info("Ignoring stale cache entry", chat_id=chat_id, schema=response_schema.name)

            if cache_hit:
                response = cached
            else:
                completion = await call_provider(
                    client, system_prompt_with_format, user_prompt, model_options, ledgers, tracer
                )
                response = completion.text

            with tracer.start_as_current_span(
                "parse-response", record_exception=False, set_status_on_exception=False
            ) as parse_span:
                try:
                    extracted_json, parsed = stage1.validate(response)
                    value = response_schema.validate(parsed)
                except Exception as e:
                    mark_error(parse_span, e)
                    raise

            if not cache_hit:
                json_to_cache = extracted_json

                async def write_cache(write_span: Span, write_parent_span: Span) -> None:
                    await cache.write(cache_key, json_to_cache)

                await with_retries("cache-write", write_cache, backoff, tracer=tracer, sleep=sleep)

            logger.info(
                "Generate attempt succeeded",
                chat_id=chat_id,
                cache_hit=cache_hit,
                total_tokens=call_usage.total_tokens,
            )
            return ElelemResult(result=value, usage=call_usage.snapshot())

        except ElelemError as e:
            error = e.message
            raise
        except Exception as e:
            error = error_message(e)
            raise _attempt_error(e, attempt_usage, deterministic) from e

        finally:
            attributes: ConfigAttributes = {
                "cache_hit": cache_hit,
                "error": error,
                "options": model_options,
                "system_prompt": system_prompt_with_format,
                "user_prompt": user_prompt,
                "response": response,
                "extracted_json": extracted_json,
            }

            set_config_attributes(span, attributes)
            set_usage_attributes(span, attempt_usage)

            set_config_attributes(parent_span, attributes)
            set_usage_attributes(parent_span, call_usage)

    try:
        return await with_retries(chat_id, attempt, backoff, tracer=tracer, sleep=sleep)
    except Exception as e:
        logger.error(
            "Generate call failed",
            chat_id=chat_id,
            error=error_message(e),
            total_tokens=call_usage.total_tokens,
            cost_usd=call_usage.cost_usd,
        )
        raise ElelemError(
            error_message(e),
            usage=call_usage,
            kind=FailureKind.TERMINAL,
            details=getattr(e, "details", None),
        ) from e
