"""
Cached action wrapper.

Read-through cache around an arbitrary idempotent computation, keyed
directly by the action context. The operation runs at most once per
distinct context for as long as the cache keeps the entry; concurrent
callers that miss at the same time may each run it once, since no lock is
taken.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

import structlog
from opentelemetry.trace import Span, Tracer

from elelem.cache.base import ElelemCache
from elelem.models.usage import UsageRecord
from elelem.monitoring.metrics import cache_lookups_total
from elelem.retry.backoff import BackoffConfig, SleepFn
from elelem.retry.engine import with_retries
from elelem.retry.exceptions import ElelemError, FailureKind, error_message
from elelem.tracing.attributes import CACHE_HIT, get_tracer

logger = structlog.get_logger(__name__)

AC = TypeVar("AC")
T = TypeVar("T")

ActionOperation = Callable[[AC, Span, Span], Awaitable[T]]


async def action(
    action_id: str,
    action_context: AC,
    serialize: Callable[[T], str],
    deserialize: Callable[[str], T],
    operation: ActionOperation,
    *,
    cache: ElelemCache,
    backoff: Optional[BackoffConfig] = None,
    tracer: Optional[Tracer] = None,
    sleep: SleepFn = asyncio.sleep,
) -> T:
    """
    Run ``operation`` unless its result for ``action_context`` is cached.

    Args:
        action_id: Name of the call (span name, log field)
        action_context: Input of the operation; also the cache key
        serialize: Turns a result into cache text
        deserialize: Inverse of serialize
        operation: Async callable taking (action_context, attempt span, parent span)
        cache: Cache backend
        backoff: Attempt bound and delays for the action and its cache access

    Raises:
        ElelemError: All attempts failed
    """
    tracer = get_tracer(tracer)

    async def read_cache(span: Span, parent_span: Span) -> Optional[str]:
        cached = await cache.read(action_context)
        span.set_attribute(CACHE_HIT, cached is not None)
        return cached

    async def attempt(span: Span, parent_span: Span) -> Any:
        cached = await with_retries("cache-read", read_cache, backoff, tracer=tracer, sleep=sleep)

        if cached is not None:
            try:
                value = deserialize(cached)
            except Exception as e:
                cache_lookups_total.labels(result="stale").inc()
                logger.info("Ignoring undecodable cache entry", action_id=action_id, error=str(e))
            else:
                cache_lookups_total.labels(result="hit").inc()
                span.set_attribute(CACHE_HIT, True)
                parent_span.set_attribute(CACHE_HIT, True)
                return value
        else:
            cache_lookups_total.labels(result="miss").inc()

        span.set_attribute(CACHE_HIT, False)
        parent_span.set_attribute(CACHE_HIT, False)

        result = await operation(action_context, span, parent_span)
        serialized = serialize(result)

        async def write_cache(write_span: Span, write_parent_span: Span) -> None:
            await cache.write(action_context, serialized)

        await with_retries("cache-write", write_cache, backoff, tracer=tracer, sleep=sleep)
        return result

    try:
        return await with_retries(action_id, attempt, backoff, tracer=tracer, sleep=sleep)
    except ElelemError:
        raise
    except Exception as e:
        logger.error("Action failed", action_id=action_id, error=error_message(e))
        raise ElelemError(
            error_message(e),
            usage=UsageRecord.zero(),
            kind=FailureKind.TERMINAL,
            details=getattr(e, "details", None),
        ) from e
