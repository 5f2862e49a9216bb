"""
Retry engine: bounded retries with exponential backoff and tracing.

One parent span covers the whole invocation and each attempt gets a child
span named ``{operation_name}-attempt-{n}`` (zero-based). The operation
receives both spans so it can annotate either.

Permanent-failure short-circuit:
    When an attempt raises a permanent ElelemError, the error is remembered
    for the rest of the invocation. Every later attempt re-raises it straight
    away, without opening an attempt span and without running the operation
    again, but it still consumes the attempt bound and the delay schedule.
    Callers relying on the configured timing therefore see the same budget
    whether a failure is permanent or not.

Usage:
    result = await with_retries(
        "cache-read",
        lambda span, parent_span: cache.read(key),
        BackoffConfig(max_attempts=3),
    )
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

import structlog
from opentelemetry.trace import Span, Tracer

from elelem.monitoring.metrics import retry_attempts_total, retry_exhausted_total
from elelem.retry.backoff import DEFAULT_BACKOFF, BackoffConfig, SleepFn
from elelem.retry.exceptions import error_message, is_permanent
from elelem.tracing.attributes import get_tracer, mark_error

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Operation = Callable[[Span, Span], Awaitable[T]]


@dataclass
class RetryState:
    """
    Mutable state of a single with_retries invocation.

    Attributes:
        operation_name: Name of the parent span
        attempts: Attempts scheduled so far (including short-circuited ones)
        spans_opened: Attempt spans opened so far; also the next span index
        permanent_failure: Sticky permanent error, replayed once set
    """

    operation_name: str
    attempts: int = 0
    spans_opened: int = 0
    permanent_failure: Optional[BaseException] = None


async def _run_attempt(
    state: RetryState,
    operation: Operation[T],
    parent_span: Span,
    tracer: Tracer,
) -> T:
    state.attempts += 1

    if state.permanent_failure is not None:
        retry_attempts_total.labels(outcome="short_circuit").inc()
        logger.info(
            "Replaying permanent failure without running operation",
            operation=state.operation_name,
            attempt=state.attempts,
        )
        raise state.permanent_failure

    span_name = f"{state.operation_name}-attempt-{state.spans_opened}"
    state.spans_opened += 1

    with tracer.start_as_current_span(
        span_name, record_exception=False, set_status_on_exception=False
    ) as span:
        try:
            result = await operation(span, parent_span)
        except Exception as e:
            mark_error(span, e)
            retry_attempts_total.labels(outcome="failure").inc()
            if is_permanent(e):
                state.permanent_failure = e
            logger.warning(
                "Attempt failed",
                operation=state.operation_name,
                attempt=state.attempts,
                error=error_message(e),
                error_type=type(e).__name__,
                permanent=state.permanent_failure is e,
            )
            raise

    retry_attempts_total.labels(outcome="success").inc()
    return result


async def with_retries(
    operation_name: str,
    operation: Operation[T],
    backoff: BackoffConfig | None = None,
    *,
    tracer: Tracer | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> T:
    """
    Run ``operation`` with bounded retries.

    Args:
        operation_name: Parent span name (attempt spans derive from it)
        operation: Async callable taking (attempt span, parent span)
        backoff: Attempt bound and delays (default: 3 attempts)
        tracer: OpenTelemetry tracer (default: the "elelem" tracer)
        sleep: Coroutine used for backoff delays

    Returns:
        The operation's result from the first successful attempt

    Raises:
        Exception: The last attempt's error once attempts are exhausted
    """
    backoff = backoff or DEFAULT_BACKOFF
    tracer = get_tracer(tracer)
    state = RetryState(operation_name=operation_name)

    with tracer.start_as_current_span(
        operation_name, record_exception=False, set_status_on_exception=False
    ) as parent_span:
        try:
            async for attempt in backoff.retrying(sleep=sleep):
                with attempt:
                    result = await _run_attempt(state, operation, parent_span, tracer)
        except Exception as e:
            mark_error(parent_span, e)
            retry_exhausted_total.inc()
            logger.error(
                "Retries exhausted",
                operation=operation_name,
                attempts=state.attempts,
                max_attempts=backoff.max_attempts,
                error=error_message(e),
                permanent=state.permanent_failure is not None,
            )
            raise

    return result
