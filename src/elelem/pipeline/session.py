"""
Session orchestrator.

A session is the unit over which usage is totalled. It opens one span,
allocates the session ledger, and hands the caller an ElelemContext whose
generate/action entry points share the session's providers, cache, backoff
and ledger. Any error escaping the session body is rewrapped as an
ElelemError carrying the session usage at the point of failure.
"""

import asyncio
from typing import Any, Awaitable, Callable, Mapping, Optional, TypeVar

import structlog
from opentelemetry.trace import Tracer

from elelem.cache.base import ElelemCache
from elelem.formatters import ElelemFormatter
from elelem.llm.base_client import BaseLLMClient
from elelem.models.results import ElelemResult
from elelem.models.usage import UsageRecord
from elelem.pipeline.action import ActionOperation, action
from elelem.pipeline.generate import generate
from elelem.retry.backoff import BackoffConfig, SleepFn
from elelem.retry.exceptions import ElelemError, FailureKind, error_message
from elelem.tracing.attributes import get_tracer, mark_error, set_usage_attributes
from elelem.validation.stage2_schema import SchemaLike

logger = structlog.get_logger(__name__)

T = TypeVar("T")

ModelOptions = dict[str, Any]


class ElelemContext:
    """
    Entry points available inside a session body.

    Attributes:
        session_id: Name of the session
        usage: Live session-level ledger
    """

    def __init__(
        self,
        session_id: str,
        providers: Mapping[str, BaseLLMClient],
        default_model_options: Mapping[str, ModelOptions],
        cache: ElelemCache,
        usage: UsageRecord,
        backoff: Optional[BackoffConfig] = None,
        tracer: Optional[Tracer] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.session_id = session_id
        self.providers = providers
        self.default_model_options = default_model_options
        self.cache = cache
        self.usage = usage
        self.backoff = backoff
        self.tracer = tracer
        self._sleep = sleep

    def merged_options(self, provider: str, model_options: Optional[ModelOptions]) -> ModelOptions:
        """Session defaults for ``provider`` overlaid with call-site options."""
        return {**self.default_model_options.get(provider, {}), **(model_options or {})}

    async def generate(
        self,
        chat_id: str,
        provider: str,
        model_options: Optional[ModelOptions],
        system_prompt: str,
        user_prompt: str,
        schema: SchemaLike,
        formatter: ElelemFormatter,
    ) -> ElelemResult[Any]:
        """Run a generate call against the named provider."""
        if provider not in self.providers:
            raise ValueError(f"No client configured for provider '{provider}'")

        return await generate(
            chat_id,
            client=self.providers[provider],
            model_options=self.merged_options(provider, model_options),
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            schema=schema,
            formatter=formatter,
            cache=self.cache,
            session_usage=self.usage,
            backoff=self.backoff,
            tracer=self.tracer,
            sleep=self._sleep,
        )

    async def openai(
        self,
        chat_id: str,
        model_options: Optional[ModelOptions],
        system_prompt: str,
        user_prompt: str,
        schema: SchemaLike,
        formatter: ElelemFormatter,
    ) -> ElelemResult[Any]:
        return await self.generate(
            chat_id, "openai", model_options, system_prompt, user_prompt, schema, formatter
        )

    async def cohere(
        self,
        chat_id: str,
        model_options: Optional[ModelOptions],
        system_prompt: str,
        user_prompt: str,
        schema: SchemaLike,
        formatter: ElelemFormatter,
    ) -> ElelemResult[Any]:
        return await self.generate(
            chat_id, "cohere", model_options, system_prompt, user_prompt, schema, formatter
        )

    async def action(
        self,
        action_id: str,
        action_context: Any,
        serialize: Callable[[Any], str],
        deserialize: Callable[[str], Any],
        operation: ActionOperation,
        backoff: Optional[BackoffConfig] = None,
    ) -> Any:
        """Run a cached action; ``backoff`` overrides the session default."""
        return await action(
            action_id,
            action_context,
            serialize,
            deserialize,
            operation,
            cache=self.cache,
            backoff=backoff or self.backoff,
            tracer=self.tracer,
            sleep=self._sleep,
        )


async def run_session(
    session_id: str,
    default_model_options: Mapping[str, ModelOptions],
    context_fn: Callable[[ElelemContext], Awaitable[T]],
    *,
    providers: Mapping[str, BaseLLMClient],
    cache: ElelemCache,
    backoff: Optional[BackoffConfig] = None,
    tracer: Optional[Tracer] = None,
    sleep: SleepFn = asyncio.sleep,
) -> ElelemResult[T]:
    """
    Run ``context_fn`` as one session.

    Returns:
        ElelemResult with the body's return value and the session usage

    Raises:
        ElelemError: The body raised; usage is the session-level snapshot
    """
    session_usage = UsageRecord.zero()
    tracer = get_tracer(tracer)

    with tracer.start_as_current_span(
        session_id, record_exception=False, set_status_on_exception=False
    ) as session_span:
        try:
            context = ElelemContext(
                session_id,
                providers,
                default_model_options,
                cache,
                session_usage,
                backoff=backoff,
                tracer=tracer,
                sleep=sleep,
            )
            result = await context_fn(context)

            logger.info(
                "Session completed",
                session_id=session_id,
                total_tokens=session_usage.total_tokens,
                cost_usd=session_usage.cost_usd,
            )
            return ElelemResult(result=result, usage=session_usage.snapshot())

        except Exception as e:
            mark_error(session_span, e)
            logger.error(
                "Session failed",
                session_id=session_id,
                error=error_message(e),
                total_tokens=session_usage.total_tokens,
                cost_usd=session_usage.cost_usd,
            )
            raise ElelemError(
                error_message(e),
                usage=session_usage,
                kind=FailureKind.TERMINAL,
                details=getattr(e, "details", None),
            ) from e

        finally:
            set_usage_attributes(session_span, session_usage)
