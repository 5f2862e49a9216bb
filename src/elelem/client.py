"""
Elelem entry point.

Usage:
    llm = Elelem(openai=OpenAIClient(api_key=...), cache=InMemoryCache())

    async def body(c: ElelemContext):
        capital = await c.openai(
            "capital",
            {"max_tokens": 100, "temperature": 0},
            "What is the capital of the country provided?",
            "USA",
            Capital,
            json_schema_and_example_formatter,
        )
        return capital.result

    outcome = await llm.session("e2e-example", {"openai": {"model": "gpt-3.5-turbo"}}, body)
"""

import asyncio
from typing import Awaitable, Callable, Mapping, Optional, TypeVar

import structlog
from opentelemetry.trace import Tracer
from redis.asyncio import Redis as AsyncRedis

from elelem.cache import cache_from_settings, get_cache
from elelem.cache.base import ElelemCache
from elelem.config import Settings
from elelem.llm.base_client import BaseLLMClient
from elelem.llm.cohere_client import CohereClient
from elelem.llm.openai_client import OpenAIClient
from elelem.logging_config import configure_logging
from elelem.models.results import ElelemResult
from elelem.monitoring.metrics import start_metrics_server
from elelem.pipeline.session import ElelemContext, ModelOptions, run_session
from elelem.retry.backoff import BackoffConfig, SleepFn

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class Elelem:
    """
    Configured pipeline: providers, cache, backoff and tracer.

    Attributes:
        providers: Provider clients by name ("openai", "cohere", ...)
        cache: Cache shared by every session
        backoff: Attempt bound and delays for generate/action calls and their
            cache access (3 attempts when None)
    """

    def __init__(
        self,
        providers: Optional[Mapping[str, BaseLLMClient]] = None,
        *,
        openai: Optional[BaseLLMClient] = None,
        cohere: Optional[BaseLLMClient] = None,
        cache: Optional[ElelemCache] = None,
        redis: Optional[AsyncRedis] = None,
        backoff: Optional[BackoffConfig] = None,
        tracer: Optional[Tracer] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.providers: dict[str, BaseLLMClient] = dict(providers or {})
        if openai is not None:
            self.providers["openai"] = openai
        if cohere is not None:
            self.providers["cohere"] = cohere

        self.cache = get_cache(redis=redis, custom=cache)
        self.backoff = backoff
        self.tracer = tracer
        self._sleep = sleep

        logger.info(
            "Elelem initialized",
            providers=sorted(self.providers),
            cache=repr(self.cache),
            max_attempts=backoff.max_attempts if backoff else None,
        )

    @classmethod
    def from_settings(cls, settings: Settings, *, instrument: bool = True) -> "Elelem":
        """
        Build providers, cache and backoff from Settings.

        With ``instrument`` set, also configures structlog and starts the
        Prometheus endpoint when PROMETHEUS_ENABLED is on.
        """
        if instrument:
            configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)
            start_metrics_server(settings)

        providers: dict[str, BaseLLMClient] = {}
        if settings.OPENAI_API_KEY:
            providers["openai"] = OpenAIClient(
                base_url=settings.OPENAI_BASE_URL,
                api_key=settings.OPENAI_API_KEY,
                timeout=settings.OPENAI_TIMEOUT,
            )
        if settings.COHERE_API_KEY:
            providers["cohere"] = CohereClient(
                base_url=settings.COHERE_BASE_URL,
                api_key=settings.COHERE_API_KEY,
                timeout=settings.COHERE_TIMEOUT,
            )

        return cls(
            providers,
            cache=cache_from_settings(settings),
            backoff=BackoffConfig.from_settings(settings),
        )

    async def session(
        self,
        session_id: str,
        default_model_options: Mapping[str, ModelOptions],
        context_fn: Callable[[ElelemContext], Awaitable[T]],
    ) -> ElelemResult[T]:
        """
        Run ``context_fn`` as one session.

        Args:
            session_id: Name of the session span
            default_model_options: Per-provider defaults, e.g.
                ``{"openai": {"model": "gpt-3.5-turbo"}}``
            context_fn: Async body receiving an ElelemContext

        Raises:
            ElelemError: The body failed; usage is the session total so far
        """
        return await run_session(
            session_id,
            default_model_options,
            context_fn,
            providers=self.providers,
            cache=self.cache,
            backoff=self.backoff,
            tracer=self.tracer,
            sleep=self._sleep,
        )

    async def close(self) -> None:
        """Close provider HTTP clients."""
        for client in self.providers.values():
            await client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
