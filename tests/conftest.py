"""Shared test fixtures and configuration for all tests.

Provides tracing capture, zero-delay backoff, a mock provider and an
in-memory cache used across the unit tests.
"""

from typing import Callable
from unittest.mock import AsyncMock

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from elelem.cache.memory import InMemoryCache
from elelem.config import Settings
from elelem.llm.base_client import BaseLLMClient, Completion
from elelem.models.usage import UsageRecord
from elelem.retry.backoff import BackoffConfig


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing."""
    return Settings(
        APP_NAME="elelem (Test)",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        OPENAI_API_KEY=None,
        COHERE_API_KEY=None,
        CACHE_BACKEND="memory",
        REDIS_URL="redis://localhost:6379/0",
        REDIS_MAX_CONNECTIONS=10,
        PROMETHEUS_ENABLED=False,
    )


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def tracer(span_exporter: InMemorySpanExporter):
    """Tracer whose finished spans land in span_exporter."""
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return provider.get_tracer("elelem-test")


@pytest.fixture
def finished_spans(span_exporter: InMemorySpanExporter) -> Callable[[], dict]:
    """Return finished spans by name (last one wins for repeated names)."""
    def _spans() -> dict:
        return {span.name: span for span in span_exporter.get_finished_spans()}

    return _spans


@pytest.fixture
def fast_backoff() -> BackoffConfig:
    """Three attempts without delays."""
    return BackoffConfig(max_attempts=3, starting_delay=0.0, jitter=0.0)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def memory_cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def make_completion():
    """Factory fixture to create provider Completions.

    Usage:
        def test_something(make_completion):
            completion = make_completion('{"a": 1}', prompt_tokens=20)
    """
    def _create(
        text: str,
        prompt_tokens: int = 10,
        completion_tokens: int = 5,
        cost_usd: float = 0.25,
        model: str = "gpt-3.5-turbo",
    ) -> Completion:
        return Completion(
            text=text,
            model=model,
            usage=UsageRecord.from_tokens(prompt_tokens, completion_tokens, cost_usd),
            finish_reason="stop",
            latency_ms=100,
        )

    return _create


@pytest.fixture
def mock_provider(make_completion):
    """Mock provider client answering '{"a": 1}' wrapped in prose."""
    mock = AsyncMock(spec=BaseLLMClient)
    mock.provider_name = "openai"
    mock.complete = AsyncMock(return_value=make_completion('Here you go: `{"a": 1}`'))
    return mock
