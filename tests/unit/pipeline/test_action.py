"""
Unit tests for the cached action wrapper.
"""

import json
from dataclasses import dataclass
from unittest.mock import AsyncMock

import pytest

from elelem.pipeline.action import action
from elelem.retry.exceptions import ElelemError, FailureKind


@dataclass(frozen=True)
class Lookup:
    city: str
    units: str = "metric"


@pytest.fixture
def run_action(memory_cache, fast_backoff, tracer, sleep_recorder):
    """Run an action with JSON (de)serialization against the in-memory cache."""
    async def _run(action_context, operation, **overrides):
        kwargs = dict(cache=memory_cache, backoff=fast_backoff, tracer=tracer, sleep=sleep_recorder)
        kwargs.update(overrides)
        return await action("lookup", action_context, json.dumps, json.loads, operation, **kwargs)

    return _run


class TestAction:
    """Test action caching and failure handling."""

    @pytest.mark.asyncio
    async def test_runs_operation_once_per_context(self, run_action):
        operation = AsyncMock(return_value={"population": 650000})
        context = {"city": "Boston"}

        first = await run_action(context, operation)
        second = await run_action(context, operation)

        assert first == second == {"population": 650000}
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_dataclass_context_is_cached(self, run_action, sleep_recorder):
        operation = AsyncMock(return_value={"population": 650000})

        first = await run_action(Lookup("Boston"), operation)
        second = await run_action(Lookup("Boston"), operation)

        assert first == second == {"population": 650000}
        assert operation.await_count == 1
        assert sleep_recorder.delays == []

    @pytest.mark.asyncio
    async def test_operation_receives_context_and_spans(self, run_action, finished_spans):
        async def operation(action_context, span, parent_span):
            span.set_attribute("seen", action_context["city"])
            return 1

        await run_action({"city": "Boston"}, operation)

        spans = finished_spans()
        assert spans["lookup-attempt-0"].attributes["seen"] == "Boston"
        assert spans["lookup"].attributes["elelem.cache.hit"] is False

    @pytest.mark.asyncio
    async def test_distinct_contexts_run_separately(self, run_action):
        operation = AsyncMock(side_effect=[1, 2])

        assert await run_action({"city": "Boston"}, operation) == 1
        assert await run_action({"city": "Paris"}, operation) == 2
        assert operation.await_count == 2

    @pytest.mark.asyncio
    async def test_cache_hit_marks_spans(self, run_action, memory_cache, finished_spans):
        await memory_cache.write({"city": "Boston"}, "42")
        operation = AsyncMock()

        assert await run_action({"city": "Boston"}, operation) == 42
        operation.assert_not_awaited()
        assert finished_spans()["lookup"].attributes["elelem.cache.hit"] is True

    @pytest.mark.asyncio
    async def test_undecodable_entry_reruns_operation(self, run_action, memory_cache):
        await memory_cache.write({"city": "Boston"}, "{broken")
        operation = AsyncMock(return_value=7)

        assert await run_action({"city": "Boston"}, operation) == 7
        assert operation.await_count == 1
        assert await memory_cache.read({"city": "Boston"}) == "7"

    @pytest.mark.asyncio
    async def test_failures_are_retried(self, run_action):
        operation = AsyncMock(side_effect=[TimeoutError("slow"), "ok"])

        assert await run_action({"id": 1}, operation) == "ok"
        assert operation.await_count == 2

    @pytest.mark.asyncio
    async def test_exhaustion_wraps_error(self, run_action, memory_cache):
        operation = AsyncMock(side_effect=ValueError("bad input"))

        with pytest.raises(ElelemError) as exc_info:
            await run_action({"id": 1}, operation)

        assert exc_info.value.kind is FailureKind.TERMINAL
        assert exc_info.value.message == "bad input"
        assert exc_info.value.usage.total_tokens == 0
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert operation.await_count == 3
        assert len(memory_cache) == 0

    @pytest.mark.asyncio
    async def test_custom_backoff(self, run_action, fast_backoff):
        operation = AsyncMock(side_effect=ValueError("bad input"))

        with pytest.raises(ElelemError):
            await run_action({"id": 1}, operation, backoff=fast_backoff.with_attempts(5))

        assert operation.await_count == 5
