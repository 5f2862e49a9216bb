"""
Unit tests for the Cohere client.
"""

import json

import httpx
import pytest

from elelem.llm.cohere_client import CohereClient
from elelem.llm.exceptions import LLMGenerationError, LLMRateLimitError

BASE_URL = "https://api.cohere.test/v1"


def generate_response(text, input_tokens=40, output_tokens=10):
    return {
        "generations": [{"text": text, "finish_reason": "COMPLETE"}],
        "meta": {"billed_units": {"input_tokens": input_tokens, "output_tokens": output_tokens}},
    }


def make_client(handler) -> CohereClient:
    http_client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return CohereClient(base_url=BASE_URL, api_key="co-test", http_client=http_client)


class TestCohereClient:
    """Test CohereClient requests and response handling."""

    @pytest.mark.asyncio
    async def test_prompt_joins_system_and_user(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=generate_response('{"a": 1}'))

        client = make_client(handler)
        await client.complete("system text", "user text", {"model": "command", "max_tokens": 100})

        assert seen["url"] == f"{BASE_URL}/generate"
        assert seen["body"]["prompt"] == "system text\nuser text"
        assert seen["body"]["model"] == "command"
        assert seen["body"]["max_tokens"] == 100

    @pytest.mark.asyncio
    async def test_usage_from_billed_units(self):
        client = make_client(lambda request: httpx.Response(200, json=generate_response('{"a": 1}')))

        completion = await client.complete("s", "u", {"model": "command-light"})

        assert completion.text == '{"a": 1}'
        assert completion.model == "command-light"
        assert completion.finish_reason == "COMPLETE"
        assert completion.usage.prompt_tokens == 40
        assert completion.usage.completion_tokens == 10
        assert completion.usage.cost_usd == pytest.approx(0.0003 * 40 / 1000 + 0.0006 * 10 / 1000)

    @pytest.mark.asyncio
    async def test_model_defaults_to_command(self):
        client = make_client(lambda request: httpx.Response(200, json=generate_response("x")))

        completion = await client.complete("s", "u", {})

        assert completion.model == "command"

    @pytest.mark.asyncio
    async def test_missing_meta_counts_zero_tokens(self):
        client = make_client(
            lambda request: httpx.Response(200, json={"generations": [{"text": "x"}]})
        )

        completion = await client.complete("s", "u", {"model": "command"})

        assert completion.usage.total_tokens == 0
        assert completion.usage.cost_usd == 0.0

    @pytest.mark.asyncio
    async def test_no_generations_raises(self):
        client = make_client(lambda request: httpx.Response(200, json={"generations": []}))

        with pytest.raises(LLMGenerationError):
            await client.complete("s", "u", {"model": "command"})

    @pytest.mark.asyncio
    async def test_rate_limit(self):
        client = make_client(lambda request: httpx.Response(429, json={"message": "slow down"}))

        with pytest.raises(LLMRateLimitError):
            await client.complete("s", "u", {"model": "command"})
