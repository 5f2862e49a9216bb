"""Integration test fixtures (service checks and prerequisites).

Integration tests are skipped if required services are not running or
credentials are missing.
"""

import os
import uuid

import pytest
import pytest_asyncio
from redis.asyncio import Redis as AsyncRedis

from elelem.llm.openai_client import OpenAIClient


@pytest_asyncio.fixture
async def real_async_redis_client():
    """Real AsyncRedis client on database 15, flushed before and after each test.

    Skips if Redis is not reachable at localhost:6379.
    """
    client = AsyncRedis.from_url("redis://localhost:6379/15", decode_responses=True)
    try:
        await client.ping()
    except Exception as e:
        await client.aclose()
        pytest.skip(f"Redis not available: {e}")

    await client.flushdb()

    yield client

    await client.flushdb()
    await client.aclose()


@pytest.fixture
def openai_api_key():
    """Skips tests if OPENAI_API_KEY is not set."""
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        pytest.skip("OPENAI_API_KEY not set")
    return api_key


@pytest_asyncio.fixture
async def real_openai_client(openai_api_key):
    """Real OpenAIClient instance for integration tests."""
    client = OpenAIClient(api_key=openai_api_key, timeout=30)
    yield client
    await client.close()


@pytest.fixture
def unique_input():
    """Input string that has never been cached."""
    return f"something-{uuid.uuid4()}"
