"""Unit test fixtures (mocks and stubs).

Provides mock objects for testing without external services.
"""

import pytest
from unittest.mock import AsyncMock


@pytest.fixture
def mock_async_redis():
    """Mock AsyncRedis client for unit tests (async)."""
    mock = AsyncMock()
    mock.set = AsyncMock(return_value=True)
    mock.get = AsyncMock(return_value=None)
    return mock
