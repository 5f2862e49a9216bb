"""
Unit tests for the Elelem entry point, settings, logging and metrics setup.
"""

import logging
from unittest.mock import patch

import pytest
import structlog

from elelem import Elelem
from elelem.cache.base import NullCache
from elelem.cache.memory import InMemoryCache
from elelem.cache.redis_cache import RedisCache
from elelem.config import Settings
from elelem.llm.cohere_client import CohereClient
from elelem.llm.openai_client import OpenAIClient
from elelem.logging_config import add_library_context, configure_logging, truncate_long_text
from elelem.monitoring.metrics import start_metrics_server


class TestElelem:
    """Test Elelem construction."""

    def test_named_providers(self, mock_provider):
        llm = Elelem(openai=mock_provider, cohere=mock_provider)

        assert set(llm.providers) == {"openai", "cohere"}

    def test_provider_mapping_and_override(self, mock_provider):
        other = object()

        llm = Elelem({"openai": other, "local": mock_provider}, openai=mock_provider)

        assert llm.providers["openai"] is mock_provider
        assert llm.providers["local"] is mock_provider

    def test_cache_resolution(self, mock_async_redis):
        assert isinstance(Elelem().cache, NullCache)
        assert isinstance(Elelem(cache=InMemoryCache()).cache, InMemoryCache)
        assert isinstance(Elelem(cache=InMemoryCache(), redis=mock_async_redis).cache, RedisCache)

    def test_from_settings(self, test_settings):
        test_settings.OPENAI_API_KEY = "sk-test"
        test_settings.COHERE_API_KEY = "co-test"
        test_settings.RETRY_MAX_ATTEMPTS = 4

        llm = Elelem.from_settings(test_settings, instrument=False)

        assert isinstance(llm.providers["openai"], OpenAIClient)
        assert isinstance(llm.providers["cohere"], CohereClient)
        assert llm.providers["openai"].api_key == "sk-test"
        assert isinstance(llm.cache, InMemoryCache)
        assert llm.backoff.max_attempts == 4

    def test_from_settings_without_keys(self, test_settings):
        assert Elelem.from_settings(test_settings, instrument=False).providers == {}

    def test_from_settings_instruments(self, test_settings):
        with patch("elelem.client.configure_logging") as mock_logging, patch(
            "elelem.client.start_metrics_server"
        ) as mock_metrics:
            Elelem.from_settings(test_settings)

        mock_logging.assert_called_once_with("DEBUG", "development")
        mock_metrics.assert_called_once_with(test_settings)

    @pytest.mark.asyncio
    async def test_close_closes_providers(self, mock_provider):
        async with Elelem(openai=mock_provider):
            pass

        mock_provider.close.assert_awaited_once()


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.RETRY_MAX_ATTEMPTS == 3
        assert settings.CACHE_BACKEND == "none"
        assert settings.CACHE_TTL_SECONDS is None

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("RETRY_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("CACHE_BACKEND", "redis")

        settings = Settings(_env_file=None)

        assert settings.RETRY_MAX_ATTEMPTS == 5
        assert settings.CACHE_BACKEND == "redis"


class TestLogging:
    """Test structlog configuration."""

    def teardown_method(self):
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()

    def test_library_context_added(self):
        event = add_library_context(None, "info", {"event": "x"})

        assert event["lib"] == "elelem"

    @pytest.mark.parametrize("environment", ["development", "production"])
    def test_configure_logging_installs_single_handler(self, environment):
        configure_logging("DEBUG", environment)
        configure_logging("WARNING", environment)

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING


class TestMetricsServer:
    """Test the Prometheus endpoint switch."""

    def test_disabled(self, test_settings):
        with patch("elelem.monitoring.metrics.start_http_server") as mock_server:
            assert start_metrics_server(test_settings) is False

        mock_server.assert_not_called()

    def test_enabled(self, test_settings):
        test_settings.PROMETHEUS_ENABLED = True
        test_settings.METRICS_PORT = 9999

        with patch("elelem.monitoring.metrics.start_http_server") as mock_server:
            assert start_metrics_server(test_settings) is True

        mock_server.assert_called_once_with(9999)


def test_truncate_long_text():
    event = truncate_long_text(None, "info", {"event": "x", "response": "y" * 5000, "chat_id": "z" * 5000})

    assert event["response"].startswith("y" * 1000 + "...")
    assert event["response"].endswith("(5000 chars)")
    assert event["chat_id"] == "z" * 5000
