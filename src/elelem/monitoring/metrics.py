"""Custom Prometheus metrics for Elelem.

Exposed through the default prometheus_client registry. Useful alerts:
- retry_exhausted_total (calls failing after every attempt)
- validation_failures_total (models drifting away from the requested format)
- cache_lookups_total{result="stale"} (cache entries from an older schema)
- llm_cost_usd_total (spend)
"""

from prometheus_client import Counter, Histogram, start_http_server

from elelem.config import Settings

# === Retry Metrics ===

retry_attempts_total = Counter(
    "elelem_retry_attempts_total",
    "Retry engine attempts by outcome",
    ["outcome"],
)
"""
Labels:
- outcome: success, failure (operation raised), short_circuit (permanent
  failure replayed without running the operation)
"""

retry_exhausted_total = Counter(
    "elelem_retry_exhausted_total",
    "Retry engine invocations that failed after all attempts",
)

# === Cache Metrics ===

cache_lookups_total = Counter(
    "elelem_cache_lookups_total",
    "Cache lookups by result",
    ["result"],
)
"""
Labels:
- result: hit, miss, stale (entry present but no longer parses or validates)
"""

# === Validation Metrics ===

validation_failures_total = Counter(
    "elelem_validation_failures_total",
    "Response validation failures by stage and error type",
    ["stage", "error_type"],
)
"""
Labels:
- stage: stage1 (extraction/JSON parse), stage2 (schema)
- error_type: no_json_found, json_decode_error, not_json_object, schema_validation_error
"""

# === LLM Usage Metrics ===

llm_latency_seconds = Histogram(
    "elelem_llm_latency_seconds",
    "Provider call latency in seconds",
    ["model", "success"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

llm_tokens_total = Counter(
    "elelem_llm_tokens_total",
    "Total tokens consumed by model and type",
    ["model", "token_type"],
)
"""
Labels:
- model: Model name
- token_type: prompt (input tokens), completion (output tokens)
"""

llm_cost_usd_total = Counter(
    "elelem_llm_cost_usd_total",
    "Estimated provider spend in USD",
    ["model"],
)


def start_metrics_server(settings: Settings) -> bool:
    """
    Serve /metrics on METRICS_PORT when PROMETHEUS_ENABLED is set.

    Returns:
        True if the server was started
    """
    if not settings.PROMETHEUS_ENABLED:
        return False
    start_http_server(settings.METRICS_PORT)
    return True
