"""Monitoring and metrics instrumentation for Elelem."""

from elelem.monitoring.metrics import (
    cache_lookups_total,
    llm_cost_usd_total,
    llm_latency_seconds,
    llm_tokens_total,
    retry_attempts_total,
    retry_exhausted_total,
    start_metrics_server,
    validation_failures_total,
)

__all__ = [
    "retry_attempts_total",
    "retry_exhausted_total",
    "cache_lookups_total",
    "validation_failures_total",
    "llm_latency_seconds",
    "llm_tokens_total",
    "llm_cost_usd_total",
    "start_metrics_server",
]
