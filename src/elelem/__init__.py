"""
Elelem: resilient, typed and traced LLM generation.

Wraps raw completion calls with:
- Response caching (Redis, in-memory, or none)
- Retries with exponential backoff and a permanent-failure short-circuit
- Structured tracing (OpenTelemetry spans per call and per attempt)
- Per-attempt, per-call and per-session usage/cost accounting
- Validation of model output against a caller-supplied schema

Architecture: Elelem session -> generate/action calls -> retry engine -> cache/provider/validation
"""

from elelem.client import Elelem
from elelem.models.results import ElelemResult
from elelem.models.usage import UsageRecord
from elelem.pipeline.session import ElelemContext
from elelem.retry.backoff import BackoffConfig
from elelem.retry.exceptions import ElelemError, FailureKind

__version__ = "0.1.0"

__all__ = [
    "Elelem",
    "ElelemContext",
    "ElelemResult",
    "ElelemError",
    "FailureKind",
    "UsageRecord",
    "BackoffConfig",
]
