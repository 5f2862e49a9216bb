"""
Retry engine with exponential backoff and a permanent-failure short-circuit.

Main Components:
    - with_retries: Run an async operation with bounded retries and tracing
    - BackoffConfig: Attempt bound and delay schedule
    - ElelemError / FailureKind: Tagged failure carrying a usage snapshot

Usage:
    >>> from elelem.retry import with_retries, BackoffConfig
    >>> value = await with_retries("cache-read", read_op, BackoffConfig(max_attempts=3))
"""

from elelem.retry.backoff import DEFAULT_BACKOFF, BackoffConfig
from elelem.retry.engine import RetryState, with_retries
from elelem.retry.exceptions import ElelemError, FailureKind, is_permanent

__all__ = [
    "with_retries",
    "RetryState",
    "BackoffConfig",
    "DEFAULT_BACKOFF",
    "ElelemError",
    "FailureKind",
    "is_permanent",
]
