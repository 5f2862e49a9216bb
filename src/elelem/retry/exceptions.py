"""
Pipeline failure type.

Every failure surfaced by Elelem is an ElelemError carrying a human-readable
message, a failure kind and a usage snapshot, so the cost of a failed call
is never lost. The kind decides how the retry engine treats it:

- TRANSIENT: retried while attempts remain
- PERMANENT: retrying the same inputs cannot succeed; the engine replays the
  error for the remaining attempts instead of running the operation again
- TERMINAL: surfaced to the caller (attempts exhausted, or session failure)
"""

from enum import Enum
from typing import Any

from elelem.models.usage import UsageRecord


class FailureKind(str, Enum):
    TRANSIENT = "transient"
    PERMANENT = "permanent"
    TERMINAL = "terminal"


class ElelemError(Exception):
    """
    Failure carrying the usage accumulated up to the point it was raised.

    Attributes:
        message: Human-readable description
        usage: Usage snapshot (attempt-level inside an attempt, call-level when
            escaping a generate call, session-level when escaping a session)
        kind: FailureKind
        details: Structured data for logging
    """

    def __init__(
        self,
        message: str,
        usage: UsageRecord | None = None,
        kind: FailureKind = FailureKind.TERMINAL,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        # Snapshot so later additions to a live ledger don't leak into the error
        self.usage = usage.snapshot() if usage is not None else UsageRecord.zero()
        self.kind = kind
        self.details = details or {}

    @property
    def is_permanent(self) -> bool:
        return self.kind is FailureKind.PERMANENT

    def __repr__(self) -> str:
        return f"ElelemError(kind={self.kind.value}, message={self.message!r})"


def is_permanent(error: BaseException) -> bool:
    """True if retrying the operation that raised ``error`` is futile."""
    return isinstance(error, ElelemError) and error.is_permanent


def error_message(error: BaseException) -> str:
    """Message of an error, falling back to the class name for empty messages."""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or type(error).__name__
