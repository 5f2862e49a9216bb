"""
Validation-specific exceptions for model responses.

Raised while turning raw model text into a typed value. The generate
pipeline converts them into ElelemError, promoting JSONParseError and
SchemaValidationError to permanent failures when decoding is deterministic
(temperature 0).
"""

from typing import Any

SNIPPET_LENGTH = 500


def _snippet(text: str | None) -> dict[str, str]:
    # Model responses can be long; keep logs and span events bounded
    return {"content_snippet": text[:SNIPPET_LENGTH]} if text else {}


class ValidationError(Exception):
    """
    Base exception for all response validation errors.

    Attributes:
        stage: Pipeline stage that rejected the response (metrics label)
        message: Human-readable error description
        details: Structured error data for logging/metrics
    """

    stage = "unknown"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} | Details: {self.details}"


class JSONExtractionError(ValidationError):
    """The response holds no balanced JSON object. Always retryable."""

    stage = "stage1"

    def __init__(self, message: str, raw_content: str | None = None):
        super().__init__(message, _snippet(raw_content))


class JSONParseError(ValidationError):
    """The extracted block is not a valid JSON object."""

    stage = "stage1"

    def __init__(self, message: str, raw_content: str | None = None, parse_error: str | None = None):
        details = _snippet(raw_content)
        if parse_error:
            details["parse_error"] = parse_error
        super().__init__(message, details)


class SchemaValidationError(ValidationError):
    """
    The parsed object does not match the caller-supplied schema.

    Only the first 10 field errors are kept.
    """

    stage = "stage2"

    def __init__(
        self,
        message: str,
        validation_errors: list[str] | None = None,
        schema_name: str | None = None,
    ):
        details: dict[str, Any] = {}
        if validation_errors:
            details["validation_errors"] = validation_errors[:10]
        if schema_name:
            details["schema_name"] = schema_name
        super().__init__(message, details)
