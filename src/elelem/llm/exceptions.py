"""
Custom exceptions for the provider client layer.

Every provider failure is retryable by the retry engine; the subclasses let
callers and logs tell the failure modes apart.
"""


class LLMClientError(Exception):
    """
    Base exception for all LLM client errors.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class LLMConnectionError(LLMClientError):
    """
    Raised when unable to reach the provider (network errors, DNS failures, ...).
    """
    pass


class LLMTimeoutError(LLMConnectionError):
    """
    Raised when the provider does not answer within the client timeout.
    """
    pass


class LLMRateLimitError(LLMClientError):
    """
    Raised when the provider rate-limits the request (HTTP 429).
    """
    pass


class LLMAuthenticationError(LLMClientError):
    """
    Raised when the provider rejects the credentials (HTTP 401/403).
    """
    pass


class LLMGenerationError(LLMClientError):
    """
    Raised when the provider answers but yields no usable completion.

    Examples:
    - HTTP 4xx/5xx from the completion endpoint
    - Empty choice list or null message content
    - Response body that is not JSON
    """
    pass
