"""
Abstract base client for LLM completion providers.

The generation pipeline treats a provider as an opaque call
``(system prompt, user prompt, options) -> Completion`` that may fail.
Subclasses only describe the provider's wire format; HTTP transport, error
mapping, usage/cost extraction and metrics live here.
"""

import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field

from elelem.llm.exceptions import (
    LLMAuthenticationError,
    LLMConnectionError,
    LLMGenerationError,
    LLMRateLimitError,
    LLMTimeoutError,
)
from elelem.models.usage import UsageRecord
from elelem.monitoring.metrics import llm_cost_usd_total, llm_latency_seconds, llm_tokens_total

logger = structlog.get_logger(__name__)

CostEstimator = Callable[[UsageRecord, str], float]


class Completion(BaseModel):
    """
    Standardized provider response.

    Usage carries the token counts reported by the provider and the
    estimated cost; the pipeline adds it to its ledgers.
    """
    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Generated text")
    model: str = Field(..., description="Model that produced the completion")
    usage: UsageRecord = Field(default_factory=UsageRecord, description="Tokens and cost of this call")
    finish_reason: Optional[str] = Field(default=None, description="Why generation stopped")
    latency_ms: int = Field(default=0, ge=0, description="Round-trip latency in milliseconds")


class ParsedResponse(BaseModel):
    """Provider-agnostic fields pulled out of a raw response body."""

    text: Optional[str]
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    finish_reason: Optional[str] = None


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM completion clients.

    Responsibilities:
    - Send completion requests to the provider over HTTP
    - Map transport/HTTP failures onto LLMClientError subclasses
    - Extract text, token usage and estimated cost

    Does NOT handle:
    - Prompt formatting (formatters)
    - Response validation (validation package)
    - Retries (retry engine)
    """

    provider_name: str = "base"

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: int = 60,
        cost_estimator: Optional[CostEstimator] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize base client.

        Args:
            base_url: Provider API root (e.g. https://api.openai.com/v1)
            api_key: Bearer token sent with every request
            timeout: Request timeout in seconds
            cost_estimator: ``(usage, model) -> cost_usd``; cost is 0 when omitted
            http_client: Pre-built httpx client (tests, custom transports)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.cost_estimator = cost_estimator
        self._client: Optional[httpx.AsyncClient] = http_client

        logger.info(
            "Initialized LLM client",
            client_class=self.__class__.__name__,
            base_url=self.base_url,
            timeout=timeout,
        )

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """Path of the completion endpoint, relative to base_url."""

    @abstractmethod
    def build_payload(
        self, system_prompt: str, user_prompt: str, options: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Provider request body for one completion."""

    @abstractmethod
    def parse_response(self, data: Dict[str, Any], options: Dict[str, Any]) -> ParsedResponse:
        """Pull text, model and token counts out of the provider response body."""

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers=self._headers(),
            )
            logger.debug("Created new httpx AsyncClient", provider=self.provider_name)
        return self._client

    async def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        client = await self._get_client()
        try:
            response = await client.post(self.endpoint, json=payload, headers=self._headers())
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            raise LLMTimeoutError(
                f"Request timeout after {self.timeout}s",
                details={"provider": self.provider_name, "timeout": self.timeout},
            ) from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            details = {"provider": self.provider_name, "status": status_code, "error": e.response.text[:500]}
            if status_code == 429:
                raise LLMRateLimitError(f"{self.provider_name} rate limit exceeded", details=details) from e
            if status_code in (401, 403):
                raise LLMAuthenticationError(f"{self.provider_name} rejected credentials", details=details) from e
            raise LLMGenerationError(f"{self.provider_name} HTTP error: {status_code}", details=details) from e
        except httpx.TransportError as e:
            raise LLMConnectionError(
                f"Network error: {e}",
                details={"provider": self.provider_name, "error_type": type(e).__name__},
            ) from e
        except ValueError as e:
            raise LLMGenerationError(
                f"Invalid JSON response from {self.provider_name}",
                details={"parse_error": str(e)},
            ) from e

    async def complete(
        self, system_prompt: str, user_prompt: str, options: Dict[str, Any]
    ) -> Completion:
        """
        Request one completion.

        Args:
            system_prompt: System prompt, already including the format instructions
            user_prompt: User prompt
            options: Merged model options (model, temperature, max_tokens, ...)

        Returns:
            Completion with text, model, usage and latency

        Raises:
            LLMConnectionError: Network/timeout errors
            LLMRateLimitError: Provider throttled the request
            LLMAuthenticationError: Credentials rejected
            LLMGenerationError: No usable completion in the response
        """
        model = str(options.get("model", "unknown"))
        start_time = time.time()

        logger.info(
            "Sending completion request",
            provider=self.provider_name,
            model=model,
            system_prompt_length=len(system_prompt),
            user_prompt_length=len(user_prompt),
            temperature=options.get("temperature"),
        )

        try:
            data = await self._post(self.build_payload(system_prompt, user_prompt, options))
        except Exception:
            llm_latency_seconds.labels(model=model, success="false").observe(time.time() - start_time)
            raise

        parsed = self.parse_response(data, options)
        latency_ms = int((time.time() - start_time) * 1000)
        llm_latency_seconds.labels(model=parsed.model, success="true").observe(latency_ms / 1000.0)

        if not parsed.text:
            raise LLMGenerationError(
                f"No completion in {self.provider_name} response",
                details={"model": parsed.model, "finish_reason": parsed.finish_reason},
            )

        usage = UsageRecord.from_tokens(parsed.prompt_tokens, parsed.completion_tokens)
        if self.cost_estimator is not None:
            usage.cost_usd = self.cost_estimator(usage, parsed.model)

        llm_tokens_total.labels(model=parsed.model, token_type="prompt").inc(usage.prompt_tokens)
        llm_tokens_total.labels(model=parsed.model, token_type="completion").inc(usage.completion_tokens)
        llm_cost_usd_total.labels(model=parsed.model).inc(usage.cost_usd)

        logger.info(
            "Completion received",
            provider=self.provider_name,
            model=parsed.model,
            latency_ms=latency_ms,
            prompt_tokens=usage.prompt_tokens,
            completion_tokens=usage.completion_tokens,
            cost_usd=usage.cost_usd,
            finish_reason=parsed.finish_reason,
        )

        return Completion(
            text=parsed.text,
            model=parsed.model,
            usage=usage,
            finish_reason=parsed.finish_reason,
            latency_ms=latency_ms,
        )

    async def close(self) -> None:
        """Close the HTTP client connection."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed LLM client connection", provider=self.provider_name)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"provider={self.provider_name}, "
            f"base_url={self.base_url})"
        )
