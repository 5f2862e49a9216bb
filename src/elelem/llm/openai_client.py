"""
OpenAI chat completions client.

POST {base_url}/chat/completions with the merged model options plus a
system and a user message. Token usage comes from the ``usage`` block.
"""

from typing import Any, Dict, Optional

import httpx

from elelem.llm.base_client import BaseLLMClient, CostEstimator, ParsedResponse
from elelem.llm.costs import estimate_openai_cost


class OpenAIClient(BaseLLMClient):
    """
    OpenAI-compatible chat completions client.

    Request:
    {
        "model": "gpt-3.5-turbo",
        "temperature": 0,
        "max_tokens": 100,
        "messages": [
            {"role": "system", "content": "..."},
            {"role": "user", "content": "..."}
        ]
    }

    Response:
    {
        "model": "gpt-3.5-turbo-0613",
        "choices": [{"message": {"role": "assistant", "content": "..."}, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 50, "completion_tokens": 20, "total_tokens": 70}
    }
    """

    provider_name = "openai"

    def __init__(
        self,
        base_url: str = "https://api.openai.com/v1",
        api_key: Optional[str] = None,
        timeout: int = 60,
        cost_estimator: Optional[CostEstimator] = estimate_openai_cost,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(base_url, api_key, timeout, cost_estimator, http_client)

    @property
    def endpoint(self) -> str:
        return "/chat/completions"

    def build_payload(
        self, system_prompt: str, user_prompt: str, options: Dict[str, Any]
    ) -> Dict[str, Any]:
        payload = {key: value for key, value in options.items() if value is not None}
        payload["messages"] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        # Streaming is not supported by the pipeline
        payload["stream"] = False
        return payload

    def parse_response(self, data: Dict[str, Any], options: Dict[str, Any]) -> ParsedResponse:
        choices = data.get("choices") or []
        choice = choices[0] if choices else {}
        message = choice.get("message") or {}
        usage = data.get("usage") or {}

        return ParsedResponse(
            text=message.get("content"),
            model=data.get("model") or str(options.get("model", "unknown")),
            prompt_tokens=usage.get("prompt_tokens") or 0,
            completion_tokens=usage.get("completion_tokens") or 0,
            finish_reason=choice.get("finish_reason"),
        )
