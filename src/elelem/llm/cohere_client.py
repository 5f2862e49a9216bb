"""
Cohere generate client.

Cohere's generate endpoint takes a single prompt, so the system and user
prompts are joined with a newline. Token usage comes from the billed units.
"""

from typing import Any, Dict, Optional

import httpx

from elelem.llm.base_client import BaseLLMClient, CostEstimator, ParsedResponse
from elelem.llm.costs import estimate_cohere_cost


class CohereClient(BaseLLMClient):
    """
    Cohere generate client.

    Request:
    {"model": "command", "max_tokens": 100, "temperature": 0, "prompt": "..."}

    Response:
    {
        "generations": [{"text": "...", "finish_reason": "COMPLETE"}],
        "meta": {"billed_units": {"input_tokens": 50, "output_tokens": 20}}
    }
    """

    provider_name = "cohere"

    def __init__(
        self,
        base_url: str = "https://api.cohere.ai/v1",
        api_key: Optional[str] = None,
        timeout: int = 60,
        cost_estimator: Optional[CostEstimator] = estimate_cohere_cost,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(base_url, api_key, timeout, cost_estimator, http_client)

    @property
    def endpoint(self) -> str:
        return "/generate"

    def build_payload(
        self, system_prompt: str, user_prompt: str, options: Dict[str, Any]
    ) -> Dict[str, Any]:
        payload = {key: value for key, value in options.items() if value is not None}
        payload["prompt"] = f"{system_prompt}\n{user_prompt}"
        payload["stream"] = False
        return payload

    def parse_response(self, data: Dict[str, Any], options: Dict[str, Any]) -> ParsedResponse:
        generations = data.get("generations") or []
        generation = generations[0] if generations else {}
        billed_units = (data.get("meta") or {}).get("billed_units") or {}

        return ParsedResponse(
            text=generation.get("text"),
            model=str(options.get("model", "command")),
            prompt_tokens=int(billed_units.get("input_tokens") or 0),
            completion_tokens=int(billed_units.get("output_tokens") or 0),
            finish_reason=generation.get("finish_reason"),
        )
