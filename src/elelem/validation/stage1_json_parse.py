"""
Stage 1: JSON extraction and parsing.

Pull the last JSON object out of the raw model response and parse it into
a Python dict. Any failure here fails the attempt.
"""

import json

import structlog

from elelem.monitoring.metrics import validation_failures_total
from .exceptions import JSONExtractionError, JSONParseError
from .extraction import extract_last_json

logger = structlog.get_logger(__name__)


class Stage1JSONParse:
    """
    Stage 1 validator: extract the last JSON object and parse it.
    """

    def extract(self, content: str) -> str:
        """
        Extract the last balanced JSON object from the response text.

        Raises:
            JSONExtractionError: If the response holds no JSON object
        """
        extracted = extract_last_json(content) if content else None
        if extracted is None:
            validation_failures_total.labels(
                stage="stage1", error_type="no_json_found"
            ).inc()
            raise JSONExtractionError(
                "No JSON available in response",
                raw_content=content,
            )
        return extracted

    def parse(self, extracted: str) -> dict:
        """
        Parse extracted JSON text into a dict.

        Raises:
            JSONParseError: If the text is not a valid JSON object
        """
        try:
            parsed = json.loads(extracted)
        except json.JSONDecodeError as e:
            validation_failures_total.labels(
                stage="stage1", error_type="json_decode_error"
            ).inc()
            raise JSONParseError(
                f"Failed to parse LLM response as JSON: {e.msg}",
                raw_content=extracted,
                parse_error=f"{e.msg} at line {e.lineno} col {e.colno}",
            ) from e

        if not isinstance(parsed, dict):
            validation_failures_total.labels(
                stage="stage1", error_type="not_json_object"
            ).inc()
            raise JSONParseError(
                f"LLM response is not a JSON object (got {type(parsed).__name__})",
                raw_content=extracted,
                parse_error=f"Expected dict, got {type(parsed).__name__}",
            )

        logger.debug("Parsed response JSON", top_level_keys=len(parsed))
        return parsed

    def validate(self, content: str) -> tuple[str, dict]:
        """
        Extract and parse in one step.

        Returns:
            Tuple of (extracted JSON text, parsed dict)
        """
        extracted = self.extract(content)
        return extracted, self.parse(extracted)
