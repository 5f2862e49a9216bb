"""
Response validation (extraction + 2 stages).

- extraction.py: last balanced JSON object in free-form text
- stage1_json_parse.py: extraction and JSON parsing (hard fail)
- stage2_schema.py: validation against a pydantic model or JSON Schema (hard fail)
"""

from .exceptions import (
    JSONExtractionError,
    JSONParseError,
    SchemaValidationError,
    ValidationError,
)
from .extraction import extract_last_json
from .stage1_json_parse import Stage1JSONParse
from .stage2_schema import JSONSchema, ModelSchema, ResponseSchema, SchemaLike, as_schema

__all__ = [
    "extract_last_json",
    "Stage1JSONParse",
    "ResponseSchema",
    "ModelSchema",
    "JSONSchema",
    "SchemaLike",
    "as_schema",
    # Exceptions
    "ValidationError",
    "JSONExtractionError",
    "JSONParseError",
    "SchemaValidationError",
]
