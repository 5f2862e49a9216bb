"""
Unit tests for Stage 1: JSON extraction and parsing.
"""

import pytest

from elelem.validation.exceptions import JSONExtractionError, JSONParseError
from elelem.validation.stage1_json_parse import Stage1JSONParse


class TestStage1JSONParse:
    """Test Stage 1 JSON extraction and parsing."""

    def setup_method(self):
        """Setup validator for each test."""
        self.validator = Stage1JSONParse()

    def test_valid_json_in_prose(self):
        """Test extraction and parsing of JSON surrounded by prose."""
        extracted, parsed = self.validator.validate('Sure! Here it is: {"capital": "Washington, D.C."} Bye.')

        assert extracted == '{"capital": "Washington, D.C."}'
        assert parsed == {"capital": "Washington, D.C."}

    def test_valid_json_nested(self):
        """Test parsing nested JSON structures."""
        content = '{"data": {"nested": {"deep": [1, 2, 3]}}}'

        _, parsed = self.validator.validate(content)

        assert parsed["data"]["nested"]["deep"] == [1, 2, 3]

    def test_no_json_raises_extraction_error(self):
        """Test that a response without a JSON object fails extraction."""
        with pytest.raises(JSONExtractionError) as exc_info:
            self.validator.extract("I cannot answer that.")

        assert exc_info.value.message == "No JSON available in response"
        assert exc_info.value.details["content_snippet"] == "I cannot answer that."

    def test_empty_content_raises_extraction_error(self):
        """Test that empty content fails extraction."""
        with pytest.raises(JSONExtractionError):
            self.validator.extract("")

    def test_invalid_json_raises_parse_error(self):
        """Test that a balanced but malformed block fails parsing."""
        with pytest.raises(JSONParseError) as exc_info:
            self.validator.validate('{"key": "value",}')

        assert "Failed to parse" in exc_info.value.message
        assert "parse_error" in exc_info.value.details

    def test_parse_rejects_non_object(self):
        """Test that valid JSON that is not an object is rejected."""
        with pytest.raises(JSONParseError) as exc_info:
            self.validator.parse("[1, 2, 3]")

        assert "not a JSON object" in exc_info.value.message

    def test_long_raw_content_is_truncated(self):
        """Test that error details carry a capped snippet of the content."""
        content = "x" * 2000

        with pytest.raises(JSONExtractionError) as exc_info:
            self.validator.extract(content)

        assert len(exc_info.value.details["content_snippet"]) <= 500
