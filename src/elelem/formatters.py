"""
Prompt formatters.

A formatter turns a response schema into instructions appended to the
system prompt. Formatters are pure and deterministic: their output is part
of the cache key, so the same schema must always yield the same text.
"""

import json
from typing import Any, Callable

from elelem.validation.stage2_schema import ResponseSchema

ElelemFormatter = Callable[[ResponseSchema], str]

_JSON_SCHEMA_PREAMBLE = """You must format your output as a JSON value that adheres to a given "JSON Schema" instance.

"JSON Schema" is a declarative language that allows you to annotate and validate JSON documents.

For example, the example "JSON Schema" instance {{"properties": {{"foo": {{"description": "a list of test words", "type": "array", "items": {{"type": "string"}}}}}}, "required": ["foo"]}}}}
would match an object with one required property, "foo". The "type" property specifies "foo" must be an "array", and the "description" property semantically describes it as "a list of test words". The items within "foo" must be strings.
Thus, the object {{"foo": ["bar", "baz"]}} is a well-formatted instance of this example "JSON Schema". The object {{"properties": {{"foo": ["bar", "baz"]}}}} is not well-formatted.

Your output will be parsed and type-checked according to the provided schema instance, so make sure all fields in your output match the schema exactly and there are no trailing commas!"""


def _dumps(value: Any) -> str:
    return json.dumps(value, sort_keys=True, ensure_ascii=False)


def example_instance(schema: ResponseSchema) -> Any:
    """Seeded example value that satisfies the schema."""
    return schema.example()


def langchain_json_schema_formatter(schema: ResponseSchema) -> str:
    """JSON Schema instructions in the style of LangChain's output parser."""
    return f"""{_JSON_SCHEMA_PREAMBLE}

Here is the JSON Schema instance your output must adhere to. Include the enclosing markdown codeblock:
```json
{_dumps(schema.json_schema())}
```
"""


def example_formatter(schema: ResponseSchema) -> str:
    """Show the model a single example instance of the expected output."""
    return f"""
You must format your output as valid JSON in the following format:
{_dumps(example_instance(schema))}
""".strip()


def json_schema_and_example_formatter(schema: ResponseSchema) -> str:
    """JSON Schema instructions followed by an example instance."""
    return f"""{_JSON_SCHEMA_PREAMBLE}

Here is the JSON Schema instance your output must adhere to::
```
{_dumps(schema.json_schema())}
```

Example:
```
{_dumps(example_instance(schema))}
```""".strip()


def null_formatter(schema: ResponseSchema) -> str:
    """No format instructions; the system prompt is used as-is (plus a newline)."""
    return ""
