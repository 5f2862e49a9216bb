"""
Stage 2: Schema validation.

Validate the parsed dict against the caller-supplied schema and return the
typed value. Two schema flavours are supported:

- ModelSchema: a pydantic model class, validated with model_validate
- JSONSchema: a JSON Schema document, validated with jsonschema (Draft 7)
"""

import random
from typing import Any, Generic, Protocol, TypeVar, Union, runtime_checkable

import structlog
from faker import Faker
from jsf import JSF
from jsonschema import Draft7Validator
from polyfactory.factories.pydantic_factory import ModelFactory
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from elelem.monitoring.metrics import validation_failures_total
from .exceptions import SchemaValidationError

logger = structlog.get_logger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

# Fixed so format instructions, and the cache keys built from them, are stable
EXAMPLE_SEED = 11


@runtime_checkable
class ResponseSchema(Protocol[T]):
    """
    Validator interface for model output.

    ``validate`` returns the typed value or raises SchemaValidationError.
    ``json_schema`` and ``example`` describe the expected shape to formatters;
    both must be deterministic so cache fingerprints stay stable across runs.
    """

    name: str

    def json_schema(self) -> dict[str, Any]:
        ...

    def example(self) -> Any:
        ...

    def validate(self, data: Any) -> T:
        ...

    def is_valid(self, data: Any) -> bool:
        ...


class ModelSchema(Generic[M]):
    """Schema backed by a pydantic model class."""

    def __init__(self, model: type[M]):
        self.model = model
        self.name = model.__name__

    def json_schema(self) -> dict[str, Any]:
        return self.model.model_json_schema()

    def example(self) -> Any:
        """Seeded polyfactory instance of the model, dumped to JSON types."""
        factory = ModelFactory.create_factory(self.model)
        factory.seed_random(EXAMPLE_SEED)
        return factory.build().model_dump(mode="json")

    def validate(self, data: Any) -> M:
        try:
            return self.model.model_validate(data)
        except PydanticValidationError as e:
            validation_failures_total.labels(
                stage="stage2", error_type="schema_validation_error"
            ).inc()
            error_messages = [
                f"{'.'.join(str(loc) for loc in err['loc']) or 'root'}: {err['msg']}"
                for err in e.errors()
            ]
            raise SchemaValidationError(
                f"Invalid schema returned from LLM: {len(e.errors())} error(s)",
                validation_errors=error_messages,
                schema_name=self.name,
            ) from e

    def is_valid(self, data: Any) -> bool:
        try:
            self.model.model_validate(data)
        except PydanticValidationError:
            return False
        return True

    def __repr__(self) -> str:
        return f"ModelSchema({self.name})"


class JSONSchema:
    """Schema backed by a JSON Schema document; validated values are returned as-is."""

    def __init__(self, schema: dict[str, Any], name: str | None = None):
        Draft7Validator.check_schema(schema)
        self.schema = schema
        self.name = name or schema.get("title", "JSONSchema")
        self._validator = Draft7Validator(schema)

    def json_schema(self) -> dict[str, Any]:
        return self.schema

    def example(self) -> Any:
        """
        Seeded fake document generated from the schema by jsf.

        jsf draws from the global ``random`` module and the shared Faker
        generator; the global random state is restored afterwards.
        """
        state = random.getstate()
        try:
            random.seed(EXAMPLE_SEED)
            Faker.seed(EXAMPLE_SEED)
            return JSF(self.schema, allow_none_optionals=0.0).generate()
        finally:
            random.setstate(state)

    def validate(self, data: Any) -> Any:
        errors = list(self._validator.iter_errors(data))

        if errors:
            validation_failures_total.labels(
                stage="stage2", error_type="schema_validation_error"
            ).inc()
            error_messages = []
            for error in errors[:10]:  # Limit to first 10 errors
                path = ".".join(str(p) for p in error.path) if error.path else "root"
                error_messages.append(f"{path}: {error.message}")

            raise SchemaValidationError(
                f"Invalid schema returned from LLM: {len(errors)} error(s)",
                validation_errors=error_messages,
                schema_name=self.name,
            )

        logger.debug("Validated against JSON Schema", schema_name=self.name)
        return data

    def is_valid(self, data: Any) -> bool:
        return self._validator.is_valid(data)

    def __repr__(self) -> str:
        return f"JSONSchema({self.name})"


SchemaLike = Union[ResponseSchema, type[BaseModel], dict]


def as_schema(schema: SchemaLike) -> ResponseSchema:
    """
    Normalise a schema argument.

    Accepts a pydantic model class, a JSON Schema dict, or anything already
    implementing ResponseSchema.
    """
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return ModelSchema(schema)
    if isinstance(schema, dict):
        return JSONSchema(schema)
    if isinstance(schema, ResponseSchema):
        return schema
    raise TypeError(f"Unsupported schema type: {type(schema).__name__}")
