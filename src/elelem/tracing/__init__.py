"""
Tracing helpers on top of the OpenTelemetry API.

- attributes.py: attribute keys and span helpers used by the pipeline
- exporter.py: CompositeSpanExporter (requires opentelemetry-sdk)

Tracer provider setup is left to the application.
"""

from elelem.tracing.attributes import (
    ConfigAttributes,
    get_tracer,
    mark_error,
    set_config_attributes,
    set_usage_attributes,
)

__all__ = [
    "ConfigAttributes",
    "get_tracer",
    "mark_error",
    "set_config_attributes",
    "set_usage_attributes",
]
