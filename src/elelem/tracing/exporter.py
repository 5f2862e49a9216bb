"""
Composite span exporter.

Fans every batch of finished spans out to several exporters, e.g. an OTLP
exporter for the tracing backend plus a console exporter while debugging.
"""

from typing import Sequence

import structlog
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult

logger = structlog.get_logger(__name__)


class CompositeSpanExporter(SpanExporter):
    """
    SpanExporter that forwards to a list of child exporters.

    Export succeeds only if every child succeeds. A child that raises is
    logged and counted as a failure; the remaining children still export.
    """

    def __init__(self, span_exporters: Sequence[SpanExporter] | None = None):
        self._span_exporters = list(span_exporters or [])

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        failed = False
        for exporter in self._span_exporters:
            try:
                result = exporter.export(spans)
            except Exception as e:
                logger.warning(
                    "Span exporter raised",
                    exporter=type(exporter).__name__,
                    error=str(e),
                )
                failed = True
                continue
            if result is not SpanExportResult.SUCCESS:
                failed = True
        return SpanExportResult.FAILURE if failed else SpanExportResult.SUCCESS

    def shutdown(self) -> None:
        for exporter in self._span_exporters:
            exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return all(exporter.force_flush(timeout_millis) for exporter in self._span_exporters)
