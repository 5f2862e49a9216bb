"""
Unit tests for CompositeSpanExporter.
"""

from unittest.mock import MagicMock

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor, SpanExporter, SpanExportResult
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from elelem.tracing.exporter import CompositeSpanExporter


def failing_exporter(result=SpanExportResult.FAILURE, side_effect=None):
    exporter = MagicMock(spec=SpanExporter)
    exporter.export.return_value = result
    exporter.export.side_effect = side_effect
    exporter.force_flush.return_value = True
    return exporter


class TestCompositeSpanExporter:
    """Test fan-out of finished spans."""

    def test_every_child_receives_spans(self):
        first = InMemorySpanExporter()
        second = InMemorySpanExporter()
        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(CompositeSpanExporter([first, second])))

        with provider.get_tracer("test").start_as_current_span("work"):
            pass

        assert [s.name for s in first.get_finished_spans()] == ["work"]
        assert [s.name for s in second.get_finished_spans()] == ["work"]

    def test_success_when_all_succeed(self):
        composite = CompositeSpanExporter([InMemorySpanExporter(), InMemorySpanExporter()])

        assert composite.export([]) is SpanExportResult.SUCCESS

    def test_empty_composite_succeeds(self):
        assert CompositeSpanExporter().export([]) is SpanExportResult.SUCCESS

    def test_failure_when_any_fails(self):
        healthy = InMemorySpanExporter()
        composite = CompositeSpanExporter([failing_exporter(), healthy])

        assert composite.export([]) is SpanExportResult.FAILURE

    def test_raising_child_does_not_stop_others(self):
        raising = failing_exporter(side_effect=RuntimeError("collector down"))
        after = failing_exporter(result=SpanExportResult.SUCCESS)
        composite = CompositeSpanExporter([raising, after])

        assert composite.export([]) is SpanExportResult.FAILURE
        after.export.assert_called_once_with([])

    def test_shutdown_and_flush_reach_all_children(self):
        children = [failing_exporter(), failing_exporter()]
        composite = CompositeSpanExporter(children)

        assert composite.force_flush(1000) is True
        composite.shutdown()

        for child in children:
            child.force_flush.assert_called_once_with(1000)
            child.shutdown.assert_called_once()
