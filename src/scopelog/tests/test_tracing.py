"""Tests for OpenTelemetry trace correlation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from opentelemetry import trace
from opentelemetry.trace import NonRecordingSpan, SpanContext, TraceFlags

from scopelog import JsonFormatter, Logger, log_context, trace_context
from scopelog.tracing import span_ids

if TYPE_CHECKING:
    from conftest import ListSink

TRACE_ID = 0x0AF7651916CD43DD8448EB211C80319C
SPAN_ID = 0x00F067AA0BA902B7


def _span() -> NonRecordingSpan:
    return NonRecordingSpan(SpanContext(trace_id=TRACE_ID, span_id=SPAN_ID, is_remote=False,
                                        trace_flags=TraceFlags(TraceFlags.SAMPLED)))


def test_no_span_means_no_ids() -> None:
    assert span_ids() == {}
    assert trace_context()() is None


def test_span_ids_are_hex() -> None:
    with trace.use_span(_span()):
        assert span_ids() == {"trace_id": "0af7651916cd43dd8448eb211c80319c", "span_id": "00f067aa0ba902b7"}


def test_ids_overlay_ambient_context() -> None:
    accessor = trace_context()
    with log_context(request_id="r-1"), trace.use_span(_span()):
        assert accessor() == {
            "request_id": "r-1",
            "trace_id": "0af7651916cd43dd8448eb211c80319c",
            "span_id": "00f067aa0ba902b7",
        }


def test_logger_records_carry_ids(sink: ListSink) -> None:
    log = Logger(JsonFormatter(compact=True), sink, get_context=trace_context())
    with trace.use_span(_span()):
        log.info("traced")
    assert sink.parsed()["context"]["span_id"] == "00f067aa0ba902b7"
