"""Trace correlation for log context.

Wraps a context accessor so records also carry the active OpenTelemetry
trace and span ids, letting log lines be joined with distributed traces.

Example:
    >>> from scopelog import Logger
    >>> log = Logger(get_context=trace_context())
    >>> with tracer.start_as_current_span("handle"):
    ...     log.info("handled")  # context includes trace_id and span_id
"""

from __future__ import annotations

from collections.abc import Callable, Mapping

from opentelemetry import trace

from scopelog.context import current_context

ContextAccessor = Callable[[], Mapping[str, str] | None]


def span_ids() -> dict[str, str]:
    """Hex trace/span ids of the current span, or an empty dict when none is recording."""
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return {}
    return {
        "trace_id": trace.format_trace_id(span_context.trace_id),
        "span_id": trace.format_span_id(span_context.span_id),
    }


def trace_context(base: ContextAccessor = current_context) -> ContextAccessor:
    """Accessor returning ``base()`` overlaid with the current span ids."""

    def accessor() -> Mapping[str, str] | None:
        ctx = base()
        ids = span_ids()
        if not ids:
            return ctx
        return {**(ctx or {}), **ids}

    return accessor
