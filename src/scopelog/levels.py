"""Severity levels and threshold resolution.

Severities are ordered by numeric value. ``silent`` is a threshold sentinel:
a logger configured with it emits nothing, and ``Logger.silent()`` never writes.
"""

from __future__ import annotations

from enum import IntEnum


class Severity(IntEnum):
    """Ordered log importance. Higher values are more severe."""
    
    debug = 10
    info = 20
    warn = 30
    error = 40
    fatal = 50
    silent = 100


DEFAULT_SEVERITY = Severity.debug

_BY_VALUE: dict[int, Severity] = {s.value: s for s in Severity}


def resolve_severity(value: object) -> Severity:
    """Map any input to exactly one Severity, defaulting to debug.
    
    Accepts a Severity, its numeric value, or its name. Names are matched
    case-sensitively ("warn" resolves, "WARN" does not).
    
    Example:
        >>> resolve_severity("warn")
        <Severity.warn: 30>
        >>> resolve_severity("nope")
        <Severity.debug: 10>
    """
    if isinstance(value, Severity):
        return value
    if isinstance(value, bool):
        return DEFAULT_SEVERITY
    if isinstance(value, int):
        return _BY_VALUE.get(value, DEFAULT_SEVERITY)
    if isinstance(value, str):
        return Severity.__members__.get(value, DEFAULT_SEVERITY)
    return DEFAULT_SEVERITY
