"""Exceptions raised by scopelog.

Serialization faults never reach callers: ``CircularReferenceError`` is raised
inside the structured walk and caught by the formatter, which then falls back
to the inspection renderer.
"""

from __future__ import annotations


class ScopelogError(Exception):
    """Base class for scopelog errors."""


class CircularReferenceError(ScopelogError, ValueError):
    """A container was reached twice on the same serialization path."""
    
    def __init__(self, key: str, ident: int | None = None) -> None:
        super().__init__(f"Circular reference detected at key {key!r}")
        self.key = key
        self.ident = ident


class ConfigurationError(ScopelogError, ValueError):
    """Invalid explicit configuration (e.g. an unknown formatter name)."""
