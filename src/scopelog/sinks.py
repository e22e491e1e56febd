"""Output sinks. A sink receives one finished, formatted text per record."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Protocol, TextIO, runtime_checkable


@runtime_checkable
class LogSink(Protocol):
    """Destination for formatted log text."""
    
    def write(self, text: str) -> None: ...


@dataclass(slots=True)
class ConsoleSink:
    """Writes each record as one line to a text stream (stdout by default).
    
    The default stream is looked up on every write so that redirection of
    ``sys.stdout`` (pytest's capsys, contextlib.redirect_stdout) is honored.
    """
    
    stream: TextIO | None = None
    
    def write(self, text: str) -> None:
        out = self.stream or sys.stdout
        out.write(text + "\n")
        out.flush()


@dataclass(slots=True)
class NullSink:
    """Discards everything."""
    
    def write(self, text: str) -> None:
        pass
