"""The record handed from the logger to a formatter."""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from scopelog.formatting.sentinels import UNDEFINED
from scopelog.levels import Severity


@dataclass(frozen=True, slots=True)
class LogRecord:
    """Immutable log record built fresh for every emitted call.
    
    ``data`` is UNDEFINED when the call carried neither data nor scope, and
    ``context`` is None when no ambient context was active.
    """
    
    level: Severity
    message: str
    data: Any = UNDEFINED
    context: Mapping[str, str] | None = None
    timestamp: float = field(default_factory=time.time)
    
    def to_dict(self) -> dict[str, Any]:
        """Structured form with keys in the order level, message, data, context."""
        out: dict[str, Any] = {"level": int(self.level), "message": self.message}
        if self.data is not UNDEFINED:
            out["data"] = self.data
        if self.context:
            out["context"] = dict(self.context)
        return out
    
    @property
    def ts_iso(self) -> str:
        """ISO-8601 UTC timestamp with milliseconds, e.g. 2024-01-03T10:30:45.123Z."""
        return datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
