"""Human-readable colored formatter for local development.

Format:
    2024-01-03T10:30:45.123Z  INFO  request handled
        context.request_id: 'r-1'
        data.status: 200

Wraps a JsonFormatter: ``render`` and ``format_error`` are delegated to it
unchanged, only the record layout differs.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from scopelog.formatting.colors import paint
from scopelog.formatting.inspector import inspect_value
from scopelog.formatting.sentinels import is_undefined
from scopelog.formatting.structured import JsonFormatter
from scopelog.levels import Severity

if TYPE_CHECKING:
    from scopelog.record import LogRecord

TAB = " " * 4

# Level -> (color codes, label); labels are padded to equal width.
LEVEL_STYLES: dict[Severity, tuple[tuple[str, ...], str]] = {
    Severity.debug: (("bg_blue", "black"), "DEBUG?"),
    Severity.info: (("bg_green", "black"), " INFO "),
    Severity.warn: (("bg_yellow", "black"), " WARN "),
    Severity.error: (("bg_red", "black"), "ERROR!"),
    Severity.fatal: (("bg_red", "black"), "FATAL!"),
    Severity.silent: ((), ""),
}


def indent(text: str, times: int = 1) -> str:
    pad = TAB * times
    return "\n".join(f"{pad}{line}" for line in text.split("\n"))


@dataclass(frozen=True, slots=True)
class PrettyFormatter:
    """Colorized multi-line record layout. ``colors`` is fixed at construction."""

    colors: bool = True
    base: JsonFormatter = field(default_factory=JsonFormatter)

    def render(self, value: object) -> str:
        return self.base.render(value)

    def format_error(self, key: str, error: BaseException) -> dict[str, Any]:
        return self.base.format_error(key, error)

    def format_record(self, record: LogRecord) -> str:
        head = " ".join((
            paint(record.ts_iso, "gray", enabled=self.colors),
            self.format_level(record.level),
            paint(record.message, "blue", enabled=self.colors),
        ))
        parts = [head]
        if record.context:
            parts.append(self._entries("context.", record.context))
        if not is_undefined(record.data) and record.data is not None:
            if isinstance(record.data, Mapping):
                if record.data:
                    parts.append(self._entries("data.", record.data))
            else:
                parts.append(indent(self.inspect(record.data)))
        return "\n".join(parts)

    def format_level(self, level: Severity) -> str:
        codes, label = LEVEL_STYLES.get(level, ((), level.name.upper()))
        return paint(f" {label} ", *codes, enabled=self.colors)

    def inspect(self, value: object) -> str:
        try:
            return inspect_value(value, compact=False, depth=None, colors=self.colors, width=80)
        except Exception:
            return self.base.render_fallback(value)

    def _entries(self, prefix: str, items: Mapping[str, Any]) -> str:
        label = paint(prefix, "dim", enabled=self.colors)
        return indent("\n".join(f"{label}{key}: {self.inspect(value)}" for key, value in items.items()))
