"""Cycle-safe, human-readable rendering of arbitrary values.

Output follows the conventions of Node's ``util.inspect`` so that structured
and fallback output read the same across services:

    >>> obj = {"name": "circular"}
    >>> obj["self"] = obj
    >>> inspect_value(obj, compact=True)
    "<ref *1> { name: 'circular', self: [Circular *1] }"

This renderer is the fallback of the structured formatter and the value
renderer of the pretty formatter. It does not raise for well-behaved inputs;
a failing property getter renders as ``[Getter]``.
"""

from __future__ import annotations

import dataclasses
import inspect
import os
import re
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from scopelog.formatting.colors import COLORS, NO_COLORS
from scopelog.formatting.exceptions import error_cause, format_stack, safe_str
from scopelog.formatting.members import (
    ADDRESS_TYPES,
    class_properties,
    is_function,
    is_pending,
    public_attributes,
    structured_fields,
)
from scopelog.formatting.sentinels import is_undefined

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z_0-9]*$")

# Strings at least this long may be split on newlines in multi-line mode.
_MIN_LINE_WIDTH = 16

_ESCAPES = {"\n": "\\n", "\t": "\\t", "\r": "\\r", "\b": "\\b", "\f": "\\f", "\v": "\\v", "\\": "\\\\"}

# Regex flags with a single-letter form, in output order.
_REGEX_FLAGS = ((re.IGNORECASE, "i"), (re.MULTILINE, "m"), (re.DOTALL, "s"), (re.VERBOSE, "x"), (re.ASCII, "a"))

_STYLES = {
    "number": "yellow",
    "boolean": "yellow",
    "string": "green",
    "null": "bold",
    "undefined": "gray",
    "special": "cyan",
    "date": "magenta",
    "regexp": "red",
}


@dataclasses.dataclass(frozen=True, slots=True)
class InspectOptions:
    """Rendering options. ``depth=None`` means unbounded."""

    compact: bool = False
    depth: int | None = None
    colors: bool = False
    width: int = 80
    indent: int = 2


def inspect_value(
    value: object,
    *,
    compact: bool = False,
    depth: int | None = None,
    colors: bool = False,
    width: int = 80,
) -> str:
    """Render ``value`` as readable text.

    Args:
        value: Anything
        compact: Single line output when True; one entry per line otherwise
        depth: Nesting level beyond which containers collapse to ``[Object]``
        colors: Emit ANSI color codes
        width: Line width budget used to split long multi-line strings
    """
    opts = InspectOptions(compact=compact, depth=depth, colors=colors, width=width)
    return Inspector(opts).format(value)


def regex_source(pattern: re.Pattern[Any]) -> str:
    """``/source/flags`` for a compiled pattern."""
    source = pattern.pattern if isinstance(pattern.pattern, str) else pattern.pattern.decode("latin-1")
    flags = "".join(letter for flag, letter in _REGEX_FLAGS if pattern.flags & flag)
    return f"/{source}/{flags}"


def quote(text: str) -> str:
    """Quote a string the way inspect output shows it: single quotes unless the text holds one."""
    q = "'"
    if "'" in text:
        if '"' not in text:
            q = '"'
        elif "`" not in text:
            q = "`"
    out = []
    for ch in text:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch == q:
            out.append("\\" + ch)
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\x{ord(ch):02X}")
        else:
            out.append(ch)
    return q + "".join(out) + q


def _function_name(fn: object) -> str:
    return getattr(fn, "__name__", None) or type(fn).__name__


class Inspector:
    """Single-use renderer; tracks the current path to detect cycles."""

    __slots__ = ("_opts", "_c", "_path", "_refs")

    def __init__(self, opts: InspectOptions) -> None:
        self._opts = opts
        self._c = COLORS if opts.colors else NO_COLORS
        self._path: list[int] = []
        self._refs: dict[int, int] = {}

    def format(self, value: object) -> str:
        return self._value(value, 0)

    def _style(self, text: str, kind: str) -> str:
        code = self._c[_STYLES[kind]]
        return f"{code}{text}{self._c['reset']}" if code else text

    # ─────────────────────────────────────────────────────────────────────
    # Scalars
    # ─────────────────────────────────────────────────────────────────────

    def _value(self, value: object, level: int) -> str:
        if value is None:
            return self._style("null", "null")
        if is_undefined(value):
            return self._style("undefined", "undefined")
        if isinstance(value, bool):
            return self._style("true" if value else "false", "boolean")
        if isinstance(value, Enum):
            return self._style(f"{type(value).__name__}.{value.name}", "special")
        if isinstance(value, (int, float, Decimal)):
            return self._style(str(value), "number")
        if isinstance(value, str):
            return self._string(value, level)
        if isinstance(value, (bytes, bytearray)):
            return self._style(repr(bytes(value)), "string")
        if isinstance(value, os.PathLike):
            return self._style(quote(os.fsdecode(value)), "string")
        if isinstance(value, ADDRESS_TYPES):
            return self._style(quote(str(value)), "string")
        if isinstance(value, (datetime, date, time)):
            return self._style(value.isoformat(), "date")
        if isinstance(value, re.Pattern):
            return self._style(regex_source(value), "regexp")
        if inspect.isclass(value):
            return self._style(f"[class {value.__name__}]", "special")
        if is_function(value):
            return self._style(f"[Function: {_function_name(value)}]", "special")
        if is_pending(value):
            return self._awaitable(value, level)
        return self._container(value, level)

    def _string(self, text: str, level: int) -> str:
        opts = self._opts
        indentation = level * opts.indent
        if (not opts.compact and "\n" in text and len(text) > _MIN_LINE_WIDTH
                and len(text) > opts.width - indentation - 4):
            lines = [line for line in re.split(r"(?<=\n)", text) if line]
            joiner = " +\n" + " " * (indentation + opts.indent)
            return joiner.join(self._style(quote(line), "string") for line in lines)
        return self._style(quote(text), "string")

    def _awaitable(self, value: Any, level: int) -> str:
        name = type(value).__name__
        done = getattr(value, "done", None)
        if callable(done) and done() and not (hasattr(value, "cancelled") and value.cancelled()):
            exc = value.exception()
            if exc is not None:
                return f"{name} {{ <rejected> {self._value(exc, level + 1)} }}"
            return f"{name} {{ {self._value(value.result(), level + 1)} }}"
        return f"{name} {{ {self._style('<pending>', 'special')} }}"

    # ─────────────────────────────────────────────────────────────────────
    # Containers
    # ─────────────────────────────────────────────────────────────────────

    def _container(self, value: object, level: int) -> str:
        key = id(value)
        if key in self._path:
            ref = self._refs.setdefault(key, len(self._refs) + 1)
            return self._style(f"[Circular *{ref}]", "special")
        depth = self._opts.depth
        if depth is not None and level > depth:
            return self._style(f"[{_collapsed_name(value)}]", "special")

        self._path.append(key)
        try:
            out = self._body(value, level)
        finally:
            self._path.pop()

        if key in self._refs:
            out = f"{self._style(f'<ref *{self._refs[key]}>', 'special')} {out}"
        return out

    def _body(self, value: object, level: int) -> str:
        if isinstance(value, BaseException):
            return self._exception(value, level)
        if isinstance(value, Mapping):
            prefix = "" if type(value) is dict else type(value).__name__
            return self._wrap(prefix, "{", "}", self._mapping_entries(value.items(), level), level)
        if isinstance(value, list):
            return self._wrap("", "[", "]", [self._value(v, level + 1) for v in value], level)
        if isinstance(value, tuple):
            return self._wrap(f"tuple({len(value)})", "[", "]", [self._value(v, level + 1) for v in value], level)
        if isinstance(value, (set, frozenset)):
            prefix = f"{'Set' if type(value) is set else type(value).__name__}({len(value)})"
            return self._wrap(prefix, "{", "}", [self._value(v, level + 1) for v in value], level)

        fields = structured_fields(value)
        if fields is not None:
            return self._wrap(type(value).__name__, "{", "}", self._mapping_entries(fields.items(), level), level)

        entries = self._object_entries(value, level)
        if not entries and type(value).__repr__ is not object.__repr__:
            return repr(value)
        return self._wrap(type(value).__name__, "{", "}", entries, level)

    def _object_entries(self, value: object, level: int) -> list[str]:
        attrs = public_attributes(value)
        entries = self._mapping_entries(attrs.items(), level)
        for name in class_properties(type(value)):
            if name in attrs:
                continue
            try:
                item = getattr(value, name)
            except Exception:
                entries.append(f"{self._key(name)}: {self._style('[Getter]', 'special')}")
            else:
                entries.append(f"{self._key(name)}: {self._value(item, level + 1)}")
        return entries

    def _exception(self, error: BaseException, level: int) -> str:
        if self._opts.compact:
            message = safe_str(error)
            head = f"[{type(error).__name__}: {message}]" if message else f"[{type(error).__name__}]"
        else:
            pad = " " * (level * self._opts.indent)
            head = f"\n{pad}".join(format_stack(error).split("\n"))

        attrs = {k: v for k, v in public_attributes(error).items() if k != "cause"}
        entries = self._mapping_entries(attrs.items(), level)
        has_cause, cause = error_cause(error)
        if has_cause:
            entries.append(f"[cause]: {self._value(cause, level + 1)}")
        return f"{head} {self._wrap('', '{', '}', entries, level)}" if entries else head

    def _mapping_entries(self, items: Any, level: int) -> list[str]:
        return [f"{self._key(k)}: {self._value(v, level + 1)}" for k, v in items]

    def _key(self, key: object) -> str:
        if isinstance(key, str):
            return key if _IDENTIFIER.match(key) else self._style(quote(key), "string")
        return self._value(key, 0)

    def _wrap(self, prefix: str, open_: str, close: str, entries: list[str], level: int) -> str:
        head = f"{prefix} {open_}" if prefix else open_
        if not entries:
            return f"{head}{close}"
        if self._opts.compact:
            return f"{head} {', '.join(entries)} {close}"
        pad = " " * (level * self._opts.indent)
        inner = pad + " " * self._opts.indent
        return f"{head}\n{inner}" + f",\n{inner}".join(entries) + f"\n{pad}{close}"


def _collapsed_name(value: object) -> str:
    if isinstance(value, (list, tuple, set, frozenset)):
        return "Array"
    if type(value) is dict:
        return "Object"
    return type(value).__name__
