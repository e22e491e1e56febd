"""Structured (JSON) formatting with a readable fallback.

Composite values are walked into JSON-native data, substituting values JSON
cannot express, then encoded with orjson. Anything that cannot be walked
(cycles, failing getters, unencodable leaves) falls back to the inspection
renderer, so ``render`` never raises.

Quick Start:
    >>> fmt = JsonFormatter(compact=True)
    >>> fmt.render({"big": 2**60, "missing": UNDEFINED})
    '{"big":"1152921504606846976","missing":"FakeValue { undefined }"}'
"""

from __future__ import annotations

import inspect
import logging
import os
import re
from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from uuid import UUID

import orjson
from pydantic import BaseModel

from scopelog.errors import CircularReferenceError
from scopelog.formatting.exceptions import error_to_dict, format_stack, safe_str
from scopelog.formatting.inspector import inspect_value, regex_source
from scopelog.formatting.members import (
    ADDRESS_TYPES,
    class_properties,
    is_function,
    is_pending,
    public_attributes,
    structured_fields,
)
from scopelog.formatting.sentinels import is_undefined

if TYPE_CHECKING:
    from scopelog.record import LogRecord

logger = logging.getLogger("scopelog.formatting")

# Largest integer a double represents exactly; larger ones are emitted as strings.
MAX_SAFE_INTEGER = 2**53 - 1

UNDEFINED_TEXT = "FakeValue { undefined }"

# Depth used by the compact inspection fallback; multi-line fallback is unbounded.
COMPACT_INSPECT_DEPTH = 2

# Ids on the path of the enclosing walk; walks nested under format_error start from it.
_render_path: ContextVar[tuple[int, ...]] = ContextVar("scopelog_render_path", default=())


def awaitable_warning(key: str) -> str:
    return f"Awaitable {{ you tried to log an awaitable at {key}. try awaiting it first }}"


# ─────────────────────────────────────────────────────────────────────────────
# Formatter Protocol
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class LogFormatter(Protocol):
    """Turns values and records into text."""

    def render(self, value: object) -> str: ...
    def format_error(self, key: str, error: BaseException) -> dict[str, Any]: ...
    def format_record(self, record: LogRecord) -> str: ...


# ─────────────────────────────────────────────────────────────────────────────
# Value Walk
# ─────────────────────────────────────────────────────────────────────────────


def is_composite(value: object) -> bool:
    """False for values rendered by plain stringification."""
    if value is None or is_undefined(value) or isinstance(value, (str, bool, int, float, Decimal)):
        return False
    return not (inspect.isclass(value) or is_function(value))


def render_scalar(value: object) -> str:
    if value is None:
        return "null"
    if is_undefined(value):
        return "undefined"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _key_text(key: object) -> str:
    return key if isinstance(key, str) else render_scalar(key)


def _drop(value: object) -> bool:
    # JSON has no functions; they vanish from objects and become null in arrays.
    return inspect.isclass(value) or is_function(value)


class JsonWalker:
    """Converts one value tree into orjson-native data.

    Raises CircularReferenceError when a container reappears on its own path;
    exceptions from property getters or ``to_dict()`` propagate unchanged.
    """

    __slots__ = ("_format_error", "_path")

    def __init__(self, format_error: Any) -> None:
        self._format_error = format_error
        self._path: list[int] = list(_render_path.get())

    def walk(self, value: object, key: str = "") -> Any:
        if value is None or isinstance(value, (str, bool, float)):
            return value
        if isinstance(value, Enum):
            return value
        if isinstance(value, int):
            return str(value) if abs(value) > MAX_SAFE_INTEGER else value
        if is_undefined(value):
            return UNDEFINED_TEXT
        if isinstance(value, (datetime, date, time, UUID)):
            return value
        if isinstance(value, Decimal):
            return str(value)
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode("utf-8", "backslashreplace")
        if isinstance(value, os.PathLike):
            return os.fsdecode(value)
        if isinstance(value, ADDRESS_TYPES):
            return str(value)
        if isinstance(value, re.Pattern):
            return f"Regexp {{ {regex_source(value)} }}"
        if is_pending(value):
            return awaitable_warning(key)
        if _drop(value):
            return None

        ident = id(value)
        if ident in self._path:
            raise CircularReferenceError(key, ident)
        self._path.append(ident)
        try:
            return self._composite(value, key)
        finally:
            self._path.pop()

    def _composite(self, value: object, key: str) -> Any:
        if isinstance(value, BaseException):
            token = _render_path.set(tuple(self._path))
            try:
                converted = self._format_error(key, value)
            finally:
                _render_path.reset(token)
            return self._mapping(converted.items())
        if isinstance(value, Mapping):
            return self._mapping(value.items())
        if isinstance(value, (list, tuple)):
            return self._sequence(value)
        if isinstance(value, (set, frozenset)):
            try:
                items = sorted(value)
            except TypeError:
                items = list(value)
            return self._sequence(items)
        if isinstance(value, BaseModel):
            return self._mapping(value.model_dump().items())
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return self.walk(to_dict(), key)
        fields = structured_fields(value)
        if fields is not None:
            return self._mapping(fields.items())

        attrs = public_attributes(value)
        for name in class_properties(type(value)):
            if name not in attrs:
                attrs[name] = getattr(value, name)
        return self._mapping(attrs.items()) if attrs else repr(value)

    def _mapping(self, items: Any) -> dict[str, Any]:
        # Keys equal after stringification collapse; the later entry wins.
        out: dict[str, Any] = {}
        for k, v in items:
            if _drop(v):
                continue
            text = _key_text(k)
            out[text] = self.walk(v, text)
        return out

    def _sequence(self, items: Any) -> list[Any]:
        return [None if _drop(v) else self.walk(v, str(i)) for i, v in enumerate(items)]


# ─────────────────────────────────────────────────────────────────────────────
# JSON Formatter
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class JsonFormatter:
    """Machine-readable formatter.

    Output is a JSON document (2-space indent, or a single line when
    ``compact``). Records serialize as ``level, message, data?, context?``.
    Values JSON cannot hold fall back to inspection text, which is readable
    but no longer valid JSON.
    """

    compact: bool = False

    def render(self, value: object) -> str:
        if not is_composite(value):
            return render_scalar(value)
        try:
            data = JsonWalker(self.format_error).walk(value)
            return orjson.dumps(data, option=0 if self.compact else orjson.OPT_INDENT_2).decode()
        except Exception as exc:
            if isinstance(exc, CircularReferenceError) and exc.ident in _render_path.get():
                raise
            logger.debug("Structured serialization of %s failed (%s), using inspection",
                         type(value).__name__, type(exc).__name__)
            return self.render_fallback(value)

    def render_fallback(self, value: object) -> str:
        """Inspection text for values the JSON walk could not handle."""
        try:
            if self.compact:
                return inspect_value(value, compact=True, depth=COMPACT_INSPECT_DEPTH)
            return inspect_value(value, compact=False, depth=None)
        except Exception as exc:
            logger.debug("Inspection of %s failed (%s)", type(value).__name__, type(exc).__name__)
            return f"[Uninspectable {type(value).__name__}]"

    def format_error(self, key: str, error: BaseException) -> dict[str, Any]:
        try:
            return error_to_dict(error, self.render)
        except Exception as exc:
            if isinstance(exc, CircularReferenceError) and exc.ident in _render_path.get():
                raise
            logger.debug("Converting %s failed (%s), keeping name and message only",
                         type(error).__name__, type(exc).__name__)
            return {"name": type(error).__name__, "message": safe_str(error), "stack": format_stack(error)}

    def format_record(self, record: LogRecord) -> str:
        return self.render(record.to_dict())
