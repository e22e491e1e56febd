"""Serialization engine: value to text, structured or human-readable.

- JsonFormatter: JSON output with inspection fallback (never raises)
- PrettyFormatter: colorized multi-line records wrapping a JsonFormatter
- error_to_dict: exception and cause chain to an ordered mapping
- inspect_value: cycle-safe readable rendering of any value
"""

from .exceptions import error_to_dict
from .inspector import InspectOptions, inspect_value
from .pretty import PrettyFormatter
from .sentinels import UNDEFINED, is_undefined
from .structured import UNDEFINED_TEXT, JsonFormatter, LogFormatter, is_composite

__all__ = [
    "InspectOptions",
    "JsonFormatter",
    "LogFormatter",
    "PrettyFormatter",
    "UNDEFINED",
    "UNDEFINED_TEXT",
    "error_to_dict",
    "inspect_value",
    "is_composite",
    "is_undefined",
]
