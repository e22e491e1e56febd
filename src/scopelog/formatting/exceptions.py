"""Exception to mapping conversion.

Turns an exception and its cause chain into a plain, ordered dict that the
structured formatter can serialize.
"""

from __future__ import annotations

import traceback
from collections.abc import Callable, Mapping
from typing import Any

from scopelog.formatting.members import public_attributes

CIRCULAR_CAUSE = "[Circular cause]"
CIRCULAR_ERROR = "[Circular]"

# Keys filled in explicitly; never copied from instance attributes.
_FIXED_KEYS = frozenset({"name", "message", "stack", "cause"})


def safe_str(obj: object) -> str:
    """``str(obj)``, or the placeholder the traceback module prints when that fails."""
    try:
        return str(obj)
    except Exception:
        return "<exception str() failed>"


def format_stack(error: BaseException) -> str:
    """Traceback text for ``error`` alone (its causes are rendered separately)."""
    lines = traceback.format_exception(type(error), error, error.__traceback__, chain=False)
    return "".join(lines).rstrip("\n")


def error_cause(error: BaseException) -> tuple[bool, object]:
    """Return ``(has_cause, cause)``.

    An explicit ``cause`` attribute wins, then ``__cause__``, then the implicit
    ``__context__`` unless suppressed by ``raise ... from None``.
    """
    attrs = public_attributes(error)
    if "cause" in attrs and attrs["cause"] is not None:
        return True, attrs["cause"]
    if error.__cause__ is not None:
        return True, error.__cause__
    if error.__context__ is not None and not error.__suppress_context__:
        return True, error.__context__
    return False, None


def error_to_dict(
    error: BaseException,
    render: Callable[[object], str],
    *,
    _seen: frozenset[int] = frozenset(),
) -> dict[str, Any]:
    """Convert an exception into an ordered mapping.

    Always contains ``name``, ``message`` and ``stack``. A ``to_dict()`` method
    on the exception is merged in and wins on conflicting keys; without one,
    public instance attributes are copied, each passed through ``render``.
    Causes are converted recursively and attached under ``cause``; a cause
    already seen in this chain is attached as ``"[Circular cause]"``.

    Example:
        >>> try:
        ...     raise ValueError("bad") from KeyError("k")
        ... except ValueError as e:
        ...     error_to_dict(e, str)["cause"]["name"]
        'KeyError'
    """
    seen = _seen | {id(error)}
    out: dict[str, Any] = {"name": type(error).__name__, "message": safe_str(error), "stack": format_stack(error)}

    to_dict = getattr(error, "to_dict", None)
    if callable(to_dict):
        custom = to_dict()
        if isinstance(custom, Mapping):
            out.update(custom)
    else:
        for key, value in public_attributes(error).items():
            if key in _FIXED_KEYS or key in out:
                continue
            if isinstance(value, BaseException) and id(value) in seen:
                out[key] = CIRCULAR_ERROR
            else:
                out[key] = render(value)

    has_cause, cause = error_cause(error)
    if has_cause:
        if isinstance(cause, BaseException):
            out["cause"] = CIRCULAR_CAUSE if id(cause) in seen else error_to_dict(cause, render, _seen=seen)
        else:
            out["cause"] = render(cause)
    return out
