"""Execution-scoped log context backed by contextvars.

Context is a string-to-string mapping (request id, job id, ...) bound to the
logical operation rather than to the thread that happens to run it. Each
asyncio task starts with a copy of its creator's context, so concurrent
requests never see each other's values.

Quick Start:
    >>> from scopelog.context import run_with_context, current_context
    >>> run_with_context({"request_id": "r-1"}, current_context)
    {'request_id': 'r-1'}
    >>> current_context() is None
    True

    >>> with log_context(job_id="j-9"):
    ...     mutate_context({"attempt": "2"})
    ...     current_context()
    {'job_id': 'j-9', 'attempt': '2'}
"""

from __future__ import annotations

import contextvars
import functools
import inspect
from collections.abc import Awaitable, Callable, Coroutine, Mapping
from typing import TYPE_CHECKING, ParamSpec, TypeVar, overload

if TYPE_CHECKING:
    from contextvars import Token
    from types import TracebackType

P = ParamSpec("P")
T = TypeVar("T")

LogContext = dict[str, str]

# None means "no block active"; an empty dict is an active but empty block.
_log_context: contextvars.ContextVar[LogContext | None] = contextvars.ContextVar("scopelog_context", default=None)


def _overlay(additions: Mapping[str, object]) -> LogContext:
    return {**(_log_context.get() or {}), **{str(k): str(v) for k, v in additions.items()}}


def current_context() -> LogContext | None:
    """Snapshot of the active context, or None outside any context block."""
    ctx = _log_context.get()
    return None if ctx is None else dict(ctx)


def mutate_context(additions: Mapping[str, object]) -> None:
    """Add or overwrite keys in the active context.

    Visible for the remainder of the current block and in anything entered or
    spawned afterwards; invisible to the enclosing block. No-op outside a block.
    """
    if _log_context.get() is None:
        return
    _log_context.set(_overlay(additions))


class log_context:
    """Context manager activating an overlaid context for its body.

    Works with both ``with`` and ``async with``. On exit, normal or
    exceptional, the previous context is restored.
    """

    __slots__ = ("_ctx", "_token")

    def __init__(self, context: Mapping[str, object] | None = None, **kw: object) -> None:
        self._ctx: dict[str, object] = {**(context or {}), **kw}
        self._token: Token[LogContext | None] | None = None

    def __enter__(self) -> LogContext:
        merged = _overlay(self._ctx)
        self._token = _log_context.set(merged)
        return dict(merged)

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                 exc_tb: TracebackType | None) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None

    async def __aenter__(self) -> LogContext:
        return self.__enter__()

    async def __aexit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                        exc_tb: TracebackType | None) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


@overload
def run_with_context(context: Mapping[str, object], fn: Callable[P, Awaitable[T]],
                     *args: P.args, **kwargs: P.kwargs) -> Awaitable[T]: ...
@overload
def run_with_context(context: Mapping[str, object], fn: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T: ...
def run_with_context(context: Mapping[str, object], fn: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run ``fn`` with ``context`` overlaid on the caller's context.

    Keys from ``context`` win over inherited ones. Coroutine functions get a
    coroutine back whose body runs with the context active, so awaited calls
    and tasks created inside inherit it.

    Example:
        >>> run_with_context({"request_id": "X"},
        ...     lambda: run_with_context({"job_id": "Y"}, current_context))
        {'request_id': 'X', 'job_id': 'Y'}
    """
    merged = _overlay(context)
    if inspect.iscoroutinefunction(fn):
        return _run_async(merged, fn(*args, **kwargs))  # type: ignore[arg-type]
    with log_context(merged):
        result = fn(*args, **kwargs)
    if inspect.iscoroutine(result):
        return _run_async(merged, result)  # type: ignore[return-value]
    return result


async def _run_async(context: LogContext, coro: Coroutine[object, object, T]) -> T:
    # Coroutine bodies only run when awaited, so the context is activated here.
    async with log_context(context):
        return await coro


def bind_context(fn: Callable[P, T]) -> Callable[P, T]:
    """Bind ``fn`` to a snapshot of the caller's context.

    Threads do not inherit contextvars, so wrap callables handed to executors:

        >>> with log_context(request_id="r-1"):
        ...     future = pool.submit(bind_context(handle), item)
    """
    ctx = contextvars.copy_context()

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        return ctx.copy().run(fn, *args, **kwargs)

    return wrapper
