"""Structured logger with child scopes and ambient context.

A Logger filters by severity, merges its scope with call-site data, attaches
the ambient context under a separate ``context`` field, and hands the record
to its formatter and sink. Loggers are immutable: ``child()`` returns a new
logger with the overlaid scope.

Quick Start:
    >>> from scopelog import get_logger, log_context
    >>>
    >>> log = get_logger("billing")
    >>> log.info("invoice created", {"invoice_id": 42})
    >>>
    >>> # Static scope
    >>> job_log = log.child({"job": "nightly"})
    >>> job_log.warn("retrying", attempt=2)
    >>>
    >>> # Ambient context for everything inside the block
    >>> with log_context(request_id="r-1"):
    ...     job_log.error("failed", err)
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, TextIO

from scopelog.config import get_level_settings, get_settings
from scopelog.context import current_context
from scopelog.errors import ConfigurationError
from scopelog.formatting import UNDEFINED, JsonFormatter, LogFormatter, PrettyFormatter, is_undefined
from scopelog.levels import Severity, resolve_severity
from scopelog.record import LogRecord
from scopelog.sinks import ConsoleSink, LogSink, NullSink
from scopelog.tracing import trace_context

ContextAccessor = Callable[[], Mapping[str, str] | None]

_EMPTY_SCOPE: Mapping[str, Any] = MappingProxyType({})


# ─────────────────────────────────────────────────────────────────────────────
# Configuration & Logger
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class LoggerConfig:
    """Immutable logger configuration. ``level`` is already resolved."""

    formatter: LogFormatter
    sink: LogSink
    level: Severity = Severity.debug
    scope: Mapping[str, Any] = field(default_factory=lambda: _EMPTY_SCOPE)
    get_context: ContextAccessor | None = None


def resolve_level(level: object = None) -> Severity:
    """Explicit level if given, else ``LOG_LEVEL``, else debug."""
    if level is not None:
        return resolve_severity(level)
    return resolve_severity(get_level_settings().log_level)


class Logger:
    """Severity-filtered structured logger.

    Example:
        >>> log = Logger(JsonFormatter(compact=True), level="warn", scope={"service": "api"})
        >>> log.info("ignored")
        >>> log.error("boom", {"status": 500})
        {"level":40,"message":"boom","data":{"service":"api","status":500}}
    """

    __slots__ = ("_config",)

    def __init__(
        self,
        formatter: LogFormatter | None = None,
        sink: LogSink | None = None,
        *,
        level: Severity | int | str | None = None,
        scope: Mapping[str, Any] | None = None,
        get_context: ContextAccessor | None = current_context,
    ) -> None:
        self._config = LoggerConfig(
            formatter=JsonFormatter() if formatter is None else formatter,
            sink=ConsoleSink() if sink is None else sink,
            level=resolve_level(level),
            scope=MappingProxyType(dict(scope or {})),
            get_context=get_context,
        )

    @classmethod
    def from_config(cls, config: LoggerConfig) -> Logger:
        """Build a logger around an existing configuration."""
        logger = cls.__new__(cls)
        logger._config = config
        return logger

    @property
    def config(self) -> LoggerConfig:
        return self._config

    @property
    def level(self) -> Severity:
        return self._config.level

    @property
    def scope(self) -> Mapping[str, Any]:
        return self._config.scope

    def __repr__(self) -> str:
        return f"Logger(level={self.level.name}, scope={dict(self.scope)!r})"

    def child(self, scope: Mapping[str, Any] | None = None, **fields: Any) -> Logger:
        """New logger whose scope is this scope overlaid with ``scope`` and ``fields``."""
        merged = {**self._config.scope, **(scope or {}), **fields}
        return Logger.from_config(replace(self._config, scope=MappingProxyType(merged)))

    bind = child

    def is_enabled(self, level: Severity) -> bool:
        return level is not Severity.silent and level >= self._config.level

    def log(self, level: Severity | int | str, message: str, data: Any = UNDEFINED, **fields: Any) -> None:
        severity = resolve_severity(level)
        if not self.is_enabled(severity):
            return
        cfg = self._config
        record = LogRecord(severity, message, self._merge_data(data, fields), self._current_context())
        cfg.sink.write(cfg.formatter.format_record(record))

    def debug(self, message: str, data: Any = UNDEFINED, **fields: Any) -> None: self.log(Severity.debug, message, data, **fields)
    def info(self, message: str, data: Any = UNDEFINED, **fields: Any) -> None: self.log(Severity.info, message, data, **fields)
    def warn(self, message: str, data: Any = UNDEFINED, **fields: Any) -> None: self.log(Severity.warn, message, data, **fields)
    def error(self, message: str, data: Any = UNDEFINED, **fields: Any) -> None: self.log(Severity.error, message, data, **fields)
    def fatal(self, message: str, data: Any = UNDEFINED, **fields: Any) -> None: self.log(Severity.fatal, message, data, **fields)

    warning = warn

    def silent(self, *args: Any, **kwargs: Any) -> None:
        """Never emits."""

    def exception(self, message: str, data: Any = UNDEFINED, **fields: Any) -> None:
        """Log at error level; without ``data``, the exception being handled is logged."""
        if is_undefined(data):
            data = sys.exception() or UNDEFINED
        self.log(Severity.error, message, data, **fields)

    def _merge_data(self, data: Any, fields: Mapping[str, Any]) -> Any:
        # Scope first, then call-site data: the caller's keys win.
        merged: dict[Any, Any] = dict(self._config.scope)
        if isinstance(data, BaseException):
            merged.update(self._config.formatter.format_error("", data))
        elif isinstance(data, Mapping):
            merged.update(data)
        elif not is_undefined(data):
            merged["data"] = data
        merged.update(fields)
        if merged or not is_undefined(data):
            return merged
        return UNDEFINED

    def _current_context(self) -> dict[str, str] | None:
        accessor = self._config.get_context
        ctx = accessor() if accessor is not None else None
        return dict(ctx) if ctx else None


# ─────────────────────────────────────────────────────────────────────────────
# Global Configuration
# ─────────────────────────────────────────────────────────────────────────────


_configured: LoggerConfig | None = None


def _isatty(stream: TextIO) -> bool:
    return getattr(stream, "isatty", lambda: False)()


def get_default_config() -> LoggerConfig:
    """Configuration derived from the environment (see ``scopelog.config``)."""
    settings = get_settings()
    base = JsonFormatter(compact=settings.compact)
    formatter: LogFormatter
    if settings.resolved_format == "json":
        formatter = base
    else:
        colors = settings.colors if settings.colors is not None else _isatty(sys.stdout)
        formatter = PrettyFormatter(colors=colors, base=base)
    return LoggerConfig(
        formatter=formatter,
        sink=ConsoleSink(),
        level=resolve_level(),
        get_context=trace_context() if settings.trace_context else current_context,
    )


def configure(
    format: str | None = None,  # noqa: A002 - mirrors SCOPELOG_FORMAT
    *,
    level: Severity | int | str | None = None,
    compact: bool | None = None,
    colors: bool | None = None,
    sink: LogSink | None = None,
) -> LoggerConfig:
    """Set the configuration used by ``get_logger()``.

    Unset arguments fall back to the environment defaults. Format is "json",
    "pretty" or "none" (discard everything).

    Example:
        >>> configure("json", level="info", compact=True)
    """
    global _configured
    defaults = get_default_config()
    base = JsonFormatter(compact=get_settings().compact if compact is None else compact)
    formatter: LogFormatter
    match format:
        case None:
            formatter = defaults.formatter if compact is None and colors is None else _rebuild(defaults.formatter, base, colors)
        case "json": formatter = base
        case "pretty": formatter = PrettyFormatter(colors=_isatty(sys.stdout) if colors is None else colors, base=base)
        case "none":
            formatter, sink = base, NullSink()
        case _: raise ConfigurationError(f"Unknown format: {format}. Use 'json', 'pretty', or 'none'")
    _configured = replace(
        defaults,
        formatter=formatter,
        sink=defaults.sink if sink is None else sink,
        level=defaults.level if level is None else resolve_severity(level),
    )
    return _configured


def _rebuild(current: LogFormatter, base: JsonFormatter, colors: bool | None) -> LogFormatter:
    if isinstance(current, PrettyFormatter):
        return PrettyFormatter(colors=current.colors if colors is None else colors, base=base)
    return base


def reset_configuration() -> None:
    """Forget ``configure()`` calls; ``get_logger()`` reads the environment again."""
    global _configured
    _configured = None


def get_logger(name: str | None = None, **scope: Any) -> Logger:
    """Get a logger from the active configuration. ``name`` is added to the scope as ``logger``.

    Example:
        >>> log = get_logger("api", region="eu")
        >>> log.info("starting up", version="1.0.0")
    """
    config = _configured or get_default_config()
    initial = {**({"logger": name} if name else {}), **scope}
    return Logger.from_config(replace(config, scope=MappingProxyType(initial)))
