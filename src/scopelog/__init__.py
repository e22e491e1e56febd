"""scopelog: structured logging with child scopes and execution-scoped context.

Quick Start:
    >>> from scopelog import get_logger, run_with_context
    >>> log = get_logger("worker")
    >>> run_with_context({"job_id": "j-1"}, lambda: log.info("started", {"items": 3}))

Components:
- Logger: severity filtering, scope merging, context attachment
- JsonFormatter / PrettyFormatter: never-raising serialization engine
- run_with_context / log_context / mutate_context: ambient context store
"""

from .config import clear_settings_cache, get_settings
from .context import bind_context, current_context, log_context, mutate_context, run_with_context
from .errors import CircularReferenceError, ConfigurationError, ScopelogError
from .formatting import UNDEFINED, JsonFormatter, LogFormatter, PrettyFormatter, error_to_dict, inspect_value
from .levels import Severity, resolve_severity
from .logger import Logger, LoggerConfig, configure, get_default_config, get_logger, reset_configuration
from .record import LogRecord
from .sinks import ConsoleSink, LogSink, NullSink
from .tracing import trace_context

__version__ = "0.1.0"

__all__ = [
    # Logger
    "Logger", "LoggerConfig", "LogRecord", "get_logger", "configure", "get_default_config", "reset_configuration",
    # Severity
    "Severity", "resolve_severity",
    # Serialization
    "JsonFormatter", "PrettyFormatter", "LogFormatter", "error_to_dict", "inspect_value", "UNDEFINED",
    # Context
    "run_with_context", "log_context", "current_context", "mutate_context", "bind_context", "trace_context",
    # Sinks
    "LogSink", "ConsoleSink", "NullSink",
    # Config
    "get_settings", "clear_settings_cache",
    # Errors
    "ScopelogError", "CircularReferenceError", "ConfigurationError",
]
