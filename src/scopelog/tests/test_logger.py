"""Tests for the logger: filtering, scope merging, and record emission."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

import orjson
import pytest

from scopelog import (
    ConsoleSink,
    JsonFormatter,
    Logger,
    LoggerConfig,
    NullSink,
    Severity,
    configure,
    get_logger,
    log_context,
    run_with_context,
)

if TYPE_CHECKING:
    from conftest import ListSink


def _logger(sink: ListSink, **kwargs: object) -> Logger:
    return Logger(JsonFormatter(compact=True), sink, **kwargs)


# ═════════════════════════════════════════════════════════════════════════════
# Filtering
# ═════════════════════════════════════════════════════════════════════════════


def test_threshold_filters_lower_severities(sink: ListSink) -> None:
    log = _logger(sink, level="warn")
    log.debug("d")
    log.info("i")
    log.warn("w")
    log.error("e")
    log.fatal("f")
    assert [orjson.loads(line)["message"] for line in sink.lines] == ["w", "e", "f"]


def test_silent_threshold_emits_nothing(sink: ListSink) -> None:
    log = _logger(sink, level=Severity.silent)
    log.fatal("never")
    assert sink.lines == []


def test_silent_method_never_emits(sink: ListSink) -> None:
    _logger(sink, level="debug").silent("quiet", {"a": 1})
    assert sink.lines == []


def test_level_from_environment(sink: ListSink, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "error")
    log = _logger(sink)
    assert log.level is Severity.error
    log.warn("dropped")
    assert sink.lines == []


def test_unknown_environment_level_means_debug(sink: ListSink, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "WARN")
    log = _logger(sink)
    assert log.level is Severity.debug
    log.debug("kept")
    assert len(sink.lines) == 1


def test_explicit_level_beats_environment(sink: ListSink, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "error")
    assert _logger(sink, level="info").level is Severity.info


# ═════════════════════════════════════════════════════════════════════════════
# Data Merging
# ═════════════════════════════════════════════════════════════════════════════


def test_call_data_overrides_scope(sink: ListSink) -> None:
    _logger(sink, scope={"a": 1, "b": 2}).info("merged", {"b": 3, "c": 4})
    assert sink.lines == ['{"level":20,"message":"merged","data":{"a":1,"b":3,"c":4}}']


def test_keyword_fields_are_merged_last(sink: ListSink) -> None:
    _logger(sink).info("kw", {"user": "a"}, user="b", attempt=2)
    assert sink.parsed()["data"] == {"user": "b", "attempt": 2}


def test_no_data_means_no_data_key(sink: ListSink) -> None:
    _logger(sink).info("hi")
    assert sink.lines == ['{"level":20,"message":"hi"}']


def test_non_mapping_data_is_wrapped(sink: ListSink) -> None:
    _logger(sink).info("count", 5)
    assert sink.parsed()["data"] == {"data": 5}


def test_error_data_is_expanded(sink: ListSink) -> None:
    _logger(sink, scope={"service": "api"}).error("failed", ValueError("bad"))
    data = sink.parsed()["data"]
    assert data["service"] == "api"
    assert data["name"] == "ValueError"
    assert data["message"] == "bad"
    assert data["stack"] == "ValueError: bad"


def test_exception_logs_active_error(sink: ListSink) -> None:
    log = _logger(sink)
    try:
        raise KeyError("missing")
    except KeyError:
        log.exception("lookup failed")
    record = sink.parsed()
    assert record["level"] == 40
    assert record["data"]["name"] == "KeyError"
    assert "Traceback" in record["data"]["stack"]


def test_cyclic_data_does_not_raise(sink: ListSink) -> None:
    cyc: dict[str, object] = {"name": "circular"}
    cyc["self"] = cyc
    _logger(sink).info("cycle", cyc)
    assert "[Circular *1]" in sink.lines[0]


def test_error_with_self_referencing_attribute(sink: ListSink) -> None:
    """An exception listed in its own attribute is logged without recursing."""
    err = ValueError("boom")
    err.items = [err]
    _logger(sink).error("failed", err)
    data = sink.parsed()["data"]
    assert data["name"] == "ValueError"
    assert data["items"] == "<ref *1> [ [ValueError: boom] { items: [Circular *1] } ]"


def test_error_in_dict_cycle(sink: ListSink) -> None:
    ctx: dict[str, object] = {}
    err = ValueError("boom")
    err.ctx = ctx
    ctx["err"] = err
    _logger(sink).error("failed", err)
    assert sink.parsed()["data"]["ctx"] == "<ref *1> { err: [ValueError: boom] { ctx: [Circular *1] } }"


# ═════════════════════════════════════════════════════════════════════════════
# Children
# ═════════════════════════════════════════════════════════════════════════════


def test_child_overlays_scope_without_touching_parent(sink: ListSink) -> None:
    parent = _logger(sink, scope={"service": "api", "region": "eu"})
    child = parent.child({"region": "us"}, job="nightly")
    assert dict(child.scope) == {"service": "api", "region": "us", "job": "nightly"}
    assert dict(parent.scope) == {"service": "api", "region": "eu"}
    assert child.level is parent.level


def test_child_shares_formatter_and_sink(sink: ListSink) -> None:
    child = _logger(sink).child(job="j")
    child.warn("from child")
    assert sink.parsed() == {"level": 30, "message": "from child", "data": {"job": "j"}}


# ═════════════════════════════════════════════════════════════════════════════
# Context
# ═════════════════════════════════════════════════════════════════════════════


def test_ambient_context_is_separate_from_data(sink: ListSink) -> None:
    log = _logger(sink, scope={"service": "api"})
    with log_context(request_id="r-1"):
        log.info("in request", {"status": 200})
    assert sink.lines == [
        '{"level":20,"message":"in request","data":{"service":"api","status":200},"context":{"request_id":"r-1"}}'
    ]


def test_context_read_at_emit_time(sink: ListSink) -> None:
    log = _logger(sink)
    run_with_context({"job_id": "J"}, log.info, "inside")
    log.info("outside")
    assert sink.parsed(0)["context"] == {"job_id": "J"}
    assert "context" not in sink.parsed(1)


def test_context_accessor_can_be_disabled(sink: ListSink) -> None:
    log = _logger(sink, get_context=None)
    with log_context(request_id="r-1"):
        log.info("no context")
    assert "context" not in sink.parsed()


# ═════════════════════════════════════════════════════════════════════════════
# Console Sink
# ═════════════════════════════════════════════════════════════════════════════


def test_console_sink_writes_one_line_per_record() -> None:
    stream = io.StringIO()
    log = Logger(JsonFormatter(compact=True), ConsoleSink(stream))
    log.info("a")
    log.info("b")
    assert stream.getvalue() == '{"level":20,"message":"a"}\n{"level":20,"message":"b"}\n'


def test_console_sink_defaults_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    Logger(JsonFormatter(compact=True)).info("to stdout")
    assert capsys.readouterr().out == '{"level":20,"message":"to stdout"}\n'


# ═════════════════════════════════════════════════════════════════════════════
# Construction
# ═════════════════════════════════════════════════════════════════════════════


class FalsySink:
    """Sink whose truth value follows its length, empty at start."""
    
    def __init__(self) -> None:
        self.lines: list[str] = []
    
    def __len__(self) -> int:
        return len(self.lines)
    
    def write(self, text: str) -> None:
        self.lines.append(text)


def test_config_scope_defaults_to_empty() -> None:
    config = LoggerConfig(JsonFormatter(), NullSink())
    assert dict(config.scope) == {}
    assert config.get_context is None


def test_falsy_sink_is_kept() -> None:
    falsy = FalsySink()
    Logger(JsonFormatter(compact=True), falsy).info("kept")
    assert falsy.lines == ['{"level":20,"message":"kept"}']


def test_configure_keeps_falsy_sink() -> None:
    falsy = FalsySink()
    configure("json", compact=True, sink=falsy)
    assert get_logger().config.sink is falsy
