"""Shared fixtures: isolated environment and an in-memory sink."""

from __future__ import annotations

from collections.abc import Iterator

import orjson
import pytest

from scopelog import clear_settings_cache, reset_configuration

_ENV_VARS = (
    "LOG_LEVEL",
    "SCOPELOG_ENVIRONMENT",
    "SCOPELOG_FORMAT",
    "SCOPELOG_COMPACT",
    "SCOPELOG_COLORS",
    "SCOPELOG_TRACE_CONTEXT",
)


class ListSink:
    """In-memory sink collecting every written record."""
    
    def __init__(self) -> None:
        self.lines: list[str] = []
    
    def write(self, text: str) -> None:
        self.lines.append(text)
    
    def parsed(self, index: int = 0) -> object:
        return orjson.loads(self.lines[index])


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove scopelog env vars and reset cached settings around each test."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    clear_settings_cache()
    reset_configuration()
    yield
    clear_settings_cache()
    reset_configuration()


@pytest.fixture
def sink() -> ListSink:
    return ListSink()
