"""Markers for values that are absent rather than null."""

from __future__ import annotations

import dataclasses
from typing import Final

from pydantic_core import PydanticUndefined


class _Undefined:
    """Singleton standing for "no value", distinct from None."""
    
    __slots__ = ()
    _instance: _Undefined | None = None
    
    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance
    
    def __repr__(self) -> str:
        return "UNDEFINED"
    
    def __bool__(self) -> bool:
        return False
    
    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED: Final = _Undefined()


def is_undefined(value: object) -> bool:
    """True for UNDEFINED and the absent-value markers of dataclasses and pydantic."""
    return value is UNDEFINED or value is dataclasses.MISSING or value is PydanticUndefined
