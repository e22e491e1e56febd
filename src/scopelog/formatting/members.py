"""Reflection helpers: which members of an arbitrary object get rendered."""

from __future__ import annotations

import concurrent.futures
import dataclasses
import functools
import inspect
import ipaddress
from typing import Any

from pydantic import BaseModel

# Rendered as their text form rather than reflected.
ADDRESS_TYPES = (
    ipaddress.IPv4Address, ipaddress.IPv6Address,
    ipaddress.IPv4Network, ipaddress.IPv6Network,
    ipaddress.IPv4Interface, ipaddress.IPv6Interface,
)


def public_attributes(obj: object) -> dict[str, Any]:
    """Instance attributes not starting with an underscore, in insertion order."""
    try:
        attrs = vars(obj)
    except TypeError:
        return {}
    return {k: v for k, v in attrs.items() if isinstance(k, str) and not k.startswith("_")}


def class_properties(cls: type) -> list[str]:
    """Public property names of ``cls``, base classes first, declaration order within each."""
    names: dict[str, None] = {}
    for klass in reversed(cls.__mro__):
        for name, attr in vars(klass).items():
            if isinstance(attr, (property, functools.cached_property)) and not name.startswith("_"):
                names[name] = None
    return list(names)


def structured_fields(obj: object) -> dict[str, Any] | None:
    """Declared fields of pydantic models and dataclass instances, else None.

    Field values are read directly; nothing is converted.
    """
    if isinstance(obj, BaseModel):
        return dict(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    return None


def is_function(value: object) -> bool:
    """Functions, methods, builtins and partials; not callable instances."""
    return inspect.isroutine(value) or isinstance(value, functools.partial)


def is_pending(value: object) -> bool:
    """Awaitables and executor futures: results that must be awaited, not logged."""
    return inspect.isawaitable(value) or isinstance(value, concurrent.futures.Future)
