"""ANSI escape codes shared by the pretty formatter and the inspector."""

from __future__ import annotations

COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "black": "\033[30m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "magenta": "\033[35m",
    "cyan": "\033[36m",
    "gray": "\033[90m",
    "bg_red": "\033[41m",
    "bg_green": "\033[42m",
    "bg_yellow": "\033[43m",
    "bg_blue": "\033[44m",
}

NO_COLORS = {k: "" for k in COLORS}


def paint(text: str, *codes: str, enabled: bool = True) -> str:
    """Wrap ``text`` in the named color codes, or return it untouched."""
    if not enabled or not codes:
        return text
    return "".join(COLORS[c] for c in codes) + text + COLORS["reset"]
