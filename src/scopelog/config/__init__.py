"""Configuration management using pydantic-settings."""

from .settings import (
    LevelSettings,
    ScopelogSettings,
    clear_settings_cache,
    get_level_settings,
    get_settings,
)

__all__ = [
    "LevelSettings",
    "ScopelogSettings",
    "clear_settings_cache",
    "get_level_settings",
    "get_settings",
]
