"""Environment-based configuration using pydantic-settings.

The severity threshold comes from the bare ``LOG_LEVEL`` variable and accepts
any string (unknown names resolve to debug). Formatter selection lives under
``SCOPELOG_``.

Example:
    >>> from scopelog.config import get_settings
    >>> settings = get_settings()
    >>> settings.environment
    'development'

    # Or with environment variables:
    # LOG_LEVEL=warn
    # SCOPELOG_ENVIRONMENT=production
    # SCOPELOG_FORMAT=json
    # SCOPELOG_COMPACT=true
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LevelSettings(BaseSettings):
    """Severity threshold fallback, read from ``LOG_LEVEL``."""
    
    model_config = SettingsConfigDict(extra="ignore")
    
    log_level: str | None = Field(default=None, description="Case-sensitive severity name")


class ScopelogSettings(BaseSettings):
    """Formatter and context defaults used by ``get_logger()``.
    
    Example environment variables:
        SCOPELOG_ENVIRONMENT=production
        SCOPELOG_FORMAT=pretty
        SCOPELOG_COLORS=false
        SCOPELOG_TRACE_CONTEXT=true
    """
    
    model_config = SettingsConfigDict(
        env_prefix="SCOPELOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
    )
    
    environment: Literal["development", "staging", "production"] = "development"
    format: Literal["json", "pretty"] | None = Field(default=None, description="Formatter; derived from environment when unset")
    compact: bool = Field(default=False, description="Single-line JSON output")
    colors: bool | None = Field(default=None, description="Force colors on/off (None = detect TTY)")
    trace_context: bool = Field(default=False, description="Attach OpenTelemetry trace/span ids to context")
    
    @field_validator("environment", "format", mode="before")
    @classmethod
    def _lowercase(cls, v: object) -> object:
        return v.lower() if isinstance(v, str) else v
    
    @computed_field
    @property
    def is_production(self) -> bool:
        return self.environment == "production"
    
    @computed_field
    @property
    def resolved_format(self) -> Literal["json", "pretty"]:
        """Explicit format, else JSON in production and pretty elsewhere."""
        if self.format is not None:
            return self.format
        return "json" if self.is_production else "pretty"


@lru_cache(maxsize=1)
def get_level_settings() -> LevelSettings:
    return LevelSettings()


@lru_cache(maxsize=1)
def get_settings() -> ScopelogSettings:
    """Get the global settings instance (cached)."""
    return ScopelogSettings()


def clear_settings_cache() -> None:
    """Clear cached settings so the next lookup re-reads the environment (useful for testing)."""
    get_level_settings.cache_clear()
    get_settings.cache_clear()
