"""Configuration loading and validation.

This module is responsible for:

- Loading `.env` into the process environment (without overriding existing vars).
- Converting environment variables into strongly-typed Pydantic models.
- Validating values and providing actionable error messages.
"""

import logging
import os
from pathlib import Path
from typing import TypeVar

import dotenv
from pydantic import BaseModel, Field, field_validator

_T = TypeVar("_T", int, float)

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _get_env_str(name: str, default: str) -> str:
    """Read a string env var, treating blank values as unset."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


def _get_env_bool(name: str, default: bool) -> bool:
    """Read a boolean env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    normalized = raw.strip().lower()
    if normalized in {"true", "1", "yes", "y", "on"}:
        return True
    if normalized in {"false", "0", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean (true/false). Got: {raw!r}")


def _get_env_number(name: str, default: _T, cast: type[_T]) -> _T:
    """Read an int/float env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a {cast.__name__}. Got: {raw!r}") from exc


class ObservabilityConfig(BaseModel):
    """Where and how registry commands/events are recorded."""

    enabled: bool = Field(default=True, description="Record commands and events")
    db_path: Path = Field(default=Path("observability.duckdb"), description="DuckDB file for records")
    queue_size: int = Field(default=10000, description="Max buffered records before dropping")

    @field_validator("queue_size")
    def validate_queue_size(cls, v: int) -> int:
        """Queue size must be positive."""
        if v <= 0:
            raise ValueError(f"REGISTRY_RECORDER_QUEUE_SIZE must be > 0. Got: {v}")
        return v


class Config(BaseModel):
    """Top-level application configuration."""

    log_level: str = Field(default="INFO", description="Root logging level")
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    @field_validator("log_level")
    def validate_log_level(cls, v: str) -> str:
        """Accept standard level names in any case."""
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"REGISTRY_LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}. Got: {v!r}")
        return level

    @property
    def log_level_value(self) -> int:
        """Numeric level for `logging.basicConfig`."""
        return logging.getLevelName(self.log_level)


def load_config() -> Config:
    """Load application configuration from environment variables.

    Notes:
    - Calls `dotenv.load_dotenv()` so local `.env` values are visible to the process.
    - Raises `ValueError` with actionable messages when a value is malformed.
    """
    dotenv.load_dotenv()

    observability = ObservabilityConfig(
        enabled=_get_env_bool("REGISTRY_OBSERVABILITY_ENABLED", True),
        db_path=Path(_get_env_str("REGISTRY_OBSERVABILITY_DB_PATH", "observability.duckdb")),
        queue_size=_get_env_number("REGISTRY_RECORDER_QUEUE_SIZE", 10000, int),
    )
    return Config(
        log_level=_get_env_str("REGISTRY_LOG_LEVEL", "INFO"),
        observability=observability,
    )
