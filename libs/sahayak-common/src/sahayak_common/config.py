"""Base configuration utilities for sahayak services."""

from __future__ import annotations

import os
from collections.abc import Mapping


class ConfigError(RuntimeError):
    """Raised at startup when required configuration is missing or invalid."""


def get_env(key: str, default: str = "") -> str:
    """Get environment variable with default."""
    return os.environ.get(key, default)


def get_env_int(key: str, default: int = 0) -> int:
    """Get environment variable as integer."""
    return int(os.environ.get(key, str(default)))


def get_env_float(key: str, default: float = 0.0) -> float:
    """Get environment variable as float."""
    return float(os.environ.get(key, str(default)))


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get environment variable as boolean."""
    val = os.environ.get(key, str(default)).lower()
    return val in ("true", "1", "yes")


def require_env(values: Mapping[str, str]) -> None:
    """Fail fast when any required variable resolved to an empty value."""
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigError(f"Missing required configuration: {', '.join(missing)}")
