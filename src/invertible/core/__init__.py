# src/invertible/core/__init__.py
"""Core infrastructure: Configuration, Logging."""

from invertible.core.config import (
    InversionSettings,
    InvertibleSettings,
    LoggingSettings,
    load_settings,
)
from invertible.core.logging import configure_logging

__all__ = [
    "InversionSettings",
    "InvertibleSettings",
    "LoggingSettings",
    "configure_logging",
    "load_settings",
]
