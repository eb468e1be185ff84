"""Internal logging package. Not part of the public API."""

from .impl.standard import (
    JsonFormatter,
    StandardLoggingConfigurator,
    configure_logging,
)
from .settings import LoggingSettings, load_logging_settings

__all__ = [
    "JsonFormatter",
    "LoggingSettings",
    "StandardLoggingConfigurator",
    "configure_logging",
    "load_logging_settings",
]
