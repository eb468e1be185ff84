from __future__ import annotations

import logging
import os
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LoggingSettings:
    level: int = logging.INFO
    console_enabled: bool = True
    error_dir: str | None = None
    rotate_when: str = "midnight"
    backup_count: int = 14
    service_name: str | None = None

    @classmethod
    def from_env(cls, service_name: str | None = None) -> "LoggingSettings":
        level = _parse_level(_get_env_str("LOG_LEVEL", "INFO").upper())
        return cls(
            level=level,
            console_enabled=_get_env_bool("LOG_CONSOLE_ENABLED", True),
            error_dir=_get_env_path("LOG_ERROR_DIR"),
            rotate_when=_get_env_str("LOG_ROTATE_WHEN", "midnight"),
            backup_count=_get_env_int("LOG_BACKUP_COUNT", 14),
            service_name=service_name,
        )


def load_logging_settings(service_name: str | None = None) -> LoggingSettings:
    return LoggingSettings.from_env(service_name)


def _parse_level(level_name: str) -> int:
    level = logging.getLevelName(level_name)
    if isinstance(level, int):
        return level
    raise ValueError(f"Invalid LOG_LEVEL: {level_name!r}")


def _get_env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _get_env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


def _get_env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    value = value.strip().lower()
    if value in {"1", "true", "yes", "y", "on"}:
        return True
    if value in {"0", "false", "no", "n", "off"}:
        return False
    raise ValueError(f"Invalid bool env var {name}={value!r}")


def _get_env_path(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()
