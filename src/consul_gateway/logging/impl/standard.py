from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler

from ..settings import LoggingSettings, load_logging_settings

_CONFIGURED_MARKER = "_consul_gateway_logging_configured"

# Every attribute a bare LogRecord carries; anything else came from ``extra``.
_BUILTIN_LOG_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per line, extras merged at the top level."""

    def __init__(self, service_name: str | None = None) -> None:
        super().__init__()
        self._service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "process": record.process,
            "thread": record.threadName,
        }
        if self._service_name:
            payload["service"] = self._service_name
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack_info"] = record.stack_info
        for key, value in record.__dict__.items():
            if key not in _BUILTIN_LOG_RECORD_ATTRS:
                payload[key] = value
        return json.dumps(payload, ensure_ascii=True, default=str)


class StandardLoggingConfigurator:
    """Install JSON console and error-file handlers on the root logger.

    Installation happens once per process; later calls are no-ops.
    """

    def __init__(self, settings: LoggingSettings) -> None:
        self._settings = settings

    def configure(self) -> None:
        logger = logging.getLogger()
        if getattr(logger, _CONFIGURED_MARKER, False):
            return
        logger.setLevel(self._settings.level)
        formatter = JsonFormatter(self._settings.service_name)
        for handler in self._build_handlers(formatter):
            logger.addHandler(handler)
        setattr(logger, _CONFIGURED_MARKER, True)

    def _build_handlers(
        self, formatter: logging.Formatter
    ) -> list[logging.Handler]:
        handlers: list[logging.Handler] = []
        if self._settings.console_enabled:
            console = logging.StreamHandler()
            console.setLevel(self._settings.level)
            console.setFormatter(formatter)
            handlers.append(console)

        if self._settings.error_dir:
            handlers.append(
                self._build_file_handler(
                    self._settings.error_dir,
                    "error.log",
                    level=logging.ERROR,
                    formatter=formatter,
                )
            )
        return handlers

    def _build_file_handler(
        self,
        directory: str,
        filename: str,
        *,
        level: int,
        formatter: logging.Formatter,
    ) -> logging.Handler:
        os.makedirs(directory, exist_ok=True)
        handler = TimedRotatingFileHandler(
            os.path.join(directory, filename),
            when=self._settings.rotate_when,
            backupCount=self._settings.backup_count,
            encoding="utf-8",
            delay=True,
        )
        handler.setLevel(level)
        handler.setFormatter(formatter)
        return handler


def configure_logging(
    settings: LoggingSettings | None = None,
) -> StandardLoggingConfigurator:
    """Configure root logging from ``settings`` or the ``LOG_*`` environment."""
    configurator = StandardLoggingConfigurator(
        settings or load_logging_settings())
    configurator.configure()
    return configurator
