"""
Structured logger for request lifecycle events.

Wraps a standard library logger with console/file handlers built from
LoggingConfig and accepts log fields as keyword arguments.
"""

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from .config import LoggingConfig, LogLevel
from .formatters import get_formatter
from ...utils.sanitizer import mask_sensitive_data


class ExtraFieldsFilter(logging.Filter):
    """
    Adds static fields (service, environment, ...) to every record.

    Fields already present on the record are left untouched.
    """

    def __init__(self, extra_fields: Dict[str, Any]):
        super().__init__()
        self.extra_fields = dict(extra_fields)

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.extra_fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def _create_handler(handler: logging.Handler, level: int, formatter: logging.Formatter,
                    filters: list) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    for f in filters:
        handler.addFilter(f)
    return handler


class RequestLogger:
    """
    Logger for request lifecycle events.

    Example:
        >>> config = LoggingConfig.create(level="DEBUG", format="json")
        >>> logger = RequestLogger(config, name="http_request.api.example.com")
        >>> logger.info("Request submitted", method="GET", url="https://api.example.com/")
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = "http_request"):
        """
        Initialize logger.

        Args:
            config: Logging configuration (uses defaults if None)
            name: Logger name
        """
        self.config = config or LoggingConfig()
        self.name = name
        self._closed = False

        level = self._get_level(self.config.level)
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)
        self._logger.propagate = False

        # Remove existing handlers (if reinitializing)
        for handler in self._logger.handlers[:]:
            handler.close()
            self._logger.removeHandler(handler)

        filters = []
        if self.config.extra_fields:
            filters.append(ExtraFieldsFilter(dict(self.config.extra_fields)))

        formatter = get_formatter(self.config.format.value)

        if self.config.enable_console:
            self._logger.addHandler(
                _create_handler(logging.StreamHandler(sys.stderr), level, formatter, filters)
            )

        if self.config.enable_file and self.config.file_path:
            Path(self.config.file_path).parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=self.config.file_path,
                maxBytes=self.config.max_bytes,
                backupCount=self.config.backup_count,
                encoding='utf-8'
            )
            self._logger.addHandler(_create_handler(file_handler, level, formatter, filters))

    @staticmethod
    def _get_level(level: LogLevel) -> int:
        return getattr(logging, level.value)

    @property
    def closed(self) -> bool:
        return self._closed

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def log(self, level: int, message: str, **kwargs: Any) -> None:
        """Log message with sanitized keyword fields."""
        if self._closed or not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, message, extra=mask_sensitive_data(kwargs))

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log(logging.ERROR, message, **kwargs)

    def close(self) -> None:
        """
        Flush and close all handlers. Idempotent.
        """
        if self._closed:
            return

        for handler in self._logger.handlers[:]:
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)

        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


# Loggers shared by requests to the same host with the same config
_loggers: Dict[str, RequestLogger] = {}
_loggers_lock = threading.Lock()


def get_request_logger(config: LoggingConfig, name: str = "http_request") -> RequestLogger:
    """
    Get a logger for the given name, reusing it while the config is unchanged.

    Creating a RequestLogger reattaches handlers, so requests share one
    instance per logger name instead of building their own.

    Example:
        >>> config = LoggingConfig.create(level="DEBUG")
        >>> get_request_logger(config, "http_request.example.com") is \\
        ...     get_request_logger(config, "http_request.example.com")
        True
    """
    with _loggers_lock:
        logger = _loggers.get(name)
        if logger is None or logger.closed or logger.config != config:
            if logger is not None:
                logger.close()
            logger = RequestLogger(config, name=name)
            _loggers[name] = logger
        return logger


def close_request_loggers() -> None:
    """Close every shared logger (e.g. at application shutdown or in tests)."""
    with _loggers_lock:
        for logger in _loggers.values():
            logger.close()
        _loggers.clear()
