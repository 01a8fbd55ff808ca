"""
Logging system for HTTP Request.

Provides structured request lifecycle logging with JSON and text output.

Example:
    >>> from http_request import Request
    >>> from http_request.core.logging import LoggingConfig
    >>>
    >>> config = LoggingConfig.create(level="DEBUG", format="json")
    >>> req = Request("https://api.example.com/users", logging=config)
    >>> req.submit()  # Logs "Request submitted", "Response received", ...
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .logger import (
    RequestLogger,
    ExtraFieldsFilter,
    get_request_logger,
    close_request_loggers,
)
from .formatters import JSONFormatter, TextFormatter, get_formatter

__all__ = [
    # Config
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    # Logger
    "RequestLogger",
    "ExtraFieldsFilter",
    "get_request_logger",
    "close_request_loggers",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "get_formatter",
]
