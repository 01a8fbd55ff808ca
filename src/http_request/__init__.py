"""HTTP Request - single-request HTTP client with an observable lifecycle."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .core.request import Request, request
from .core.config import RequestOptions
from .core.state import RequestState
from .core import signals
from .core.exceptions import (
    RequestError,
    ValidationError,
    TransportError,
    ConnectionError,
    ProxyError,
    IncompleteResponseError,
    ProtocolError,
    DecodeError,
    RequestAbortedError,
    RequestPendingError,
)
from .core.logging import LoggingConfig
from .transports import Transport, RequestsTransport, HTTPXTransport

# NullHandler prevents "No handler found" warnings.
# Configure output with logging.getLogger('http_request') or LoggingConfig.
logging.getLogger('http_request').addHandler(logging.NullHandler())

# Version info - read from package metadata (single source of truth in pyproject.toml)
try:
    __version__ = version("http-request-core")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__author__ = "HTTP Request Contributors"
__license__ = "MIT"

__all__ = [
    # Core
    "Request",
    "request",
    "RequestOptions",
    "RequestState",
    "signals",

    # Transports
    "Transport",
    "RequestsTransport",
    "HTTPXTransport",

    # Logging
    "LoggingConfig",

    # Exceptions
    "RequestError",
    "ValidationError",
    "TransportError",
    "ConnectionError",
    "ProxyError",
    "IncompleteResponseError",
    "ProtocolError",
    "DecodeError",
    "RequestAbortedError",
    "RequestPendingError",

    # Version
    "__version__",
]
