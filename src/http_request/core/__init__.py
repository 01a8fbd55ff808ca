"""Core HTTP Request модули."""

from .config import RequestOptions, HTTP_METHODS, PROTOCOLS, DEFAULT_PORTS
from .state import RequestState, TERMINAL_STATES, TRANSITIONS, can_transition
from .chunks import Chunk, ChunkAccumulator
from .parser import (
    DATA_TYPES,
    DATA_TYPE_JSON,
    DATA_TYPE_TEXT,
    Outcome,
    is_failure,
    reason_phrase,
    parse_payload,
    build_outcome,
)
from .completion import Callback, Completion
from .signals import SignalManager, ALL_SIGNALS, resolve_signal
from .exceptions import (
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
    classify_transport_exception,
)
from .request import Request, request

__all__ = [
    # Config
    "RequestOptions",
    "HTTP_METHODS",
    "PROTOCOLS",
    "DEFAULT_PORTS",
    # Lifecycle
    "RequestState",
    "TERMINAL_STATES",
    "TRANSITIONS",
    "can_transition",
    # Response assembly
    "Chunk",
    "ChunkAccumulator",
    "DATA_TYPES",
    "DATA_TYPE_JSON",
    "DATA_TYPE_TEXT",
    "Outcome",
    "is_failure",
    "reason_phrase",
    "parse_payload",
    "build_outcome",
    # Completion
    "Callback",
    "Completion",
    # Signals
    "SignalManager",
    "ALL_SIGNALS",
    "resolve_signal",
    # Core
    "Request",
    "request",
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
    "classify_transport_exception",
]
