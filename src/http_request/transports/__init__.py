"""Transports: the HTTP clients that perform the actual I/O for a Request."""

from typing import Dict, Type, Union

from .base import Transport, TransportParams, TransportHandlers
from .requests_transport import RequestsTransport, KeepAliveAdapter
from .httpx_transport import HTTPXTransport

TRANSPORTS: Dict[str, Type[Transport]] = {
    "requests": RequestsTransport,
    "httpx": HTTPXTransport,
}

DEFAULT_TRANSPORT = "requests"


def resolve_transport(transport: Union[str, Transport, Type[Transport], None] = None) -> Transport:
    """
    Get a transport instance from a name, a class or an instance.

    Args:
        transport: "requests", "httpx", a Transport subclass, an instance,
                   or None for the default ("requests")

    Raises:
        ValueError: If the name or object is not a transport

    Example:
        >>> resolve_transport("httpx")
        <http_request.transports.httpx_transport.HTTPXTransport object at ...>
    """
    if transport is None:
        transport = DEFAULT_TRANSPORT

    if isinstance(transport, Transport):
        return transport

    if isinstance(transport, str):
        transport_class = TRANSPORTS.get(transport.lower())
        if transport_class is None:
            raise ValueError(
                f"Unknown transport: {transport!r}. "
                f"Available: {', '.join(TRANSPORTS.keys())}"
            )
        return transport_class()

    if isinstance(transport, type) and issubclass(transport, Transport):
        return transport()

    raise ValueError(f"Not a transport: {transport!r}")


__all__ = [
    "Transport",
    "TransportParams",
    "TransportHandlers",
    "RequestsTransport",
    "KeepAliveAdapter",
    "HTTPXTransport",
    "TRANSPORTS",
    "DEFAULT_TRANSPORT",
    "resolve_transport",
]
