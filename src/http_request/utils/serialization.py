"""
Request body serialization.

Converts the body passed to Request.submit() into what is written to the
transport.
"""

import json
from typing import Any, Mapping, Optional, Union


def serialize_body(method: str, body: Any) -> Optional[Union[bytes, str]]:
    """
    Prepare a request body for transmission.

    Rules:
        - GET requests never carry a body
        - bytes, bytearray and str pass through unchanged
        - dicts (any mapping), lists and tuples are encoded as JSON
        - anything else is dropped

    Args:
        method: Normalized (upper-case) HTTP method
        body: Body supplied by the caller

    Returns:
        Payload to write, or None for no body

    Example:
        >>> serialize_body("POST", {"name": "John"})
        '{"name": "John"}'
        >>> serialize_body("GET", "ignored") is None
        True
    """
    if method == 'GET' or body is None:
        return None

    if isinstance(body, (bytes, str)):
        return body

    if isinstance(body, bytearray):
        return bytes(body)

    if isinstance(body, Mapping):
        return json.dumps(dict(body))

    if isinstance(body, (list, tuple)):
        return json.dumps(list(body))

    return None


def body_size(payload: Optional[Union[bytes, str]]) -> int:
    """Size of a serialized payload in bytes (str measured as UTF-8)."""
    if payload is None:
        return 0
    if isinstance(payload, str):
        return len(payload.encode('utf-8'))
    return len(payload)
