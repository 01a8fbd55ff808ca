"""
Response classification and body parsing.

A status code >= 400 is a protocol failure regardless of the body. Failed
responses are never decoded by data type: their body text becomes the
error message. Successful responses are decoded by the declared data type.
"""

import json
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Optional

from .chunks import Chunk, ChunkAccumulator
from .exceptions import DecodeError, ProtocolError, RequestError

DATA_TYPE_JSON = "json"
DATA_TYPE_TEXT = "text"
DATA_TYPES = frozenset({DATA_TYPE_JSON, DATA_TYPE_TEXT})

FAILURE_STATUS = 400


@dataclass(frozen=True)
class Outcome:
    """Result of end-of-stream processing: exactly one of error/data is meaningful."""
    error: Optional[RequestError] = None
    data: Any = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def is_failure(status_code: int) -> bool:
    """True if the status code classifies the response as a failure."""
    return status_code >= FAILURE_STATUS


def reason_phrase(status_code: int) -> str:
    """
    Standard reason phrase for a status code.

    Example:
        >>> reason_phrase(404)
        'Not Found'
        >>> reason_phrase(799)
        'Unknown'
    """
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Unknown"


def parse_payload(payload: Chunk, data_type: Optional[str] = None) -> Any:
    """
    Decode an assembled payload by declared data type.

    Args:
        payload: Joined response body (bytes or str)
        data_type: "json", "text" or None

    Returns:
        The payload unchanged for text, the parsed document for json

    Raises:
        DecodeError: If the payload is not a valid document
    """
    if data_type != DATA_TYPE_JSON:
        return payload

    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        raise DecodeError(
            f"Invalid JSON response: {e.msg} (line {e.lineno}, column {e.colno})",
            data_type=data_type,
        ) from e
    except UnicodeDecodeError as e:
        raise DecodeError(f"Invalid JSON response: {e}", data_type=data_type) from e


def build_outcome(
    status_code: int,
    status_message: Optional[str],
    chunks: ChunkAccumulator,
    data_type: Optional[str] = None,
) -> Outcome:
    """
    Classify the response and produce its outcome.

    Args:
        status_code: Response status code
        status_message: Reason phrase from the transport
        chunks: Frozen accumulator holding the body
        data_type: Declared data type

    Returns:
        Outcome with either a ProtocolError/DecodeError or decoded data
    """
    if is_failure(status_code):
        message = chunks.as_text() or status_message or reason_phrase(status_code)
        return Outcome(error=ProtocolError(status_code, message, status_message))

    try:
        data = parse_payload(chunks.join(), data_type)
    except DecodeError as e:
        return Outcome(error=e)

    return Outcome(data=data)
