"""Utility modules for HTTP Request."""

from .serialization import serialize_body, body_size
from .sanitizer import (
    mask_sensitive_data,
    mask_url,
    mask_headers,
    add_sensitive_keys,
)

__all__ = [
    'serialize_body',
    'body_size',
    'mask_sensitive_data',
    'mask_url',
    'mask_headers',
    'add_sensitive_keys',
]
