"""
Pytest configuration and fixtures for http-request-core tests.
"""

from typing import List, Optional

import pytest
import responses as responses_lib

from http_request.core.logging import LoggingConfig, close_request_loggers
from http_request.core.request import Request
from http_request.transports.base import Transport


class FakeTransport(Transport):
    """
    Scripted transport: the test drives response, data, end and error.

    Example:
        >>> transport = FakeTransport()
        >>> req = Request("http://example.com/", transport=transport).submit()
        >>> transport.respond(200)
        >>> transport.feed(b"hello")
        >>> transport.finish()
    """

    def __init__(self):
        super().__init__()
        self.sent: List[Optional[bytes]] = []
        self.cancelled = 0

    def _send(self, body: Optional[bytes]) -> None:
        self.sent.append(body)

    def _cancel(self) -> None:
        self.cancelled += 1

    def respond(self, status_code: int = 200, reason: Optional[str] = None, headers=None):
        self._emit_response(status_code, reason, headers or {})

    def feed(self, *chunks):
        for chunk in chunks:
            self._emit_data(chunk)

    def finish(self):
        self._emit_end()

    def fail(self, exc: BaseException):
        self._emit_error(exc)

    def complete(self, status_code: int = 200, *chunks, reason: Optional[str] = None):
        """Respond, stream the chunks and end in one call."""
        self.respond(status_code, reason)
        self.feed(*chunks)
        self.finish()


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://api.example.com"


@pytest.fixture
def fake_transport():
    """Fresh scripted transport."""
    return FakeTransport()


@pytest.fixture
def make_request(base_url):
    """
    Factory for requests bound to a FakeTransport.

    Example:
        def test_something(make_request):
            req = make_request(data_type="json")
            req.submit()
            req.transport.complete(200, b'{"ok": true}')
    """
    def _make(options=None, callback=None, **overrides):
        if options is None:
            options = base_url + "/users"
        return Request(options, callback, transport=FakeTransport(), **overrides)

    return _make


@pytest.fixture
def mock_responses():
    """Mock HTTP responses using responses library."""
    with responses_lib.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def logging_config():
    """LoggingConfig with DEBUG console output."""
    return LoggingConfig.create(
        level="DEBUG",
        enable_console=True,
        enable_file=False
    )


@pytest.fixture
def logging_config_with_file(tmp_path):
    """
    LoggingConfig fixture with file logging enabled.

    Uses temporary directory for log files to avoid cleanup issues.
    """
    log_file = tmp_path / "test.log"
    return LoggingConfig.create(
        level="DEBUG",
        format="json",
        enable_console=False,
        enable_file=True,
        file_path=str(log_file),
        log_chunks=True,
    )


@pytest.fixture(autouse=True)
def _close_loggers():
    """Shared request loggers must not leak handlers between tests."""
    yield
    close_request_loggers()
