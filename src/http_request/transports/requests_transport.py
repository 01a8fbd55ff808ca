# src/http_request/transports/requests_transport.py
"""
Blocking transport on top of requests.

The exchange runs inside end(): response, data and end/error signals are
delivered on the calling thread before end() returns. Handlers may call
abort() at any point. abort() closes the body stream; a call still
waiting for response headers finishes first and is then discarded.
"""

import logging
import socket
from typing import List, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.connection import HTTPConnection

from .base import Transport

logger = logging.getLogger(__name__)


def keep_alive_socket_options(keep_alive_ms: int) -> List[Tuple[int, int, int]]:
    """
    Socket options enabling TCP keep-alive probes.

    Args:
        keep_alive_ms: Idle interval before the first probe (ms)

    Returns:
        urllib3 socket_options list (defaults + keep-alive)
    """
    options = list(HTTPConnection.default_socket_options)
    options.append((socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1))
    interval = max(1, keep_alive_ms // 1000)
    # TCP_KEEPIDLE is Linux, TCP_KEEPALIVE is macOS
    if hasattr(socket, 'TCP_KEEPIDLE'):
        options.append((socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, interval))
    elif hasattr(socket, 'TCP_KEEPALIVE'):
        options.append((socket.IPPROTO_TCP, socket.TCP_KEEPALIVE, interval))
    return options


class KeepAliveAdapter(HTTPAdapter):
    """HTTPAdapter whose pool connections use TCP keep-alive."""

    def __init__(self, keep_alive_ms: int, **kwargs):
        # Must be set before HTTPAdapter.__init__ calls init_poolmanager
        self.socket_options = keep_alive_socket_options(keep_alive_ms)
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs):
        kwargs['socket_options'] = self.socket_options
        super().init_poolmanager(*args, **kwargs)


class RequestsTransport(Transport):
    """
    Transport built on requests.Session with stream=True.

    Example:
        >>> req = Request("https://api.example.com/users", transport=RequestsTransport())
        >>> req.submit()   # returns after the exchange finished
        >>> req.state
        <RequestState.RECEIVED: 'received'>
    """

    def __init__(self, session: Optional[requests.Session] = None):
        """
        Args:
            session: Shared session (not closed by the transport).
                     A private session is created if omitted.
        """
        super().__init__()
        self._session = session
        self._owns_session = session is None
        self._response: Optional[requests.Response] = None

    def _create_session(self) -> requests.Session:
        """Create configured session."""
        session = requests.Session()

        if self._params.keep_alive > 0:
            adapter = KeepAliveAdapter(
                self._params.keep_alive,
                pool_connections=1,
                pool_maxsize=1,
                max_retries=0
            )
        else:
            adapter = HTTPAdapter(pool_connections=1, pool_maxsize=1, max_retries=0)

        session.mount('http://', adapter)
        session.mount('https://', adapter)
        return session

    def _request_headers(self) -> dict:
        headers = dict(self._params.headers)
        if self._params.keep_alive <= 0 and not any(k.lower() == 'connection' for k in headers):
            headers['Connection'] = 'close'
        return headers

    def _send(self, body: Optional[bytes]) -> None:
        session = self._session or self._create_session()
        try:
            try:
                response = session.request(
                    method=self._params.method,
                    url=self._params.url,
                    data=body,
                    headers=self._request_headers(),
                    stream=True,
                    allow_redirects=False,
                )
            except requests.exceptions.RequestException as e:
                self._emit_error(e)
                return
            except Exception as e:
                # Header/URL encoding failures and the like
                self._emit_error(e)
                return

            self._response = response
            try:
                self._emit_response(response.status_code, response.reason, dict(response.headers))
                if not self._aborted:
                    for chunk in response.iter_content(chunk_size=None):
                        self._emit_data(chunk)
                        if self._aborted:
                            break
                self._emit_end()
            except requests.exceptions.RequestException as e:
                self._emit_error(e)
            except Exception as e:
                self._emit_error(e)
            finally:
                response.close()
        finally:
            if self._owns_session:
                session.close()

    def _cancel(self) -> None:
        # A call still waiting for headers is not interrupted; the flag is
        # checked once session.request() returns
        response = self._response
        if response is not None:
            logger.debug("Abort requested, closing body stream for %s", self._params.url)
            response.close()
