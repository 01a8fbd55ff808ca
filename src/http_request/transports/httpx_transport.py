# src/http_request/transports/httpx_transport.py
"""
Асинхронный транспорт на базе httpx.

end() планирует обмен как задачу в текущем event loop и сразу
возвращается; сигналы приходят из этой задачи. abort() отменяет задачу.
"""

import asyncio
import logging
from typing import Optional

import httpx

from .base import Transport
from .requests_transport import keep_alive_socket_options

logger = logging.getLogger(__name__)


class HTTPXTransport(Transport):
    """
    Transport built on httpx.AsyncClient.stream.

    Example:
        >>> req = Request("https://api.example.com/users", transport=HTTPXTransport())
        >>> data = await req.submit()
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        """
        Args:
            client: Shared client (not closed by the transport).
                    A private client is created if omitted.
        """
        super().__init__()
        self._client = client
        self._owns_client = client is None
        self._task: Optional[asyncio.Task] = None

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    def _create_client(self) -> httpx.AsyncClient:
        """Создать httpx клиент для одного обмена."""
        keep_alive = self._params.keep_alive
        if keep_alive > 0:
            transport = httpx.AsyncHTTPTransport(
                retries=0,
                limits=httpx.Limits(
                    max_connections=1,
                    max_keepalive_connections=1,
                    keepalive_expiry=keep_alive / 1000,
                ),
                socket_options=keep_alive_socket_options(keep_alive),
            )
        else:
            transport = httpx.AsyncHTTPTransport(
                retries=0,
                limits=httpx.Limits(max_connections=1, max_keepalive_connections=0),
            )
        return httpx.AsyncClient(transport=transport, follow_redirects=False)

    def _request_headers(self) -> dict:
        headers = dict(self._params.headers)
        if self._params.keep_alive <= 0 and not any(k.lower() == 'connection' for k in headers):
            headers['Connection'] = 'close'
        return headers

    def _send(self, body: Optional[bytes]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            self._emit_error(e)
            return
        self._task = loop.create_task(self._exchange(body))

    async def _exchange(self, body: Optional[bytes]) -> None:
        client = self._client or self._create_client()
        try:
            async with client.stream(
                self._params.method,
                self._params.url,
                content=body,
                headers=self._request_headers(),
            ) as response:
                self._emit_response(
                    response.status_code, response.reason_phrase, dict(response.headers)
                )
                async for chunk in response.aiter_bytes():
                    if self._aborted:
                        break
                    self._emit_data(chunk)
            self._emit_end()
        except httpx.HTTPError as e:
            self._emit_error(e)
        except OSError as e:
            self._emit_error(e)
        except Exception as e:
            # Header/URL encoding failures and the like
            self._emit_error(e)
        finally:
            if self._owns_client:
                await client.aclose()

    def _cancel(self) -> None:
        task = self._task
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is current:
            # abort() from a handler inside the exchange: the loop checks the flag
            return
        logger.debug("Cancelling exchange task for %s", self._params.url)
        task.cancel()
