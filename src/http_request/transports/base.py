# src/http_request/transports/base.py

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, List, Mapping, Optional, Union

from ..core.config import RequestOptions

Body = Union[bytes, str]


@dataclass(frozen=True)
class TransportParams:
    """
    Normalized connection parameters handed to a transport.

    Attributes:
        method: HTTP method (upper case)
        protocol: "http" or "https"
        hostname: Target host
        port: Explicit port or None for the protocol default
        path: Path including query string
        headers: Request headers
        keep_alive: TCP keep-alive interval in ms (0 - disabled)
    """
    method: str
    protocol: str
    hostname: str
    path: str = '/'
    port: Optional[int] = None
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    keep_alive: int = 0

    @property
    def secure(self) -> bool:
        return self.protocol == 'https'

    @property
    def url(self) -> str:
        host = f"[{self.hostname}]" if ':' in self.hostname else self.hostname
        netloc = f"{host}:{self.port}" if self.port else host
        return f"{self.protocol}://{netloc}{self.path}"

    @classmethod
    def from_options(cls, options: RequestOptions) -> 'TransportParams':
        return cls(
            method=options.method,
            protocol=options.protocol,
            hostname=options.hostname,
            path=options.path,
            port=options.port,
            headers=options.headers,
            keep_alive=options.keep_alive,
        )


@dataclass(frozen=True)
class TransportHandlers:
    """Callbacks a transport uses to deliver its signals."""
    on_response: Callable[[int, Optional[str], Mapping[str, str]], Any]
    on_data: Callable[[Body], Any]
    on_end: Callable[[], Any]
    on_error: Callable[[BaseException], Any]


class Transport(ABC):
    """
    Базовый класс транспорта.

    Контракт:
        - не более одного response, затем data фрагменты по порядку и один end
        - либо ровно один error вместо response или посреди передачи
        - после abort() никаких сигналов

    Подклассы реализуют _send(); сигналы отправляются только через
    _emit_* методы, которые соблюдают контракт.
    """

    def __init__(self):
        self._params: Optional[TransportParams] = None
        self._handlers: Optional[TransportHandlers] = None
        self._body_parts: List[bytes] = []
        self._ended = False
        self._aborted = False
        self._responded = False
        self._finished = False

    @property
    def params(self) -> Optional[TransportParams]:
        return self._params

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def ended(self) -> bool:
        return self._ended

    def open(self, params: TransportParams, handlers: TransportHandlers) -> None:
        """
        Bind the transport to a request.

        Raises:
            RuntimeError: If the transport is already bound
        """
        if self._params is not None:
            raise RuntimeError(f"{self.__class__.__name__} is already bound to a request")
        self._params = params
        self._handlers = handlers

    def write(self, body: Body) -> None:
        """Buffer a part of the request body."""
        if self._ended or self._aborted:
            return
        if isinstance(body, str):
            body = body.encode('utf-8')
        self._body_parts.append(bytes(body))

    def end(self, body: Optional[Body] = None) -> None:
        """
        Finish the request side and start the exchange.

        Calling end() more than once, or after abort(), does nothing.
        """
        if self._params is None:
            raise RuntimeError(f"{self.__class__.__name__} is not bound to a request")
        if self._ended or self._aborted:
            return
        if body is not None:
            self.write(body)
        self._ended = True
        payload = b''.join(self._body_parts) if self._body_parts else None
        self._send(payload)

    def abort(self) -> None:
        """Cancel the exchange. Idempotent."""
        if self._aborted:
            return
        self._aborted = True
        self._cancel()

    @abstractmethod
    def _send(self, body: Optional[bytes]) -> None:
        """Perform the exchange and report it through the _emit_* methods."""
        pass

    def _cancel(self) -> None:
        """Stop an in-flight exchange."""
        pass

    # ==================== Emitting ====================

    @property
    def _silent(self) -> bool:
        return self._aborted or self._finished or self._handlers is None

    def _emit_response(self, status_code: int, reason: Optional[str],
                       headers: Mapping[str, str]) -> None:
        if self._silent or self._responded:
            return
        self._responded = True
        self._handlers.on_response(status_code, reason, headers)

    def _emit_data(self, chunk: Body) -> None:
        if self._silent or not self._responded or not chunk:
            return
        self._handlers.on_data(chunk)

    def _emit_end(self) -> None:
        if self._silent or not self._responded:
            return
        self._finished = True
        self._handlers.on_end()

    def _emit_error(self, exc: BaseException) -> None:
        if self._silent:
            return
        self._finished = True
        self._handlers.on_error(exc)
