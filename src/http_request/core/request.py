# src/http_request/core/request.py
import logging
import time
import uuid
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple, Type, Union

from . import signals
from .chunks import Chunk, ChunkAccumulator
from .completion import Callback, Completion
from .config import RequestOptions
from .exceptions import (
    RequestAbortedError,
    RequestError,
    ValidationError,
    classify_transport_exception,
)
from .logging import RequestLogger, get_request_logger
from .parser import build_outcome, reason_phrase
from .state import RequestState, can_transition
from ..transports import Transport, TransportHandlers, TransportParams, resolve_transport
from ..utils.serialization import body_size, serialize_body

logger = logging.getLogger(__name__)


class Request:
    """
    A single outbound HTTP(S) request and its lifecycle.

    States: idle -> pending -> receiving -> received | failed, and aborted
    from any non-terminal state. The outcome settles exactly once and is
    delivered to the callback as callback(error, data), to observers as a
    `data` or `error` signal, and to result()/await.

    Example:
        >>> def done(error, data):
        ...     print(error or data)
        >>> req = Request({"url": "https://api.example.com/users", "dataType": "json"}, done)
        >>> req.on("chunk", lambda chunk: print(len(chunk), "bytes"))
        >>> req.submit()
        >>> req.state
        <RequestState.RECEIVED: 'received'>

        >>> # asyncio
        >>> users = await Request("https://api.example.com/users",
        ...                       transport="httpx", data_type="json").submit()
    """

    def __init__(
        self,
        options: Union[str, Mapping[str, Any], RequestOptions, None] = None,
        callback: Optional[Callback] = None,
        *,
        transport: Union[str, Transport, Type[Transport], None] = None,
        **overrides: Any
    ):
        """
        Initialize request.

        Args:
            options: URL string, options mapping or RequestOptions
            callback: Continuation called once as callback(error, data)
            transport: "requests" (default), "httpx", a Transport class or instance
            **overrides: Options overriding those in `options`

        Raises:
            ValidationError: Invalid options, callback or transport
        """
        self.options = RequestOptions.create(options, **overrides)

        if callback is not None and not callable(callback):
            raise ValidationError("callback must be callable", field='callback')

        try:
            self._transport = resolve_transport(transport)
        except ValueError as e:
            raise ValidationError(str(e), field='transport') from e

        self.id = str(uuid.uuid4())
        self._state = RequestState.IDLE
        self._signals = signals.SignalManager(self)
        self._chunks = ChunkAccumulator(self.options.encoding)
        self._completion = Completion()

        self._data: Any = None
        self._error: Optional[str] = None
        self._exception: Optional[RequestError] = None
        self._status_code: Optional[int] = None
        self._status_message: Optional[str] = None
        self._response_headers: Mapping[str, str] = MappingProxyType({})

        self._time_submit: Optional[float] = None
        self._time_response: Optional[float] = None
        self._time_data: Optional[float] = None
        self._time_abort: Optional[float] = None

        self._logger: Optional[RequestLogger] = None
        if self.options.logging:
            self._logger = get_request_logger(
                self.options.logging,
                name=f"http_request.{self.options.hostname}"
            )

        if callback is not None:
            self._completion.add_callback(callback)

        self._transport.open(
            TransportParams.from_options(self.options),
            TransportHandlers(
                on_response=self._handle_response,
                on_data=self._handle_data,
                on_end=self._handle_end,
                on_error=self._handle_error,
            )
        )

    def __repr__(self) -> str:
        return f"<Request {self.options.method} {self.url} [{self._state.value}]>"

    def __await__(self):
        return self.wait().__await__()

    # ==================== Read-only state ====================

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def url(self) -> str:
        return self.options.target_url

    @property
    def method(self) -> str:
        return self.options.method

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def data(self) -> Any:
        """Decoded payload; set only on successful completion."""
        return self._data

    @property
    def error(self) -> Optional[str]:
        """Failure message; set only on failed completion."""
        return self._error

    @property
    def exception(self) -> Optional[RequestError]:
        """Typed exception matching `error`."""
        return self._exception

    @property
    def status_code(self) -> Optional[int]:
        return self._status_code

    @property
    def status_message(self) -> Optional[str]:
        return self._status_message

    @property
    def response_headers(self) -> Mapping[str, str]:
        return self._response_headers

    @property
    def chunks(self) -> Tuple[Chunk, ...]:
        """Received body fragments in arrival order."""
        return self._chunks.chunks

    @property
    def time_submit(self) -> Optional[float]:
        return self._time_submit

    @property
    def time_response(self) -> Optional[float]:
        return self._time_response

    @property
    def time_data(self) -> Optional[float]:
        return self._time_data

    @property
    def time_abort(self) -> Optional[float]:
        return self._time_abort

    @property
    def elapsed(self) -> Optional[float]:
        """Seconds from submit to end of stream."""
        if self._time_submit is None or self._time_data is None:
            return None
        return self._time_data - self._time_submit

    @property
    def is_terminal(self) -> bool:
        return self._state.is_terminal

    @property
    def is_settled(self) -> bool:
        return self._completion.settled

    # ==================== Observers ====================

    def on(self, signal: str, receiver: Callable[..., Any]) -> 'Request':
        """
        Subscribe to a signal of this request.

        Receivers get only the keyword arguments they declare, e.g.
        ``lambda chunk: ...`` for "chunk" or ``lambda state, request: ...``.
        Subscribing on a terminal request does nothing: it will not publish
        again.

        Raises:
            ValueError: Unknown signal name
        """
        signal = signals.resolve_signal(signal)
        if self.is_terminal:
            logger.debug("%r is terminal, %r receiver not connected", self, signal)
            return self
        self._signals.connect(receiver, signal)
        return self

    def off(self, signal: str, receiver: Callable[..., Any]) -> 'Request':
        """Unsubscribe a receiver."""
        self._signals.disconnect(receiver, signal)
        return self

    # ==================== Public operations ====================

    def submit(self, body: Any = None, callback: Optional[Callback] = None) -> 'Request':
        """
        Send the request.

        Only the first call has an effect; later calls return the same
        request without writing anything.

        Args:
            body: Request body. Ignored for GET. bytes/str are sent as is,
                  dicts, lists and tuples as JSON.
            callback: Continuation called once as callback(error, data)

        Returns:
            self
        """
        if self._time_submit is not None or self._state is not RequestState.IDLE:
            return self

        if callback is not None:
            self._completion.add_callback(callback)

        payload = serialize_body(self.options.method, body)

        self._time_submit = time.time()
        self._transition(RequestState.PENDING)
        if self._state is not RequestState.PENDING:
            # Aborted by a state observer
            return self

        self._signals.send_catch_log(signals.submit, body=payload)

        if self._logger:
            self._logger.info(
                "Request submitted",
                request_id=self.id,
                method=self.options.method,
                url=self.url,
                headers=dict(self.options.headers),
                body_size=body_size(payload),
            )

        if payload is not None:
            self._transport.write(payload)
        self._transport.end()
        return self

    def abort(self) -> 'Request':
        """
        Cancel the request.

        Moves a non-terminal request to `aborted` immediately and settles the
        callback with RequestAbortedError. Signals the transport delivers
        afterwards are ignored. No-op on terminal requests.

        Returns:
            self
        """
        if self.is_terminal:
            return self

        self._transport.abort()

        if self._time_abort is None:
            self._time_abort = time.time()
        self._chunks.freeze()

        self._transition(RequestState.ABORTED)
        self._completion.settle(RequestAbortedError(), None)
        self._signals.send_catch_log(signals.abort)

        if self._logger:
            self._logger.info(
                "Request aborted",
                request_id=self.id,
                method=self.options.method,
                url=self.url,
                received_chunks=len(self._chunks),
            )

        self._release()
        return self

    def result(self) -> Any:
        """
        Settled data, or raise the settled exception.

        Raises:
            RequestPendingError: Not settled yet
            RequestError: The failure (RequestAbortedError after abort())
        """
        return self._completion.result()

    async def wait(self) -> Any:
        """Wait for settlement; returns data or raises the failure."""
        return await self._completion.future()

    # ==================== Transitions ====================

    def _transition(self, target: RequestState) -> bool:
        if not can_transition(self._state, target):
            logger.debug("%r: ignoring transition to %s", self, target.value)
            return False
        self._state = target
        self._signals.send_catch_log(signals.state, state=target)
        return True

    def _succeed(self, data: Any) -> None:
        if not can_transition(self._state, RequestState.RECEIVED):
            logger.debug("%r: ignoring outcome", self)
            return
        # State observers see data once the request is received
        self._data = data
        self._transition(RequestState.RECEIVED)
        self._completion.settle(None, data)
        self._signals.send_catch_log(signals.data, data=data)

        if self._logger:
            self._logger.info(
                "Request completed",
                request_id=self.id,
                method=self.options.method,
                url=self.url,
                status_code=self._status_code,
                duration_ms=self._duration_ms(),
                response_size=self._chunks.size,
            )

        self._release()

    def _fail(self, exc: RequestError) -> None:
        if not can_transition(self._state, RequestState.FAILED):
            logger.debug("%r: ignoring failure %s", self, type(exc).__name__)
            return
        self._error = exc.message
        self._exception = exc
        self._transition(RequestState.FAILED)
        self._completion.settle(exc, None)
        self._signals.send_catch_log(signals.error, error=exc.message, exception=exc)

        if self._logger:
            self._logger.warning(
                "Request failed",
                request_id=self.id,
                method=self.options.method,
                url=self.url,
                status_code=self._status_code,
                error=exc.message,
                error_type=type(exc).__name__,
                duration_ms=self._duration_ms(),
            )

        self._release()

    def _release(self) -> None:
        """Drop observers once nothing more will be published."""
        self._signals.disconnect_all()

    def _duration_ms(self) -> Optional[float]:
        if self._time_submit is None:
            return None
        return round((time.time() - self._time_submit) * 1000, 2)

    # ==================== Transport handlers ====================

    def _handle_response(self, status_code: int, status_message: Optional[str],
                         headers: Optional[Mapping[str, str]] = None) -> None:
        if self._state is not RequestState.PENDING:
            logger.debug("%r: ignoring response signal", self)
            return

        self._status_code = int(status_code)
        self._status_message = status_message or reason_phrase(self._status_code)
        self._response_headers = MappingProxyType(dict(headers or {}))
        self._time_response = time.time()

        if not self._transition(RequestState.RECEIVING) or self._state is not RequestState.RECEIVING:
            return

        if self._logger:
            self._logger.debug(
                "Response received",
                request_id=self.id,
                url=self.url,
                status_code=self._status_code,
                status_message=self._status_message,
            )

        self._signals.send_catch_log(
            signals.response,
            status_code=self._status_code,
            status_message=self._status_message,
            headers=self._response_headers,
        )

    def _handle_data(self, chunk: Chunk) -> None:
        if self._state is not RequestState.RECEIVING:
            logger.debug("%r: ignoring data signal", self)
            return

        fragment = self._chunks.append(chunk)
        if not fragment:
            return

        if (self._logger and self._logger.config.log_chunks
                and self._logger.is_enabled_for(logging.DEBUG)):
            self._logger.debug(
                "Chunk received",
                request_id=self.id,
                chunk_size=len(fragment),
                received_chunks=len(self._chunks),
            )

        self._signals.send_catch_log(signals.chunk, chunk=fragment)

    def _handle_end(self) -> None:
        if self._state is not RequestState.RECEIVING:
            logger.debug("%r: ignoring end signal", self)
            return

        self._chunks.freeze()
        if self._time_data is None:
            self._time_data = time.time()

        outcome = build_outcome(
            self._status_code,
            self._status_message,
            self._chunks,
            self.options.data_type,
        )
        if outcome.failed:
            self._fail(outcome.error)
        else:
            self._succeed(outcome.data)

    def _handle_error(self, exc: BaseException) -> None:
        if self._state not in (RequestState.PENDING, RequestState.RECEIVING):
            logger.debug("%r: ignoring error signal: %s", self, exc)
            return

        response_started = self._state is RequestState.RECEIVING
        self._chunks.freeze()
        self._fail(classify_transport_exception(exc, self.url, response_started=response_started))


def request(
    options: Union[str, Mapping[str, Any], RequestOptions, None] = None,
    body: Any = None,
    callback: Optional[Callback] = None,
    **kwargs: Any
) -> Request:
    """
    Create and submit a request in one call.

    Example:
        >>> req = request("https://api.example.com/users", data_type="json")
        >>> req.result()
        [{'id': 1, 'name': 'John'}]
    """
    return Request(options, callback, **kwargs).submit(body)
