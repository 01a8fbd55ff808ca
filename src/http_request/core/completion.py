"""Exactly-once settlement of a request outcome."""

import asyncio
import logging
from typing import Any, Callable, List, Optional

from .exceptions import RequestError, RequestPendingError

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[RequestError], Any], Any]


class Completion:
    """
    Settles once with (error, data) and delivers it to every continuation.

    The first settle() wins; later calls return False and change nothing.
    The outcome is buffered: continuations added after settlement are called
    immediately, and result()/future() work with no continuation at all.

    Example:
        >>> completion = Completion()
        >>> completion.add_callback(lambda error, data: print(error, data))
        >>> completion.settle(None, {"ok": True})
        None {'ok': True}
        True
        >>> completion.settle(None, "late")
        False
    """

    def __init__(self):
        self._settled = False
        self._error: Optional[RequestError] = None
        self._data: Any = None
        self._callbacks: List[Callback] = []
        self._future: Optional[asyncio.Future] = None

    @property
    def settled(self) -> bool:
        return self._settled

    @property
    def error(self) -> Optional[RequestError]:
        return self._error

    @property
    def data(self) -> Any:
        return self._data

    def add_callback(self, callback: Callback) -> None:
        """
        Register a continuation called as callback(error, data).

        Raises:
            TypeError: If callback is not callable
        """
        if not callable(callback):
            raise TypeError(f"Callback must be callable, got {type(callback).__name__}")
        if self._settled:
            self._invoke(callback)
        else:
            self._callbacks.append(callback)

    def settle(self, error: Optional[RequestError], data: Any = None) -> bool:
        """
        Settle the outcome.

        Returns:
            True if this call settled the outcome, False if already settled
        """
        if self._settled:
            return False

        self._settled = True
        self._error = error
        self._data = None if error is not None else data

        if error is not None and not self._callbacks and self._future is None:
            logger.debug("Settled with no continuation attached: %s", error)

        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            self._invoke(callback)

        if self._future is not None:
            self._resolve_future(self._future)

        return True

    def result(self) -> Any:
        """
        Return the settled data or raise the settled error.

        Raises:
            RequestPendingError: If not settled yet
            RequestError: The settled error
        """
        if not self._settled:
            raise RequestPendingError()
        if self._error is not None:
            raise self._error
        return self._data

    def future(self) -> asyncio.Future:
        """
        Future bound to the running loop, resolved on settlement.

        Must be called from a coroutine.
        """
        if self._future is None:
            self._future = asyncio.get_running_loop().create_future()
            if self._settled:
                self._resolve_future(self._future)
        return self._future

    def _resolve_future(self, future: asyncio.Future) -> None:
        if future.done():
            return
        if self._error is not None:
            future.set_exception(self._error)
        else:
            future.set_result(self._data)

    def _invoke(self, callback: Callback) -> None:
        try:
            callback(self._error, self._data)
        except Exception:
            logger.error(
                "Error caught in completion callback: %(callback)s",
                {"callback": callback},
                exc_info=True,
            )
