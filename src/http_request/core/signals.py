"""
Signals published by a Request and the manager that dispatches them.

Receivers are connected per request (the request is the dispatch sender),
so observers of one request never see another request's signals. Receivers
get only the keyword arguments they declare; every signal also carries
``request``.

Example:
    >>> req = Request("https://api.example.com/users")
    >>> req.on(signals.chunk, lambda chunk: print(len(chunk)))
    >>> req.on(signals.state, lambda state, request: print(request.id, state))
"""

import logging
from typing import Any, List, Tuple

from pydispatch import dispatcher
from pydispatch.dispatcher import getAllReceivers, liveReceivers
from pydispatch.errors import DispatcherKeyError
from pydispatch.robustapply import robustApply

logger = logging.getLogger(__name__)

# Payload: state
state = "state"
# Payload: body (serialized payload written to the transport)
submit = "submit"
# Payload: status_code, status_message, headers
response = "response"
# Payload: chunk
chunk = "chunk"
# Payload: data
data = "data"
# Payload: error (message), exception
error = "error"
# No payload
abort = "abort"

ALL_SIGNALS: Tuple[str, ...] = (state, submit, response, chunk, data, error, abort)

_ALIASES = {
    "fail": error,
}


def resolve_signal(name: str) -> str:
    """
    Map a signal name (or alias) to its canonical name.

    Raises:
        ValueError: If the name is not a known signal
    """
    name = _ALIASES.get(name, name)
    if name not in ALL_SIGNALS:
        raise ValueError(
            f"Unknown signal: {name!r}. Available: {', '.join(ALL_SIGNALS)}"
        )
    return name


class SignalManager:
    """Publish/subscribe bound to a single sender."""

    def __init__(self, sender: Any):
        self.sender = sender

    def connect(self, receiver: Any, signal: str, **kwargs: Any) -> None:
        """
        Connect a receiver to a signal of this sender.

        Receivers are held strongly, so lambdas and closures stay alive
        until the sender settles or the receiver is disconnected.
        """
        kwargs.setdefault("sender", self.sender)
        kwargs.setdefault("weak", False)
        dispatcher.connect(receiver, resolve_signal(signal), **kwargs)

    def disconnect(self, receiver: Any, signal: str, **kwargs: Any) -> None:
        """Disconnect a receiver previously connected with the same arguments."""
        kwargs.setdefault("sender", self.sender)
        kwargs.setdefault("weak", False)
        try:
            dispatcher.disconnect(receiver, resolve_signal(signal), **kwargs)
        except DispatcherKeyError:
            logger.debug("Receiver %r was not connected to %r", receiver, signal)

    def send_catch_log(self, signal: str, **named: Any) -> List[Tuple[Any, Any]]:
        """
        Send a signal, catch exceptions raised by receivers and log them.

        Returns:
            List of (receiver, result) pairs; result is the exception
            instance for receivers that raised.
        """
        sender = self.sender
        responses: List[Tuple[Any, Any]] = []
        for receiver in list(liveReceivers(getAllReceivers(sender, signal))):
            try:
                result = robustApply(
                    receiver, signal=signal, sender=sender, request=sender, **named
                )
            except Exception as exc:
                result = exc
                logger.error(
                    "Error caught on signal handler: %(receiver)s",
                    {"receiver": receiver},
                    exc_info=True,
                )
            responses.append((receiver, result))
        return responses

    def disconnect_all(self) -> None:
        """Disconnect every receiver connected for this sender."""
        for signal in ALL_SIGNALS:
            for receiver in list(liveReceivers(getAllReceivers(self.sender, signal))):
                try:
                    dispatcher.disconnect(receiver, signal=signal, sender=self.sender, weak=False)
                except DispatcherKeyError:
                    # Connected for dispatcher.Any, not for this sender
                    continue
