"""
Request lifecycle states.

Transitions:
    - IDLE -> PENDING: submit()
    - PENDING -> RECEIVING: transport emitted a response
    - RECEIVING -> RECEIVED: end of stream, status < 400
    - RECEIVING -> FAILED: end of stream with status >= 400, or decode failure
    - PENDING/RECEIVING -> FAILED: transport error
    - IDLE/PENDING/RECEIVING -> ABORTED: abort()

RECEIVED, FAILED and ABORTED are terminal.
"""

from enum import Enum
from typing import Dict, FrozenSet


class RequestState(str, Enum):
    """Request lifecycle states."""
    IDLE = "idle"            # Constructed, not submitted
    PENDING = "pending"      # Submitted, waiting for the response
    RECEIVING = "receiving"  # Response started, body streaming
    RECEIVED = "received"    # Completed successfully
    FAILED = "failed"        # Transport, protocol or decode failure
    ABORTED = "aborted"      # Cancelled by the caller

    @property
    def is_terminal(self) -> bool:
        """True for states with no outgoing transitions."""
        return self in TERMINAL_STATES

    def __str__(self) -> str:
        return self.value


TERMINAL_STATES: FrozenSet[RequestState] = frozenset({
    RequestState.RECEIVED,
    RequestState.FAILED,
    RequestState.ABORTED,
})

TRANSITIONS: Dict[RequestState, FrozenSet[RequestState]] = {
    RequestState.IDLE: frozenset({RequestState.PENDING, RequestState.ABORTED}),
    RequestState.PENDING: frozenset({
        RequestState.RECEIVING,
        RequestState.FAILED,
        RequestState.ABORTED,
    }),
    RequestState.RECEIVING: frozenset({
        RequestState.RECEIVED,
        RequestState.FAILED,
        RequestState.ABORTED,
    }),
    RequestState.RECEIVED: frozenset(),
    RequestState.FAILED: frozenset(),
    RequestState.ABORTED: frozenset(),
}


def can_transition(current: RequestState, target: RequestState) -> bool:
    """
    Check whether the lifecycle allows moving from current to target.

    Example:
        >>> can_transition(RequestState.IDLE, RequestState.PENDING)
        True
        >>> can_transition(RequestState.RECEIVED, RequestState.ABORTED)
        False
    """
    return target in TRANSITIONS[current]
