from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet


class TransactionState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    PREPARING = "preparing"
    SIGNING = "signing"
    SENDING = "sending"
    CONFIRMING = "confirming"
    SUCCESS = "success"
    ERROR = "error"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES

    @property
    def is_cancellable(self) -> bool:
        return self in CANCELLABLE_STATES


TERMINAL_STATES: FrozenSet[TransactionState] = frozenset(
    {TransactionState.SUCCESS, TransactionState.ERROR, TransactionState.CANCELLED}
)

# Cancellation is honoured only before the transaction reaches the network.
CANCELLABLE_STATES: FrozenSet[TransactionState] = frozenset(
    {TransactionState.PREPARING, TransactionState.SIGNING}
)

TRANSITIONS: Dict[TransactionState, FrozenSet[TransactionState]] = {
    TransactionState.IDLE: frozenset({TransactionState.VALIDATING}),
    TransactionState.VALIDATING: frozenset({TransactionState.PREPARING, TransactionState.ERROR}),
    TransactionState.PREPARING: frozenset(
        {TransactionState.SIGNING, TransactionState.ERROR, TransactionState.CANCELLED}
    ),
    TransactionState.SIGNING: frozenset(
        {TransactionState.SENDING, TransactionState.ERROR, TransactionState.CANCELLED}
    ),
    TransactionState.SENDING: frozenset({TransactionState.CONFIRMING, TransactionState.ERROR}),
    TransactionState.CONFIRMING: frozenset({TransactionState.SUCCESS, TransactionState.ERROR}),
    TransactionState.SUCCESS: frozenset(),
    TransactionState.ERROR: frozenset(),
    TransactionState.CANCELLED: frozenset(),
}


def can_transition(current: TransactionState, target: TransactionState) -> bool:
    """``IDLE`` is always reachable: every new attempt starts with a reset."""
    if target is TransactionState.IDLE:
        return True
    return target in TRANSITIONS[current]
