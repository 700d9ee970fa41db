"""Transaction lifecycle: state machine, controller and error classification."""

from .classify import classify_exception, classify_message
from .handler import (
    CROSS_NETWORK_UNSUPPORTED_MESSAGE,
    BalanceProvider,
    InvalidTransitionError,
    PendingTransaction,
    TransactionHandler,
    TransactionOptions,
    TransactionResult,
    TransactionSubmitter,
    TransferIntent,
    UnsignedTransfer,
    create_transaction_handler,
)
from .local import LocalSubmitter, compute_transaction_signature
from .states import CANCELLABLE_STATES, TERMINAL_STATES, TransactionState, can_transition

__all__ = [
    "classify_exception",
    "classify_message",
    "CROSS_NETWORK_UNSUPPORTED_MESSAGE",
    "BalanceProvider",
    "InvalidTransitionError",
    "PendingTransaction",
    "TransactionHandler",
    "TransactionOptions",
    "TransactionResult",
    "TransactionSubmitter",
    "TransferIntent",
    "UnsignedTransfer",
    "create_transaction_handler",
    "LocalSubmitter",
    "compute_transaction_signature",
    "CANCELLABLE_STATES",
    "TERMINAL_STATES",
    "TransactionState",
    "can_transition",
]
