"""Map collaborator exceptions onto the transaction error taxonomy."""
from __future__ import annotations

from typing import Tuple

import trio

from errors import TransactionError, TransactionErrorKind

# Checked in order; the first matching phrase wins.
_MESSAGE_RULES: Tuple[Tuple[Tuple[str, ...], TransactionErrorKind], ...] = (
    (("rejected", "denied by user"), TransactionErrorKind.USER_REJECTED),
    (("insufficient funds", "insufficient lamports"), TransactionErrorKind.INSUFFICIENT_FUNDS),
    (("timeout", "timed out"), TransactionErrorKind.TIMEOUT_ERROR),
    (("blockhash", "block height exceeded", "expired"), TransactionErrorKind.BLOCKHASH_EXPIRED),
    (("network", "connection", "fetch failed"), TransactionErrorKind.NETWORK_ERROR),
)


def classify_message(message: str) -> TransactionErrorKind:
    lowered = (message or "").lower()
    for phrases, kind in _MESSAGE_RULES:
        if any(phrase in lowered for phrase in phrases):
            return kind
    return TransactionErrorKind.TRANSACTION_FAILED


def classify_exception(exc: BaseException) -> TransactionError:
    """Wrap ``exc`` in a typed ``TransactionError``.

    Already-typed errors pass through untouched. For everything else the
    original text is kept in ``details`` and the user-facing message is the
    default one for the detected kind.
    """
    if isinstance(exc, TransactionError):
        return exc
    details = str(exc) or type(exc).__name__
    if isinstance(exc, (trio.TooSlowError, TimeoutError)):
        return TransactionError(TransactionErrorKind.TIMEOUT_ERROR, details=details)
    if isinstance(exc, ConnectionError):
        return TransactionError(TransactionErrorKind.NETWORK_ERROR, details=details)
    return TransactionError(classify_message(str(exc)), details=details)
