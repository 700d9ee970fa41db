"""Central exception hierarchy and error taxonomies for the exchange core."""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ExchangeError(Exception):
    """Base exception for all custom errors raised by the exchange core."""


class ConfigurationError(ExchangeError):
    """Raised when configuration loading or validation fails."""


class DependencyError(ExchangeError):
    """Raised when dependency wiring or injection fails."""


class CommandError(ExchangeError):
    """Raised when a client command cannot be processed correctly."""


class LedgerError(ExchangeError):
    """Raised when the balance ledger cannot serve a request."""


class ValidationErrorKind(str, Enum):
    """Pre-flight parameter defects reported by the validator."""

    INVALID_ADDRESS = "INVALID_ADDRESS"
    INVALID_RECIPIENT_ADDRESS = "INVALID_RECIPIENT_ADDRESS"
    INVALID_NETWORK = "INVALID_NETWORK"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    NETWORK_MISMATCH = "NETWORK_MISMATCH"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    UNSUPPORTED_TOKEN = "UNSUPPORTED_TOKEN"
    SELF_TRANSFER = "SELF_TRANSFER"


VALIDATION_ERROR_MESSAGES = {
    ValidationErrorKind.INVALID_ADDRESS: "Invalid wallet address format. Please check your wallet connection.",
    ValidationErrorKind.INVALID_RECIPIENT_ADDRESS: "Invalid recipient address format. Please verify the address.",
    ValidationErrorKind.INVALID_NETWORK: "Unsupported network. Please select a valid SVM network.",
    ValidationErrorKind.INVALID_AMOUNT: "Invalid amount. Please enter a positive number.",
    ValidationErrorKind.NETWORK_MISMATCH: "Network mismatch. Source and destination networks are incompatible.",
    ValidationErrorKind.INSUFFICIENT_BALANCE: "Insufficient balance for this transaction.",
    ValidationErrorKind.UNSUPPORTED_TOKEN: "Token is not supported on the selected network.",
    ValidationErrorKind.SELF_TRANSFER: "Sender and recipient cannot be the same.",
}


class TransactionErrorKind(str, Enum):
    """Failures that occur while a transaction attempt is executing."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    USER_REJECTED = "USER_REJECTED"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    NETWORK_ERROR = "NETWORK_ERROR"
    TRANSACTION_FAILED = "TRANSACTION_FAILED"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    BLOCKHASH_EXPIRED = "BLOCKHASH_EXPIRED"


TRANSACTION_ERROR_MESSAGES = {
    TransactionErrorKind.VALIDATION_FAILED: "Transaction parameters are invalid. Please check your inputs.",
    TransactionErrorKind.USER_REJECTED: "Transaction was cancelled by user.",
    TransactionErrorKind.INSUFFICIENT_FUNDS: "Insufficient balance to complete this transaction.",
    TransactionErrorKind.NETWORK_ERROR: "Network error occurred. Please check your connection and try again.",
    TransactionErrorKind.TRANSACTION_FAILED: "Transaction failed to execute. Please try again.",
    TransactionErrorKind.TIMEOUT_ERROR: "Transaction timed out. Please try again.",
    TransactionErrorKind.BLOCKHASH_EXPIRED: "Transaction expired. Please try again with a fresh transaction.",
}

# Kinds a caller may reasonably retry with the same parameters.
_RETRYABLE_KINDS = frozenset(
    {
        TransactionErrorKind.NETWORK_ERROR,
        TransactionErrorKind.TIMEOUT_ERROR,
        TransactionErrorKind.BLOCKHASH_EXPIRED,
    }
)


class ValidationError(ExchangeError):
    """A single validation defect.

    The validator returns these inside a result object and never raises them;
    the class derives from ``Exception`` so callers can still raise one when a
    defect has to cross an API boundary.
    """

    def __init__(
        self,
        kind: ValidationErrorKind,
        message: Optional[str] = None,
        field: Optional[str] = None,
    ) -> None:
        self.kind = ValidationErrorKind(kind)
        self.message = message or VALIDATION_ERROR_MESSAGES.get(self.kind, "Validation error")
        self.field = field
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message, "field": self.field}

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ValidationError):
            return NotImplemented
        return (self.kind, self.message, self.field) == (other.kind, other.message, other.field)

    def __hash__(self) -> int:
        return hash((self.kind, self.message, self.field))

    def __repr__(self) -> str:
        return f"ValidationError({self.kind.value}, {self.message!r}, field={self.field!r})"


class TransactionError(ExchangeError):
    """Typed execution failure.

    ``message`` is always safe to show to a user. The underlying collaborator
    text, when there is one, is kept in ``details`` for diagnostics only.
    """

    def __init__(
        self,
        kind: TransactionErrorKind,
        message: Optional[str] = None,
        *,
        signature: Optional[str] = None,
        details: Optional[str] = None,
        retryable: Optional[bool] = None,
    ) -> None:
        self.kind = TransactionErrorKind(kind)
        self.message = message or TRANSACTION_ERROR_MESSAGES.get(self.kind, "Transaction error")
        self.signature = signature
        self.details = details
        self.retryable = self.kind in _RETRYABLE_KINDS if retryable is None else retryable
        super().__init__(self.message)

    @property
    def type(self) -> TransactionErrorKind:
        return self.kind

    def to_dict(self) -> dict:
        return {
            "type": self.kind.value,
            "message": self.message,
            "signature": self.signature,
            "details": self.details,
            "retryable": self.retryable,
        }

    def __repr__(self) -> str:
        return f"TransactionError({self.kind.value}, {self.message!r})"
