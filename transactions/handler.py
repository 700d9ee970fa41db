"""Transaction lifecycle controller.

Drives one transfer attempt through validation, balance verification and the
sign/broadcast/confirm hand-off, publishing every state change to listeners.
Signing and network transport live behind the ``TransactionSubmitter``
protocol; this module only sequences the calls and classifies what comes back.
"""
from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

import config
from errors import (
    ExchangeError,
    TransactionError,
    TransactionErrorKind,
    ValidationError,
)
from validation import (
    AccountAddress,
    NetworkId,
    NetworkRegistry,
    ValidationResult,
    default_registry,
    describe_error,
    from_smallest_units,
    sanitize_address,
    sanitize_amount,
    to_smallest_units,
    validate_cross_network_trade,
    validate_transfer,
)

from .classify import classify_exception
from .states import TransactionState, can_transition

logger = logging.getLogger(__name__)

Listener = Callable[[TransactionState, Dict[str, Any]], Any]

SUCCESS_MESSAGE = "Transaction completed successfully"
CANCELLED_MESSAGE = "Transaction was cancelled."
CROSS_NETWORK_UNSUPPORTED_MESSAGE = (
    "Cross-network trading is not yet supported. Please use single-network transactions."
)


class BalanceProvider(Protocol):
    async def get_balance(self, address: str) -> int:
        ...


class TransactionSubmitter(Protocol):
    async def sign(self, transaction: "UnsignedTransfer") -> Any:
        ...

    async def broadcast(self, signed: Any) -> str:
        ...

    async def confirm(self, signature: str, *, timeout: float) -> None:
        ...


class InvalidTransitionError(ExchangeError):
    """Raised when the controller attempts a transition the state machine forbids."""


class _AttemptAborted(Exception):
    """The attempt was cancelled or superseded while suspended."""


@dataclass(frozen=True)
class TransferIntent:
    sender: AccountAddress
    recipient: AccountAddress
    amount: Decimal
    network: NetworkId
    decimals: int

    def __post_init__(self) -> None:
        if self.sender == self.recipient:
            raise ValueError("Sender and recipient must differ.")

    @property
    def smallest_units(self) -> int:
        return to_smallest_units(self.amount, self.decimals)


@dataclass(frozen=True)
class UnsignedTransfer:
    """Transfer handed to the submitter for signing."""

    transaction_id: str
    sender: str
    recipient: str
    units: int
    network: str
    decimals: int
    max_retries: int
    created_at: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transaction_id": self.transaction_id,
            "sender": self.sender,
            "recipient": self.recipient,
            "units": self.units,
            "network": self.network,
            "decimals": self.decimals,
            "max_retries": self.max_retries,
            "created_at": self.created_at,
        }


@dataclass
class PendingTransaction:
    """The single in-flight transaction handle owned by a controller."""

    intent: TransferIntent
    transaction_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: float = field(default_factory=time.time)
    signature: Optional[str] = None

    def build(self, max_retries: int) -> UnsignedTransfer:
        return UnsignedTransfer(
            transaction_id=self.transaction_id,
            sender=str(self.intent.sender),
            recipient=str(self.intent.recipient),
            units=self.intent.smallest_units,
            network=self.intent.network.value,
            decimals=self.intent.decimals,
            max_retries=max_retries,
            created_at=self.created_at,
        )


@dataclass(frozen=True)
class TransactionOptions:
    timeout: float = 60.0
    max_retries: int = 3
    default_decimals: int = 9
    default_network: str = config.DEFAULT_NETWORK

    @classmethod
    def from_settings(cls, settings: Optional[config.Settings] = None) -> "TransactionOptions":
        settings = settings or config.settings
        return cls(
            timeout=settings.transactions.timeout,
            max_retries=settings.transactions.max_retries,
            default_decimals=settings.validation.default_decimals,
            default_network=settings.transactions.default_network,
        )


@dataclass
class TransactionResult:
    success: bool
    message: str
    signature: Optional[str] = None
    error: Optional[TransactionError] = None
    validation_errors: List[ValidationError] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.signature is not None:
            payload["signature"] = self.signature
        if self.error is not None:
            payload["error"] = self.error.to_dict()
        if self.validation_errors:
            payload["validation_errors"] = [err.to_dict() for err in self.validation_errors]
        return payload


class TransactionHandler:
    """Stateful orchestrator for a single transaction attempt at a time.

    Intended for a single event loop: ``execute`` suspends at the ledger and
    submitter calls, and ``cancel`` may be called from another task while it is
    suspended. Concurrent ``execute`` calls on one instance are not serialised;
    a newer attempt supersedes an older one.
    """

    def __init__(
        self,
        ledger: BalanceProvider,
        submitter: Optional[TransactionSubmitter] = None,
        *,
        registry: Optional[NetworkRegistry] = None,
        options: Optional[TransactionOptions] = None,
        default_sender: Optional[str] = None,
    ) -> None:
        self.ledger = ledger
        self.submitter = submitter
        self.registry = registry or default_registry()
        self.options = options or TransactionOptions.from_settings()
        self.default_sender = default_sender
        self._state = TransactionState.IDLE
        self._current: Optional[PendingTransaction] = None
        self._listeners: List[Listener] = []
        self._attempt = 0

    # -- observers -------------------------------------------------------

    def add_listener(self, listener: Listener) -> None:
        if not callable(listener):
            raise TypeError("Listener must be callable")
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, state: TransactionState, data: Optional[Dict[str, Any]] = None) -> None:
        if not can_transition(self._state, state):
            raise InvalidTransitionError(f"Illegal transition {self._state.value} -> {state.value}")
        previous, self._state = self._state, state
        logger.debug("Transaction state %s -> %s", previous.value, state.value)
        payload = dict(data or {})
        # Snapshot so listeners may unsubscribe themselves while being notified.
        for listener in list(self._listeners):
            try:
                listener(state, payload)
            except Exception:
                logger.exception("Error in transaction state listener %r", listener)

    # -- accessors -------------------------------------------------------

    def get_state(self) -> TransactionState:
        return self._state

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def current_transaction(self) -> Optional[PendingTransaction]:
        return self._current

    def _begin_attempt(self) -> int:
        self._attempt += 1
        self._current = None
        self._emit(TransactionState.IDLE)
        return self._attempt

    def _is_active(self, attempt: int) -> bool:
        return attempt == self._attempt and self._state is not TransactionState.CANCELLED

    def _ensure_active(self, attempt: int) -> None:
        if not self._is_active(attempt):
            raise _AttemptAborted()

    # -- validation ------------------------------------------------------

    def validate_transaction(self, params: Mapping[str, Any]) -> ValidationResult:
        self._emit(TransactionState.VALIDATING)
        return validate_transfer(params, self.registry)

    def validate_cross_network_transaction(self, params: Mapping[str, Any]) -> ValidationResult:
        self._emit(TransactionState.VALIDATING)
        return validate_cross_network_trade(params, self.registry)

    def _sanitize(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        decimals = params.get("decimals")
        if decimals is None:
            decimals = self.options.default_decimals
        return {
            **params,
            "from": sanitize_address(params.get("from") or self.default_sender),
            "to": sanitize_address(params.get("to")),
            "amount": sanitize_amount(params.get("amount"), decimals),
            "network": params.get("network") or self.options.default_network,
            "decimals": decimals,
        }

    def _intent_from(self, sanitized: Mapping[str, Any]) -> TransferIntent:
        return TransferIntent(
            sender=AccountAddress.from_string(sanitized["from"]),
            recipient=AccountAddress.from_string(sanitized["to"]),
            amount=sanitized["amount"],
            network=self.registry.canonicalize(sanitized["network"]),
            decimals=sanitized["decimals"],
        )

    @staticmethod
    def _validation_failure(result: ValidationResult) -> TransactionError:
        return TransactionError(
            TransactionErrorKind.VALIDATION_FAILED,
            ", ".join(result.messages()),
            details="; ".join(f"{err.field}: {err.kind.value}" for err in result.errors),
        )

    # -- execution -------------------------------------------------------

    async def execute(self, params: Optional[Mapping[str, Any]]) -> TransactionResult:
        """Run one transfer attempt end to end. Never raises.

        An attempt that is cancelled or superseded before broadcast stops and
        reports as cancelled. One superseded after broadcast still waits for
        its confirmation and returns the real outcome, but no longer drives
        the state machine, which now belongs to the newer attempt.
        """
        attempt = self._begin_attempt()
        validation_errors: List[ValidationError] = []
        pending: Optional[PendingTransaction] = None
        if not isinstance(params, Mapping):
            params = {}
        try:
            sanitized = self._sanitize(params)
            validation = self.validate_transaction(sanitized)
            if not validation.valid:
                validation_errors = validation.errors
                raise self._validation_failure(validation)

            pending = PendingTransaction(intent=self._intent_from(sanitized))
            self._current = pending
            self._emit(TransactionState.PREPARING, {"transaction_id": pending.transaction_id})

            await self.check_balance(pending.intent)
            self._ensure_active(attempt)

            signature = await self.create_and_send_transaction(pending, attempt)
            if self._is_active(attempt):
                self._emit(TransactionState.SUCCESS, {"signature": signature})
                self._current = None
            logger.info("Transaction %s confirmed with signature %s", pending.transaction_id, signature)
            return TransactionResult(success=True, message=SUCCESS_MESSAGE, signature=signature)

        except _AttemptAborted:
            return self._cancelled_result()

        except Exception as exc:
            active = self._is_active(attempt)
            broadcast = pending is not None and pending.signature is not None
            if not active and not broadcast:
                logger.info("Discarding failure of an abandoned attempt: %s", exc)
                return self._cancelled_result()
            error = classify_exception(exc)
            if error.signature is None and pending is not None:
                error.signature = pending.signature
            logger.warning(
                "Transaction failed (%s): %s", error.kind.value, error.details or error.message
            )
            if active:
                self._current = None
                self._emit_error(error)
            return TransactionResult(
                success=False,
                message=describe_error(error),
                signature=error.signature,
                error=error,
                validation_errors=list(validation_errors),
            )

    def _emit_error(self, error: TransactionError) -> None:
        if not can_transition(self._state, TransactionState.ERROR):
            logger.warning("Not reporting %s from state %s", error.kind.value, self._state.value)
            return
        self._emit(TransactionState.ERROR, {"error": error})

    async def execute_cross_network_trade(self, params: Optional[Mapping[str, Any]]) -> TransactionResult:
        """Validate a cross-network trade; execution itself is not available yet."""
        self._begin_attempt()
        validation_errors: List[ValidationError] = []
        try:
            validation = self.validate_cross_network_transaction(params if isinstance(params, Mapping) else {})
            if not validation.valid:
                validation_errors = validation.errors
                raise self._validation_failure(validation)
            raise TransactionError(
                TransactionErrorKind.NETWORK_ERROR,
                CROSS_NETWORK_UNSUPPORTED_MESSAGE,
                details="cross-network execution path not implemented",
                retryable=False,
            )
        except Exception as exc:
            error = classify_exception(exc)
            logger.warning("Cross-network trade failed (%s): %s", error.kind.value, error.message)
            self._emit_error(error)
            return TransactionResult(
                success=False,
                message=describe_error(error),
                error=error,
                validation_errors=list(validation_errors),
            )

    async def check_balance(self, intent: TransferIntent) -> None:
        try:
            balance = int(await self.ledger.get_balance(str(intent.sender)))
        except Exception as exc:
            raise TransactionError(
                TransactionErrorKind.NETWORK_ERROR, "Failed to check balance", details=str(exc)
            ) from exc

        required = intent.smallest_units
        if balance < required:
            available = from_smallest_units(balance, intent.decimals)
            raise TransactionError(
                TransactionErrorKind.INSUFFICIENT_FUNDS,
                f"Insufficient balance. Required: {intent.amount}, Available: {available}",
                details=f"balance={balance} required={required}",
            )

    async def create_and_send_transaction(self, pending: PendingTransaction, attempt: int) -> str:
        if self.submitter is None:
            raise TransactionError(
                TransactionErrorKind.TRANSACTION_FAILED,
                details="Transaction creation not implemented: no submitter configured",
            )

        self._ensure_active(attempt)
        self._emit(TransactionState.SIGNING, {"transaction_id": pending.transaction_id})
        signed = await self.submitter.sign(pending.build(self.options.max_retries))
        # Last point at which a cancel can still keep the transfer off the network.
        self._ensure_active(attempt)

        self._emit(TransactionState.SENDING, {"transaction_id": pending.transaction_id})
        signature = await self.submitter.broadcast(signed)
        pending.signature = signature

        if self._is_active(attempt):
            self._emit(TransactionState.CONFIRMING, {"signature": signature})
        else:
            logger.info("Attempt superseded after broadcast; confirming %s without state updates", signature)
        await self.submitter.confirm(signature, timeout=self.options.timeout)
        return signature

    def cancel(self) -> bool:
        """Cancel the in-flight attempt if it has not reached the network yet."""
        if not self._state.is_cancellable:
            return False
        self._emit(TransactionState.CANCELLED)
        self._current = None
        logger.info("Transaction cancelled by caller")
        return True

    def _cancelled_result(self) -> TransactionResult:
        error = TransactionError(TransactionErrorKind.USER_REJECTED, CANCELLED_MESSAGE, retryable=False)
        return TransactionResult(success=False, message=describe_error(error), error=error)


def create_transaction_handler(
    ledger: BalanceProvider,
    submitter: Optional[TransactionSubmitter] = None,
    **kwargs: Any,
) -> TransactionHandler:
    return TransactionHandler(ledger, submitter, **kwargs)
