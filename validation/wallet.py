"""Composite wallet validators and user-facing error messages.

Every validator here is pure: it reads its parameters and the (immutable)
network registry, never performs I/O, and never raises on bad input. Checks do
not short-circuit, so a caller gets every defect of a parameter set at once.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from errors import (
    VALIDATION_ERROR_MESSAGES,
    TransactionError,
    ValidationError,
    ValidationErrorKind,
)

from .addresses import AccountAddress, is_valid_address
from .amounts import is_valid_amount, is_valid_decimals
from .networks import NetworkRegistry, NetworkId, default_registry

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."
USER_REJECTED_MESSAGE = "Transaction was cancelled by user."


@dataclass
class ValidationResult:
    valid: bool
    errors: List[ValidationError] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: List[ValidationError]) -> "ValidationResult":
        return cls(valid=not errors, errors=list(errors))

    def __bool__(self) -> bool:
        return self.valid

    @property
    def kinds(self) -> List[ValidationErrorKind]:
        return [error.kind for error in self.errors]

    def messages(self) -> List[str]:
        return [describe_error(error) for error in self.errors]

    def to_dict(self) -> dict:
        return {"valid": self.valid, "errors": [error.to_dict() for error in self.errors]}


def _address_key(value: Any) -> Optional[str]:
    if isinstance(value, AccountAddress):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def validate_connection(params: Optional[Mapping[str, Any]], registry: Optional[NetworkRegistry] = None) -> ValidationResult:
    if not isinstance(params, Mapping) or not params:
        return ValidationResult.from_errors(
            [ValidationError(ValidationErrorKind.INVALID_ADDRESS, "Missing connection parameters")]
        )
    registry = registry or default_registry()
    errors: List[ValidationError] = []

    if not is_valid_address(params.get("address")):
        errors.append(ValidationError(ValidationErrorKind.INVALID_ADDRESS, field="address"))
    if params.get("network") not in registry:
        errors.append(ValidationError(ValidationErrorKind.INVALID_NETWORK, field="network"))

    return ValidationResult.from_errors(errors)


def validate_transfer(params: Optional[Mapping[str, Any]], registry: Optional[NetworkRegistry] = None) -> ValidationResult:
    """Validate a single-network transfer.

    Expected keys: ``from``, ``to``, ``amount``, ``network`` and optionally
    ``decimals`` (default 9).
    """
    if not isinstance(params, Mapping) or not params:
        return ValidationResult.from_errors(
            [ValidationError(ValidationErrorKind.INVALID_AMOUNT, "Missing transaction parameters")]
        )
    registry = registry or default_registry()
    errors: List[ValidationError] = []

    sender = params.get("from")
    recipient = params.get("to")
    decimals = params.get("decimals")
    if decimals is None:
        decimals = 9

    if not is_valid_address(sender):
        errors.append(ValidationError(ValidationErrorKind.INVALID_ADDRESS, "Invalid sender address", "from"))
    if not is_valid_address(recipient):
        errors.append(ValidationError(ValidationErrorKind.INVALID_RECIPIENT_ADDRESS, field="to"))

    if not is_valid_decimals(decimals):
        errors.append(ValidationError(ValidationErrorKind.INVALID_AMOUNT, "Invalid token decimals", "decimals"))
    elif not is_valid_amount(params.get("amount"), decimals):
        errors.append(ValidationError(ValidationErrorKind.INVALID_AMOUNT, field="amount"))

    if params.get("network") not in registry:
        errors.append(ValidationError(ValidationErrorKind.INVALID_NETWORK, field="network"))

    sender_key = _address_key(sender)
    if sender_key is not None and sender_key == _address_key(recipient):
        errors.append(ValidationError(ValidationErrorKind.SELF_TRANSFER, field="to"))

    return ValidationResult.from_errors(errors)


def validate_cross_network_trade(
    params: Optional[Mapping[str, Any]], registry: Optional[NetworkRegistry] = None
) -> ValidationResult:
    """Validate a cross-network trade.

    Expected keys: ``source_network``, ``destination_network``,
    ``source_token`` and ``destination_token``.
    """
    if not isinstance(params, Mapping) or not params:
        return ValidationResult.from_errors(
            [ValidationError(ValidationErrorKind.NETWORK_MISMATCH, "Missing trade parameters")]
        )
    registry = registry or default_registry()
    errors: List[ValidationError] = []

    source = registry.canonicalize(params.get("source_network"))
    destination = registry.canonicalize(params.get("destination_network"))

    if source is None:
        errors.append(
            ValidationError(ValidationErrorKind.INVALID_NETWORK, "Invalid source network", "source_network")
        )
    if destination is None:
        errors.append(
            ValidationError(ValidationErrorKind.INVALID_NETWORK, "Invalid destination network", "destination_network")
        )

    source_raw = NetworkId.parse(params.get("source_network"))
    destination_raw = NetworkId.parse(params.get("destination_network"))
    if source_raw is not None and source_raw == destination_raw:
        errors.append(
            ValidationError(
                ValidationErrorKind.NETWORK_MISMATCH,
                "Source and destination networks must be different",
                "destination_network",
            )
        )

    for key, network in (("source_token", source), ("destination_token", destination)):
        token = params.get(key)
        if not isinstance(token, str) or not token.strip():
            errors.append(ValidationError(ValidationErrorKind.UNSUPPORTED_TOKEN, field=key))
        elif network is not None and not registry.supports_token(network, token.strip()):
            errors.append(ValidationError(ValidationErrorKind.UNSUPPORTED_TOKEN, field=key))

    return ValidationResult.from_errors(errors)


def describe_error(error: Any) -> str:
    """Map any error value to a short, user-facing message.

    Typed errors carry their own safe message. Anything else is matched on a
    few well-known wallet phrases and otherwise collapses to a generic message,
    so raw exception text never reaches the user.
    """
    if isinstance(error, (ValidationError, TransactionError)):
        return error.message or GENERIC_ERROR_MESSAGE

    if isinstance(error, BaseException):
        text = str(error)
    elif isinstance(error, str):
        text = error
    else:
        text = str(getattr(error, "message", "") or "")

    lowered = text.lower()
    if "user rejected" in lowered:
        return USER_REJECTED_MESSAGE
    if "insufficient funds" in lowered:
        return VALIDATION_ERROR_MESSAGES[ValidationErrorKind.INSUFFICIENT_BALANCE]
    return GENERIC_ERROR_MESSAGE
