"""Pure validation rules for addresses, networks, amounts and composite intents."""

from .addresses import (
    ADDRESS_BYTE_LENGTH,
    DEFAULT_ADDRESS,
    AccountAddress,
    is_valid_address,
    parse_address,
    sanitize_address,
)
from .amounts import (
    from_smallest_units,
    is_valid_amount,
    parse_amount,
    sanitize_amount,
    to_smallest_units,
)
from .networks import (
    NetworkId,
    NetworkRegistry,
    canonicalize_network,
    default_registry,
    is_valid_network,
    reset_default_registry,
)
from .trading import validate_fiat_amount, validate_market_rate, validate_sol_amount
from .wallet import (
    GENERIC_ERROR_MESSAGE,
    ValidationResult,
    describe_error,
    validate_connection,
    validate_cross_network_trade,
    validate_transfer,
)

__all__ = [
    "ADDRESS_BYTE_LENGTH",
    "DEFAULT_ADDRESS",
    "AccountAddress",
    "is_valid_address",
    "parse_address",
    "sanitize_address",
    "from_smallest_units",
    "is_valid_amount",
    "parse_amount",
    "sanitize_amount",
    "to_smallest_units",
    "NetworkId",
    "NetworkRegistry",
    "canonicalize_network",
    "default_registry",
    "is_valid_network",
    "reset_default_registry",
    "validate_fiat_amount",
    "validate_market_rate",
    "validate_sol_amount",
    "GENERIC_ERROR_MESSAGE",
    "ValidationResult",
    "describe_error",
    "validate_connection",
    "validate_cross_network_trade",
    "validate_transfer",
]
