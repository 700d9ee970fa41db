"""Account address parsing for SVM-style base58 public keys."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import base58

import config

ADDRESS_BYTE_LENGTH = 32


@dataclass(frozen=True)
class AccountAddress:
    """A decoded 32-byte account address."""

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, (bytes, bytearray)) or len(self.raw) != ADDRESS_BYTE_LENGTH:
            raise ValueError(f"Account address must be {ADDRESS_BYTE_LENGTH} bytes.")
        object.__setattr__(self, "raw", bytes(self.raw))

    @classmethod
    def from_string(cls, text: str) -> "AccountAddress":
        """Decode base58 text, raising ``ValueError`` on malformed input."""
        if not isinstance(text, str):
            raise ValueError(f"Expected a base58 string, got {type(text).__name__}")
        try:
            decoded = base58.b58decode(text)
        except ValueError as exc:
            raise ValueError(f"Invalid base58 encoding: {exc}") from exc
        if len(decoded) != ADDRESS_BYTE_LENGTH:
            raise ValueError(f"Address decodes to {len(decoded)} bytes, expected {ADDRESS_BYTE_LENGTH}.")
        return cls(decoded)

    @property
    def is_default(self) -> bool:
        return self.raw == DEFAULT_ADDRESS_BYTES

    def __str__(self) -> str:
        return base58.b58encode(self.raw).decode("ascii")


DEFAULT_ADDRESS_BYTES = bytes(ADDRESS_BYTE_LENGTH)
DEFAULT_ADDRESS = AccountAddress(DEFAULT_ADDRESS_BYTES)


def parse_address(value: Any) -> Optional[AccountAddress]:
    """Return the decoded address, or ``None`` when ``value`` is not a usable address.

    Surrounding whitespace is trimmed before the length check. The all-zero
    default address is treated as unusable.
    """
    if isinstance(value, AccountAddress):
        return None if value.is_default else value
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not (config.MIN_ADDRESS_LENGTH <= len(value) <= config.MAX_ADDRESS_LENGTH):
        return None
    try:
        address = AccountAddress.from_string(value)
    except ValueError:
        return None
    if address.is_default:
        return None
    return address


def is_valid_address(value: Any) -> bool:
    return parse_address(value) is not None


def sanitize_address(value: Any) -> Optional[str]:
    """Trim and canonicalise an address; ``None`` if it is not valid."""
    address = parse_address(value)
    return str(address) if address is not None else None
