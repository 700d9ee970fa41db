"""Environment-aware configuration for the exchange core."""
from __future__ import annotations

import copy
import json
import logging
import os
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from errors import ConfigurationError
from exchange_logging import DEFAULT_DATEFMT, DEFAULT_FORMAT


KNOWN_NETWORKS = ("solana", "sonic", "eclipse", "svmbnb", "s00n")
DEFAULT_NETWORK = "solana"


@dataclass
class NetworkSettings:
    supported_networks: List[str] = field(default_factory=lambda: list(KNOWN_NETWORKS))
    registry_version: int = 1
    # Optional per-network token allow-lists; a network without an entry accepts any token.
    token_allowlists: Dict[str, List[str]] = field(default_factory=dict)

    def validate(self) -> None:
        if not self.supported_networks:
            raise ConfigurationError("At least one supported network must be configured.")
        for name in self.supported_networks:
            if not isinstance(name, str) or name.strip().lower() not in KNOWN_NETWORKS:
                raise ConfigurationError(f"Unknown network in supported_networks: {name!r}")
        if self.registry_version <= 0:
            raise ConfigurationError("Network registry version must be positive.")
        for name, tokens in self.token_allowlists.items():
            if not isinstance(name, str) or name.strip().lower() not in KNOWN_NETWORKS:
                raise ConfigurationError(f"Token allow-list for unknown network: {name!r}")
            if not isinstance(tokens, list) or not all(isinstance(t, str) and t for t in tokens):
                raise ConfigurationError(f"Token allow-list for {name} must be a list of non-empty strings.")


@dataclass
class ValidationSettings:
    default_decimals: int = 9
    max_amount: int = 1_000_000_000
    min_address_length: int = 32
    max_address_length: int = 44

    def validate(self) -> None:
        if not (0 <= self.default_decimals <= 18):
            raise ConfigurationError(f"Invalid default decimals: {self.default_decimals}")
        if self.max_amount <= 0:
            raise ConfigurationError("Maximum amount must be positive.")
        if not (0 < self.min_address_length <= self.max_address_length):
            raise ConfigurationError(
                f"Invalid address length bounds: {self.min_address_length}..{self.max_address_length}"
            )


@dataclass
class TransactionSettings:
    timeout: float = 60.0
    max_retries: int = 3
    default_network: str = DEFAULT_NETWORK

    def validate(self) -> None:
        if self.timeout <= 0:
            raise ConfigurationError(f"Transaction timeout must be greater than zero (got {self.timeout}).")
        if self.max_retries < 0:
            raise ConfigurationError("Transaction max_retries cannot be negative.")
        if self.default_network not in KNOWN_NETWORKS:
            raise ConfigurationError(f"Unknown default network: {self.default_network!r}")


@dataclass
class TradingSettings:
    sol_min: float = 0.01
    sol_max: float = 1000.0
    fiat_min: float = 1.0
    fiat_max: float = 100_000.0
    jpy_min: float = 100.0
    jpy_max: float = 10_000_000.0
    rate_tolerance: float = 0.5
    fallback_rates: Dict[str, List[float]] = field(
        default_factory=lambda: {
            "USD": [50.0, 300.0],
            "EUR": [45.0, 270.0],
            "GBP": [40.0, 240.0],
            "JPY": [7000.0, 40000.0],
            "CAD": [65.0, 375.0],
            "AUD": [70.0, 420.0],
        }
    )

    def validate(self) -> None:
        if not (0 < self.sol_min < self.sol_max):
            raise ConfigurationError("SOL amount bounds must satisfy 0 < min < max.")
        if not (0 < self.fiat_min < self.fiat_max):
            raise ConfigurationError("Fiat amount bounds must satisfy 0 < min < max.")
        if not (0 < self.jpy_min < self.jpy_max):
            raise ConfigurationError("JPY amount bounds must satisfy 0 < min < max.")
        if not (0 < self.rate_tolerance < 1):
            raise ConfigurationError("Rate tolerance must be between 0 and 1.")
        if "USD" not in self.fallback_rates:
            raise ConfigurationError("Fallback rates must include USD.")
        for currency, band in self.fallback_rates.items():
            if not (isinstance(band, (list, tuple)) and len(band) == 2 and 0 < band[0] < band[1]):
                raise ConfigurationError(f"Invalid fallback rate band for {currency}: {band}")


@dataclass
class LedgerSettings:
    # Balance handed to unknown accounts on first lookup; 0 disables the faucet.
    faucet_balance: int = 0

    def validate(self) -> None:
        if self.faucet_balance < 0:
            raise ConfigurationError("Faucet balance cannot be negative.")


@dataclass
class LoggingSettings:
    level: str = "INFO"
    format: str = DEFAULT_FORMAT
    datefmt: str = DEFAULT_DATEFMT

    def validate(self) -> None:
        if not isinstance(self.level, str) or not isinstance(logging.getLevelName(self.level.strip().upper()), int):
            raise ConfigurationError(f"Unknown logging level: {self.level!r}")
        if not self.format:
            raise ConfigurationError("Logging format cannot be empty.")


# Section name -> dataclass; drives defaults, construction, validation and export.
SECTIONS: Dict[str, type] = {
    "network": NetworkSettings,
    "validation": ValidationSettings,
    "transactions": TransactionSettings,
    "trading": TradingSettings,
    "ledger": LedgerSettings,
    "logging": LoggingSettings,
}


@dataclass
class Settings:
    env: str
    network: NetworkSettings
    validation: ValidationSettings
    transactions: TransactionSettings
    trading: TradingSettings
    ledger: LedgerSettings
    logging: LoggingSettings

    def sections(self) -> Iterator[Tuple[str, Any]]:
        for name in SECTIONS:
            yield name, getattr(self, name)

    def validate(self) -> None:
        for _, section in self.sections():
            section.validate()

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"env": self.env}
        payload.update((name, asdict(section)) for name, section in self.sections())
        return payload


BASE_DEFAULTS: Dict[str, Any] = {name: asdict(section_cls()) for name, section_cls in SECTIONS.items()}

ENVIRONMENT_OVERRIDES: Dict[str, Dict[str, Any]] = {
    "development": {
        "ledger": {"faucet_balance": 10_000_000_000},
    },
    "test": {
        "logging": {"level": "DEBUG"},
        "transactions": {"timeout": 5.0},
    },
    "production": {
        "logging": {"level": "WARNING"},
        "transactions": {"timeout": 90.0},
    },
}


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


# Environment variable -> (section, key, caster).
ENV_VARIABLES: Dict[str, Tuple[str, str, Callable[[str], Any]]] = {
    "P2P_SUPPORTED_NETWORKS": ("network", "supported_networks", _split_csv),
    "P2P_NETWORK_REGISTRY_VERSION": ("network", "registry_version", int),
    "P2P_TOKEN_ALLOWLISTS": ("network", "token_allowlists", json.loads),
    "P2P_DEFAULT_DECIMALS": ("validation", "default_decimals", int),
    "P2P_MAX_AMOUNT": ("validation", "max_amount", int),
    "P2P_TX_TIMEOUT": ("transactions", "timeout", float),
    "P2P_TX_MAX_RETRIES": ("transactions", "max_retries", int),
    "P2P_DEFAULT_NETWORK": ("transactions", "default_network", lambda value: value.strip().lower()),
    "P2P_RATE_TOLERANCE": ("trading", "rate_tolerance", float),
    "P2P_FAUCET_BALANCE": ("ledger", "faucet_balance", int),
    "P2P_LOG_LEVEL": ("logging", "level", str),
    "P2P_LOG_FORMAT": ("logging", "format", str),
    "P2P_LOG_DATEFMT": ("logging", "datefmt", str),
}


def _merge_into(target: Dict[str, Any], layer: Mapping[str, Any]) -> None:
    """Recursively fold ``layer`` into ``target``; nested mappings merge, everything else replaces."""
    for key, value in layer.items():
        current = target.get(key)
        if isinstance(value, Mapping) and isinstance(current, dict):
            _merge_into(current, value)
        else:
            target[key] = copy.deepcopy(value)


def _env_layer(environ: Mapping[str, str]) -> Dict[str, Any]:
    layer: Dict[str, Any] = {}
    for variable, (section, key, caster) in ENV_VARIABLES.items():
        if variable not in environ:
            continue
        try:
            value = caster(environ[variable])
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid value for {variable}: {exc}") from exc
        layer.setdefault(section, {})[key] = value
    return layer


def _build(env: str, payload: Mapping[str, Any]) -> Settings:
    unknown = set(payload) - set(SECTIONS)
    if unknown:
        raise ConfigurationError(f"Unknown configuration section(s): {', '.join(sorted(unknown))}")
    sections = {}
    for name, section_cls in SECTIONS.items():
        try:
            sections[name] = section_cls(**payload[name])
        except TypeError as exc:
            raise ConfigurationError(f"Invalid '{name}' configuration: {exc}") from exc
    return Settings(env=env, **sections)


def load_settings(env: Optional[str] = None, overrides: Optional[Mapping[str, Any]] = None) -> Settings:
    """Resolve settings for ``env`` (default ``$P2P_ENV`` or ``development``).

    Layers, lowest precedence first: base defaults, the environment's
    overrides, ``P2P_*`` environment variables, then ``overrides``.
    """
    env_name = (env or os.environ.get("P2P_ENV") or "development").strip().lower()
    payload = copy.deepcopy(BASE_DEFAULTS)
    for layer in (ENVIRONMENT_OVERRIDES.get(env_name, {}), _env_layer(os.environ), overrides or {}):
        _merge_into(payload, layer)
    resolved = _build(env_name, payload)
    resolved.validate()
    return resolved


def _publish(current: Settings) -> None:
    """Mirror ``current`` into the module-level constants older call sites read."""
    global SUPPORTED_NETWORKS, NETWORK_REGISTRY_VERSION, TOKEN_ALLOWLISTS
    global DEFAULT_DECIMALS, MAX_AMOUNT, MIN_ADDRESS_LENGTH, MAX_ADDRESS_LENGTH
    global TX_TIMEOUT, TX_MAX_RETRIES, TX_DEFAULT_NETWORK, FAUCET_BALANCE, LOGGING

    network, validation = current.network, current.validation
    SUPPORTED_NETWORKS = tuple(name.strip().lower() for name in network.supported_networks)
    NETWORK_REGISTRY_VERSION = network.registry_version
    TOKEN_ALLOWLISTS = network.token_allowlists
    DEFAULT_DECIMALS = validation.default_decimals
    MAX_AMOUNT = validation.max_amount
    MIN_ADDRESS_LENGTH = validation.min_address_length
    MAX_ADDRESS_LENGTH = validation.max_address_length
    TX_TIMEOUT = current.transactions.timeout
    TX_MAX_RETRIES = current.transactions.max_retries
    TX_DEFAULT_NETWORK = current.transactions.default_network
    FAUCET_BALANCE = current.ledger.faucet_balance
    LOGGING = current.logging


def reload_settings(env: Optional[str] = None, overrides: Optional[Mapping[str, Any]] = None) -> Settings:
    """Re-resolve settings, keeping the current environment unless ``env`` is given."""
    global settings
    settings = load_settings(env=env or settings.env, overrides=overrides)
    _publish(settings)
    return settings


settings: Settings = load_settings()
_publish(settings)

__all__ = [
    "settings",
    "load_settings",
    "reload_settings",
    "Settings",
    "NetworkSettings",
    "ValidationSettings",
    "TransactionSettings",
    "TradingSettings",
    "LedgerSettings",
    "LoggingSettings",
    "KNOWN_NETWORKS",
    "DEFAULT_NETWORK",
    "SUPPORTED_NETWORKS",
    "NETWORK_REGISTRY_VERSION",
    "TOKEN_ALLOWLISTS",
    "DEFAULT_DECIMALS",
    "MAX_AMOUNT",
    "MIN_ADDRESS_LENGTH",
    "MAX_ADDRESS_LENGTH",
    "TX_TIMEOUT",
    "TX_MAX_RETRIES",
    "TX_DEFAULT_NETWORK",
    "FAUCET_BALANCE",
    "LOGGING",
]
