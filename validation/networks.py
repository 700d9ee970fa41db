"""Supported network registry."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional

import config


class NetworkId(str, Enum):
    SOLANA = "solana"
    SONIC = "sonic"
    ECLIPSE = "eclipse"
    SVMBNB = "svmbnb"
    S00N = "s00n"

    @classmethod
    def parse(cls, value: Any) -> Optional["NetworkId"]:
        if isinstance(value, NetworkId):
            return value
        if not isinstance(value, str):
            return None
        text = value.strip().lower()
        if not text:
            return None
        try:
            return cls(text)
        except ValueError:
            return None


@dataclass(frozen=True)
class NetworkRegistry:
    """Immutable, versioned set of networks a deployment accepts."""

    networks: FrozenSet[NetworkId]
    version: int = 1
    token_allowlists: Mapping[NetworkId, FrozenSet[str]] = field(default_factory=dict)

    @classmethod
    def from_names(
        cls,
        names: Iterable[str],
        *,
        version: int = 1,
        token_allowlists: Optional[Mapping[str, Iterable[str]]] = None,
    ) -> "NetworkRegistry":
        networks = set()
        for name in names:
            network = NetworkId.parse(name)
            if network is None:
                raise ValueError(f"Unknown network identifier: {name!r}")
            networks.add(network)
        allowlists: Dict[NetworkId, FrozenSet[str]] = {}
        for name, tokens in (token_allowlists or {}).items():
            network = NetworkId.parse(name)
            if network is None:
                raise ValueError(f"Unknown network identifier: {name!r}")
            allowlists[network] = frozenset(tokens)
        return cls(networks=frozenset(networks), version=version, token_allowlists=allowlists)

    @classmethod
    def from_settings(cls, network_settings: Optional[config.NetworkSettings] = None) -> "NetworkRegistry":
        network_settings = network_settings or config.settings.network
        return cls.from_names(
            network_settings.supported_networks,
            version=network_settings.registry_version,
            token_allowlists=network_settings.token_allowlists,
        )

    def canonicalize(self, value: Any) -> Optional[NetworkId]:
        network = NetworkId.parse(value)
        if network is None or network not in self.networks:
            return None
        return network

    def __contains__(self, value: Any) -> bool:
        return self.canonicalize(value) is not None

    def supports_token(self, network: NetworkId, token: str) -> bool:
        allowed = self.token_allowlists.get(network)
        if allowed is None:
            return True
        return token in allowed


_default_registry: Optional[NetworkRegistry] = None


def default_registry() -> NetworkRegistry:
    """Registry built from the process configuration, created on first use."""
    global _default_registry
    if _default_registry is None:
        _default_registry = NetworkRegistry.from_settings()
    return _default_registry


def reset_default_registry() -> None:
    """Forget the cached registry so the next lookup re-reads ``config``."""
    global _default_registry
    _default_registry = None


def canonicalize_network(value: Any, registry: Optional[NetworkRegistry] = None) -> Optional[NetworkId]:
    return (registry or default_registry()).canonicalize(value)


def is_valid_network(value: Any, registry: Optional[NetworkRegistry] = None) -> bool:
    return canonicalize_network(value, registry) is not None
