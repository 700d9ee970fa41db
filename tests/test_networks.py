import pytest

import config
from validation import (
    NetworkId,
    NetworkRegistry,
    canonicalize_network,
    default_registry,
    is_valid_network,
    reset_default_registry,
)


@pytest.mark.parametrize("name", ["solana", "SOLANA", "Solana", "sOnIc", "ECLIPSE", "svmBNB", "S00N"])
def test_case_variants_of_supported_networks_are_valid(name):
    assert is_valid_network(name)


@pytest.mark.parametrize("value", ["ethereum", "", "   ", None, 1, ["solana"], "solana-devnet"])
def test_unsupported_or_malformed_networks_are_invalid(value):
    assert not is_valid_network(value)


def test_canonicalize_returns_enum_member():
    assert canonicalize_network(" SoLaNa ") is NetworkId.SOLANA
    assert canonicalize_network("ethereum") is None


def test_registry_restricts_membership():
    registry = NetworkRegistry.from_names(["solana", "sonic"], version=2)
    assert registry.version == 2
    assert is_valid_network("SONIC", registry)
    assert not is_valid_network("eclipse", registry)
    assert "eclipse" not in registry


def test_registry_rejects_unknown_names():
    with pytest.raises(ValueError):
        NetworkRegistry.from_names(["solana", "ethereum"])


def test_registry_is_immutable():
    registry = NetworkRegistry.from_names(["solana"])
    with pytest.raises(AttributeError):
        registry.networks = frozenset()
    assert isinstance(registry.networks, frozenset)


def test_token_allowlists():
    registry = NetworkRegistry.from_names(
        ["solana", "sonic"], token_allowlists={"solana": ["SOL", "USDC"]}
    )
    assert registry.supports_token(NetworkId.SOLANA, "USDC")
    assert not registry.supports_token(NetworkId.SOLANA, "BONK")
    assert registry.supports_token(NetworkId.SONIC, "anything")


def test_default_registry_follows_configuration(monkeypatch):
    monkeypatch.setenv("P2P_SUPPORTED_NETWORKS", "solana,eclipse")
    try:
        config.reload_settings(env="test")
        reset_default_registry()
        assert is_valid_network("eclipse")
        assert not is_valid_network("sonic")
        assert default_registry() is default_registry()
    finally:
        monkeypatch.delenv("P2P_SUPPORTED_NETWORKS")
        config.reload_settings(env="test")
        reset_default_registry()
    assert is_valid_network("sonic")
