import logging

import pytest

import config
import exchange_logging
from errors import ConfigurationError


def test_test_environment_loaded_by_default():
    assert config.settings.env == "test"
    assert config.TX_TIMEOUT == config.settings.transactions.timeout == 5.0
    assert config.LOGGING.level.upper() == "DEBUG"


def test_defaults():
    settings = config.load_settings(env="development")
    assert settings.validation.default_decimals == 9
    assert settings.validation.max_amount == 1_000_000_000
    assert settings.transactions.max_retries == 3
    assert tuple(settings.network.supported_networks) == config.KNOWN_NETWORKS
    assert settings.ledger.faucet_balance > 0


def test_reload_settings_switch_environment(monkeypatch):
    monkeypatch.setenv("P2P_ENV", "production")
    new_settings = config.reload_settings(env="production")
    assert new_settings.env == "production"
    assert config.LOGGING.level.upper() == "WARNING"
    assert config.TX_TIMEOUT == 90.0

    monkeypatch.setenv("P2P_ENV", "test")
    config.reload_settings(env="test")


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("P2P_SUPPORTED_NETWORKS", " Solana , sonic ")
    monkeypatch.setenv("P2P_TX_TIMEOUT", "12.5")
    monkeypatch.setenv("P2P_TOKEN_ALLOWLISTS", '{"solana": ["SOL"]}')
    settings = config.load_settings(env="test")
    assert settings.network.supported_networks == ["Solana", "sonic"]
    assert settings.transactions.timeout == 12.5
    assert settings.network.token_allowlists == {"solana": ["SOL"]}


def test_legacy_exports_are_canonicalised(monkeypatch):
    monkeypatch.setenv("P2P_SUPPORTED_NETWORKS", "SOLANA,Eclipse")
    try:
        config.reload_settings(env="test")
        assert config.SUPPORTED_NETWORKS == ("solana", "eclipse")
    finally:
        monkeypatch.delenv("P2P_SUPPORTED_NETWORKS")
        config.reload_settings(env="test")


def test_explicit_overrides_win(monkeypatch):
    monkeypatch.setenv("P2P_MAX_AMOUNT", "500")
    settings = config.load_settings(env="test", overrides={"validation": {"max_amount": 750}})
    assert settings.validation.max_amount == 750


def test_bad_env_value_raises(monkeypatch):
    monkeypatch.setenv("P2P_TX_MAX_RETRIES", "many")
    with pytest.raises(ConfigurationError):
        config.load_settings(env="test")


@pytest.mark.parametrize(
    "overrides",
    [
        {"network": {"supported_networks": ["ethereum"]}},
        {"network": {"supported_networks": []}},
        {"network": {"token_allowlists": {"bitcoin": ["BTC"]}}},
        {"validation": {"default_decimals": 30}},
        {"validation": {"min_address_length": 50}},
        {"transactions": {"timeout": 0}},
        {"transactions": {"default_network": "ethereum"}},
        {"trading": {"rate_tolerance": 1.5}},
        {"trading": {"fallback_rates": {"EUR": [2.0, 1.0]}}},
        {"ledger": {"faucet_balance": -1}},
        {"logging": {"level": ""}},
        {"validation": {"unknown_key": 1}},
    ],
)
def test_invalid_settings_rejected(overrides):
    with pytest.raises(ConfigurationError):
        config.load_settings(env="test", overrides=overrides)


def test_to_dict_round_trips_sections():
    payload = config.settings.to_dict()
    assert payload["env"] == "test"
    assert set(payload) == {"env", "network", "validation", "transactions", "trading", "ledger", "logging"}


def test_logging_configure_sets_project_levels():
    exchange_logging.configure({"level": "warning"}, force=True)
    try:
        assert logging.getLogger("transactions").level == logging.WARNING
        assert logging.getLogger("trio").level >= logging.WARNING
        assert exchange_logging.is_configured()
    finally:
        exchange_logging.configure(config.LOGGING, force=True)
    assert logging.getLogger("transactions").level == logging.DEBUG
