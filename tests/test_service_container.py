import json

import pytest

import config
from app.container import ServiceContainer
from conftest import ADDR_A, ADDR_B
from errors import DependencyError
from ledger import InMemoryLedger
from transactions import LocalSubmitter


def _container(**overrides):
    ledger = overrides.pop("ledger", None) or InMemoryLedger({ADDR_A: 5_000_000_000}, faucet_balance=0)
    return ServiceContainer.build(overrides={"ledger": ledger, **overrides})


def test_container_uses_settings_env():
    container = ServiceContainer.build()
    assert container.settings is config.settings
    options = container.build_transaction_options()
    assert options.timeout == config.settings.transactions.timeout
    assert options.default_decimals == config.settings.validation.default_decimals
    assert "solana" in container.registry


def test_default_ledger_gets_local_submitter():
    container = ServiceContainer.build()
    assert isinstance(container.ledger, InMemoryLedger)
    assert isinstance(container.submitter, LocalSubmitter)
    assert container.submitter.ledger is container.ledger


class DummyLogger:
    pass


def test_container_overrides_logger():
    fake_logger = DummyLogger()
    container = ServiceContainer.build(overrides={"logger": fake_logger})
    assert container.logger is fake_logger


def test_foreign_ledger_gets_no_submitter():
    class RemoteLedger:
        async def get_balance(self, address):
            return 0

    container = ServiceContainer.build(overrides={"ledger": RemoteLedger()})
    assert container.submitter is None


def test_bad_registry_settings_raise_dependency_error():
    settings = config.load_settings(env="test")
    settings.network.supported_networks = ["ethereum"]
    with pytest.raises(DependencyError):
        ServiceContainer.build(settings=settings)


def test_unknown_handler_lookup():
    with pytest.raises(DependencyError):
        ServiceContainer.build().get_command_handler("mine")


@pytest.mark.trio
async def test_dispatch_rejects_empty_and_unknown_commands():
    container = _container()
    assert await container.dispatch("   ") == "ERROR: Received empty command.\r\n"
    assert await container.dispatch("createblock") == "ERROR: Unknown command 'createblock'\r\n"


@pytest.mark.trio
async def test_getbalance_command():
    container = _container()
    assert await container.dispatch(f"getbalance {ADDR_A}") == "BALANCE: 5000000000\r\n"
    assert await container.dispatch(f"getbalance {ADDR_A} 9") == "BALANCE: 5.000000000\r\n"
    assert await container.dispatch("getbalance not-an-address") == "ERROR: Invalid wallet address format.\r\n"
    assert (await container.dispatch(f"getbalance {ADDR_A} nine")).startswith("ERROR: Decimals")
    assert (await container.dispatch("getbalance")).startswith("ERROR: Usage")


@pytest.mark.trio
@pytest.mark.parametrize("decimals", ["-1", "19", "100000"])
async def test_getbalance_rejects_out_of_range_decimals(decimals):
    container = _container()
    response = await container.dispatch(f"getbalance {ADDR_A} {decimals}")
    assert response == "ERROR: Decimals must be between 0 and 18.\r\n"


@pytest.mark.trio
async def test_sendtx_command_settles_transfer():
    container = _container()
    payload = json.dumps({"from": ADDR_A, "to": ADDR_B, "amount": 0.5, "network": "solana"})

    response = await container.dispatch(f"sendtx '{payload}'")

    assert response.startswith("SUCCESS: ")
    assert container.ledger.balance_of(ADDR_B) == 500_000_000
    assert container.ledger.balance_of(ADDR_A) == 4_500_000_000


@pytest.mark.trio
async def test_sendtx_command_reports_failures():
    container = _container()
    too_much = json.dumps({"from": ADDR_A, "to": ADDR_B, "amount": 6, "network": "solana"})
    response = await container.dispatch(f"sendtx {too_much}")
    assert response.startswith("FAILURE: INSUFFICIENT_FUNDS: ")

    invalid = json.dumps({"from": ADDR_A, "to": ADDR_A, "amount": 1, "network": "solana"})
    response = await container.dispatch(f"sendtx {invalid}")
    assert response.startswith("FAILURE: VALIDATION_FAILED: ")

    assert (await container.dispatch("sendtx {not json")).startswith("ERROR: Invalid JSON payload")
    assert await container.dispatch("sendtx [1, 2]") == "ERROR: Payload must be a JSON object.\r\n"
    assert container.ledger.balance_of(ADDR_B) == 0


@pytest.mark.trio
async def test_validatetx_command_never_touches_ledger():
    container = _container()
    good = json.dumps({"from": ADDR_A, "to": ADDR_B, "amount": "1.5", "network": "sonic"})
    assert await container.dispatch(f"validatetx {good}") == "VALID\r\n"

    bad = json.dumps({"from": ADDR_A, "to": "short", "amount": 1, "network": "solana"})
    response = await container.dispatch(f"validatetx {bad}")
    assert response.startswith("INVALID: ")
    assert "to: " in response
    assert container.ledger.snapshot() == {ADDR_A: 5_000_000_000}


@pytest.mark.trio
async def test_crosstrade_command():
    container = _container()
    trade = json.dumps(
        {
            "source_network": "solana",
            "destination_network": "sonic",
            "source_token": "SOL",
            "destination_token": "SOL",
        }
    )
    response = await container.dispatch(f"crosstrade {trade}")
    assert response.startswith("FAILURE: NETWORK_ERROR: ")

    mismatch = json.dumps(
        {
            "source_network": "solana",
            "destination_network": "SOLANA",
            "source_token": "SOL",
            "destination_token": "SOL",
        }
    )
    response = await container.dispatch(f"crosstrade {mismatch}")
    assert response.startswith("FAILURE: VALIDATION_FAILED: ")


@pytest.mark.trio
async def test_handler_exceptions_become_error_lines():
    class Exploding:
        @staticmethod
        async def execute(raw_command, container):
            raise RuntimeError("boom")

    container = _container(command_handlers={"explode": Exploding})
    assert await container.dispatch("explode now") == "ERROR: boom\r\n"
