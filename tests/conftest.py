"""Shared pytest fixtures for the exchange core test-suite."""
from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import base58

import config
import exchange_logging
from ledger import InMemoryLedger
from validation import reset_default_registry


def make_address(seed: int) -> str:
    """Deterministic, valid 32-byte base58 address."""
    return base58.b58encode(bytes([seed]) * 32).decode("ascii")


ADDR_A = make_address(1)
ADDR_B = make_address(2)
ADDR_C = make_address(3)


@pytest.fixture(scope="session", autouse=True)
def test_environment() -> Iterator[None]:
    """Ensure tests run with the dedicated 'test' configuration and logging."""
    original_env = os.environ.get("P2P_ENV")
    os.environ["P2P_ENV"] = "test"

    config.reload_settings(env="test")
    reset_default_registry()
    exchange_logging.configure(config.LOGGING, force=True)

    yield

    if original_env is None:
        os.environ.pop("P2P_ENV", None)
        config.reload_settings(env="development")
    else:
        os.environ["P2P_ENV"] = original_env
        config.reload_settings(env=original_env)
    reset_default_registry()


@pytest.fixture()
def ledger() -> InMemoryLedger:
    return InMemoryLedger({ADDR_A: 5_000_000_000}, faucet_balance=0)
