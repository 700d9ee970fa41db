import pytest
import trio

from conftest import ADDR_A, ADDR_B, ADDR_C
from errors import LedgerError
from ledger import InMemoryLedger
from transactions import LocalSubmitter, TransactionHandler, TransactionOptions, TransactionState


def test_unknown_account_has_zero_balance(ledger):
    assert ledger.balance_of(ADDR_B) == 0
    assert ledger.balance_of(ADDR_A) == 5_000_000_000


def test_faucet_credits_unknown_accounts_once():
    ledger = InMemoryLedger(faucet_balance=42)
    assert ledger.balance_of(ADDR_C) == 42
    ledger.debit(ADDR_C, 2)
    assert ledger.balance_of(ADDR_C) == 40


def test_credit_debit_and_transfer(ledger):
    assert ledger.credit(ADDR_B, 10) == 10
    assert ledger.debit(ADDR_B, 4) == 6
    ledger.transfer(ADDR_A, ADDR_B, 1_000)
    assert ledger.snapshot() == {ADDR_A: 4_999_999_000, ADDR_B: 1_006}


@pytest.mark.parametrize(
    "operation",
    [
        lambda l: l.set_balance(ADDR_B, -1),
        lambda l: l.credit(ADDR_B, 0),
        lambda l: l.debit(ADDR_B, -5),
        lambda l: l.debit(ADDR_B, 1),
        lambda l: l.transfer(ADDR_B, ADDR_A, 1),
    ],
)
def test_invalid_operations_raise(ledger, operation):
    with pytest.raises(LedgerError):
        operation(ledger)


@pytest.mark.trio
async def test_get_balance_is_awaitable(ledger):
    assert await ledger.get_balance(ADDR_A) == 5_000_000_000


@pytest.mark.trio
async def test_local_submitter_settles_transfer(ledger):
    handler = TransactionHandler(ledger, LocalSubmitter(ledger), options=TransactionOptions(timeout=1.0))

    result = await handler.execute({"from": ADDR_A, "to": ADDR_B, "amount": "1.25", "network": "solana"})

    assert result.success is True
    assert handler.get_state() is TransactionState.SUCCESS
    assert ledger.balance_of(ADDR_A) == 3_750_000_000
    assert ledger.balance_of(ADDR_B) == 1_250_000_000


@pytest.mark.trio
async def test_local_submitter_rejects_replay(ledger):
    submitter = LocalSubmitter(ledger)
    handler = TransactionHandler(ledger, submitter, options=TransactionOptions(timeout=1.0))
    await handler.execute({"from": ADDR_A, "to": ADDR_B, "amount": 1, "network": "solana"})
    signed = {"payload": {"sender": ADDR_A, "recipient": ADDR_B, "units": 1}, "signature": "fixed"}
    await submitter.broadcast(signed)

    with pytest.raises(LedgerError):
        await submitter.broadcast(signed)


@pytest.mark.trio
async def test_local_submitter_confirm_times_out(ledger):
    submitter = LocalSubmitter(ledger)
    with pytest.raises(trio.TooSlowError):
        await submitter.confirm("never-broadcast", timeout=0.05)


@pytest.mark.trio
async def test_local_submitter_forgets_oldest_signatures(ledger):
    submitter = LocalSubmitter(ledger, max_remembered=2)
    for index in range(3):
        signed = {"payload": {"sender": ADDR_A, "recipient": ADDR_B, "units": 1}, "signature": f"sig{index}"}
        assert await submitter.broadcast(signed) == f"sig{index}"

    assert list(submitter._settled) == ["sig1", "sig2"]
    await submitter.confirm("sig2", timeout=0.05)
    with pytest.raises(trio.TooSlowError):
        await submitter.confirm("sig0", timeout=0.05)


def test_local_submitter_requires_positive_capacity(ledger):
    with pytest.raises(ValueError):
        LocalSubmitter(ledger, max_remembered=0)
