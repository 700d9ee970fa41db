"""In-memory balance ledger used as the default balance collaborator."""
from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

import config
from errors import LedgerError

logger = logging.getLogger(__name__)


class InMemoryLedger:
    """Smallest-unit balances keyed by canonical address string.

    When ``faucet_balance`` is positive an unknown account is credited with it
    on first lookup, which keeps local development usable without seeding.
    """

    def __init__(self, balances: Optional[Dict[str, int]] = None, *, faucet_balance: Optional[int] = None) -> None:
        self._balance_lock = threading.Lock()
        self._balances: Dict[str, int] = dict(balances or {})
        self.faucet_balance = config.FAUCET_BALANCE if faucet_balance is None else faucet_balance

    async def get_balance(self, address: str) -> int:
        return self.balance_of(address)

    def balance_of(self, address: str) -> int:
        with self._balance_lock:
            if address not in self._balances and self.faucet_balance > 0:
                logger.debug("Faucet credit of %s to %s", self.faucet_balance, address)
                self._balances[address] = self.faucet_balance
            return self._balances.get(address, 0)

    def set_balance(self, address: str, amount: int) -> None:
        if amount < 0:
            raise LedgerError(f"Balance cannot be negative (got {amount}).")
        with self._balance_lock:
            self._balances[address] = amount

    def credit(self, address: str, amount: int) -> int:
        if amount <= 0:
            raise LedgerError(f"Credit amount must be positive (got {amount}).")
        with self._balance_lock:
            self._balances[address] = self._balances.get(address, 0) + amount
            return self._balances[address]

    def debit(self, address: str, amount: int) -> int:
        if amount <= 0:
            raise LedgerError(f"Debit amount must be positive (got {amount}).")
        with self._balance_lock:
            current = self._balances.get(address, 0)
            if current < amount:
                raise LedgerError(f"insufficient funds: {address} holds {current}, needs {amount}")
            self._balances[address] = current - amount
            return self._balances[address]

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        with self._balance_lock:
            current = self._balances.get(sender, 0)
            if current < amount:
                raise LedgerError(f"insufficient funds: {sender} holds {current}, needs {amount}")
            self._balances[sender] = current - amount
            self._balances[recipient] = self._balances.get(recipient, 0) + amount
        logger.info("Balances updated: %s... -> %s... (%s units)", sender[:10], recipient[:10], amount)

    def snapshot(self) -> Dict[str, int]:
        with self._balance_lock:
            return dict(self._balances)
