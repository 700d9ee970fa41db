"""Local submitter that settles transfers directly against an ``InMemoryLedger``.

Used for development and tests where no wallet or RPC endpoint is available.
The "signature" is a base58 digest of the canonical transfer payload, not a
cryptographic signature.
"""
from __future__ import annotations

import hashlib
import json
import logging
from collections import OrderedDict
from typing import Any, Dict

import base58
import trio

from errors import LedgerError
from ledger import InMemoryLedger

from .handler import UnsignedTransfer

logger = logging.getLogger(__name__)


def _canonicalize_transaction(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def compute_transaction_signature(payload: Dict[str, Any]) -> str:
    digest = hashlib.sha256(_canonicalize_transaction(payload).encode("utf-8")).digest()
    return base58.b58encode(digest).decode("ascii")


class LocalSubmitter:
    """Settles transfers in-process; remembers the most recent signatures to reject replays."""

    def __init__(self, ledger: InMemoryLedger, *, max_remembered: int = 10_000) -> None:
        if max_remembered <= 0:
            raise ValueError("max_remembered must be positive")
        self.ledger = ledger
        self.max_remembered = max_remembered
        self._settled: "OrderedDict[str, None]" = OrderedDict()

    def _remember(self, signature: str) -> None:
        self._settled[signature] = None
        while len(self._settled) > self.max_remembered:
            self._settled.popitem(last=False)

    async def sign(self, transaction: UnsignedTransfer) -> Dict[str, Any]:
        payload = transaction.to_dict()
        return {"payload": payload, "signature": compute_transaction_signature(payload)}

    async def broadcast(self, signed: Dict[str, Any]) -> str:
        payload = signed["payload"]
        signature = signed["signature"]
        # Yield once so cancellation and other tasks get a chance to run.
        await trio.sleep(0)
        if signature in self._settled:
            raise LedgerError("Transaction already processed")
        self.ledger.transfer(payload["sender"], payload["recipient"], payload["units"])
        self._remember(signature)
        logger.debug("Settled %s locally", signature)
        return signature

    async def confirm(self, signature: str, *, timeout: float) -> None:
        with trio.fail_after(timeout):
            while signature not in self._settled:
                await trio.sleep(0.01)
