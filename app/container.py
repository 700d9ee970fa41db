"""Dependency wiring helpers for the exchange core."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import config
from commands import crosstrade, getbalance, sendtx, validatetx
from errors import DependencyError
from ledger import InMemoryLedger
from transactions import LocalSubmitter, TransactionHandler, TransactionOptions
from validation import NetworkRegistry


@dataclass
class ServiceContainer:
    """Settings, collaborators and command handlers wired for one process."""

    settings: config.Settings
    logger: logging.Logger
    command_handlers: Dict[str, Any]
    registry: NetworkRegistry
    ledger: Any
    submitter: Any
    overrides: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        *,
        settings: Optional[config.Settings] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ServiceContainer":
        resolved_settings = settings or config.settings
        override_map = overrides or {}

        logger: logging.Logger = override_map.get("logger") or logging.getLogger("app.container")
        command_handlers = override_map.get("command_handlers") or {
            "getbalance": getbalance,
            "validatetx": validatetx,
            "sendtx": sendtx,
            "crosstrade": crosstrade,
        }

        try:
            registry = override_map.get("registry") or NetworkRegistry.from_settings(resolved_settings.network)
        except ValueError as exc:
            raise DependencyError(f"Cannot build network registry: {exc}") from exc

        ledger = override_map.get("ledger")
        if ledger is None:
            ledger = InMemoryLedger(faucet_balance=resolved_settings.ledger.faucet_balance)

        # Without an explicit submitter only the in-memory ledger can settle transfers locally.
        submitter = override_map.get("submitter")
        if submitter is None and isinstance(ledger, InMemoryLedger):
            submitter = LocalSubmitter(ledger)

        return cls(
            settings=resolved_settings,
            logger=logger,
            command_handlers=command_handlers,
            registry=registry,
            ledger=ledger,
            submitter=submitter,
            overrides=override_map,
        )

    def build_transaction_options(self) -> TransactionOptions:
        return TransactionOptions.from_settings(self.settings)

    def build_transaction_handler(self, *, default_sender: Optional[str] = None) -> TransactionHandler:
        """A fresh controller per caller; controllers hold per-attempt state."""
        return TransactionHandler(
            self.ledger,
            self.submitter,
            registry=self.registry,
            options=self.build_transaction_options(),
            default_sender=default_sender,
        )

    def get_command_handler(self, name: str) -> Any:
        handler = self.command_handlers.get(name)
        if handler is None:
            raise DependencyError(f"Unknown command handler requested: {name}")
        return handler

    async def dispatch(self, raw: str) -> str:
        """Route a raw text command to its handler and return the response line."""
        parts = (raw or "").split()
        if not parts:
            return "ERROR: Received empty command.\r\n"
        command_name = parts[0].lower()
        handler = self.command_handlers.get(command_name)
        if handler is None:
            self.logger.warning("Unknown command: %s", command_name)
            return f"ERROR: Unknown command '{command_name}'\r\n"
        self.logger.debug("Dispatching command %s", command_name)
        try:
            return await handler.execute(raw.strip(), self)
        except Exception as exc:
            self.logger.exception("Error executing command %s", command_name)
            return f"ERROR: {exc}\r\n"
