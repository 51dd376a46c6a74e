# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Tribunal Contributors

"""Custody accounting and outbound payouts.

Value sent with a call is received into the ``Vault``. Outbound transfers
are queued during a transaction and flushed to the ``PayoutSink`` only when
the ledger work has succeeded; a refused transfer rolls the whole
transaction back.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from .exceptions import PayoutFailed

logger = logging.getLogger(__name__)


@runtime_checkable
class PayoutSink(Protocol):
    """Host-side transfer of funds out of the engine.

    Implementations raise (or return False) to refuse a transfer.
    """

    def send(self, recipient: str, amount: int) -> bool | None:
        ...


class BalanceBook:
    """Payout sink that credits an in-memory balance per address."""

    def __init__(self) -> None:
        self.balances: dict[str, int] = defaultdict(int)

    def send(self, recipient: str, amount: int) -> bool:
        self.balances[recipient] += amount
        return True

    def balance_of(self, address: str) -> int:
        return self.balances.get(address, 0)


@dataclass
class VaultState:
    """Counters that make up the custody ledger."""

    received: int = 0
    paid_out: int = 0
    paid_to_arbitrators: int = 0
    pending: list[tuple[str, int]] = field(default_factory=list)

    @property
    def custody(self) -> int:
        pending = sum(amount for _, amount in self.pending)
        return self.received - self.paid_out - self.paid_to_arbitrators - pending


class Vault:
    """Tracks value held by the engine."""

    def __init__(self, sink: PayoutSink):
        self.sink = sink
        self._state = VaultState()

    @property
    def custody(self) -> int:
        return self._state.custody

    @property
    def received(self) -> int:
        return self._state.received

    @property
    def paid_out(self) -> int:
        return self._state.paid_out

    @property
    def paid_to_arbitrators(self) -> int:
        return self._state.paid_to_arbitrators

    def receive(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("Cannot receive a negative amount")
        self._state.received += amount

    def pay_arbitrator(self, amount: int) -> None:
        if amount > self.custody:
            raise ValueError("Arbitration fee exceeds custody")
        self._state.paid_to_arbitrators += amount

    def queue_payout(self, recipient: str, amount: int) -> None:
        """Schedule a transfer for when the current transaction commits."""
        if amount <= 0:
            return
        if amount > self.custody:
            raise ValueError("Payout exceeds custody")
        self._state.pending.append((recipient, amount))

    def flush(self) -> list[tuple[str, int]]:
        """Send every queued transfer, merged per recipient.

        Raises:
            PayoutFailed: If the sink refuses a transfer. Transfers already
                sent in this flush are reported in the exception details.
        """
        merged: dict[str, int] = {}
        for recipient, amount in self._state.pending:
            merged[recipient] = merged.get(recipient, 0) + amount
        self._state.pending = []

        sent: list[tuple[str, int]] = []
        for recipient, amount in merged.items():
            try:
                accepted = self.sink.send(recipient, amount)
            except Exception as e:
                raise PayoutFailed(f"Transfer to {recipient} failed: {e}", recipient, amount) from e
            if accepted is False:
                raise PayoutFailed(f"Transfer to {recipient} refused", recipient, amount)
            self._state.paid_out += amount
            sent.append((recipient, amount))
            logger.debug("Paid %d to %s", amount, recipient)
        return sent

    def snapshot(self) -> VaultState:
        return VaultState(
            received=self._state.received,
            paid_out=self._state.paid_out,
            paid_to_arbitrators=self._state.paid_to_arbitrators,
            pending=list(self._state.pending),
        )

    def restore(self, state: VaultState) -> None:
        self._state = state
