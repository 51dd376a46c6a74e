"""Arbitrator boundary.

``ArbitratorGateway`` is the typed surface the engine consumes. The
arbitrator answers through the engine's ``rule(caller, dispute_id, ruling)``
entry point, correlated by dispute id; the engine never waits for it.

``ManualArbitrator`` is a reference gateway whose operator decides rulings
by hand. It holds no decision logic of its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from ..exceptions import InsufficientFunds, InvalidState, UnknownId

logger = logging.getLogger(__name__)


@runtime_checkable
class Arbitrable(Protocol):
    """Anything that accepts rulings."""

    def rule(self, caller: str, dispute_id: int, ruling: int) -> None:
        ...


@runtime_checkable
class ArbitratorGateway(Protocol):
    """Calls the engine makes into the arbitrator."""

    @property
    def address(self) -> str:
        """Identity the arbitrator uses when calling back."""
        ...

    def dispute_cost(self, extra_data: str) -> int:
        ...

    def create_dispute(self, choices: int, extra_data: str, fee: int, arbitrable: Arbitrable) -> int:
        """Open a dispute paid with ``fee`` and return its id."""
        ...

    def appeal_cost(self, dispute_id: int, extra_data: str) -> int:
        ...

    def appeal(self, dispute_id: int, extra_data: str, fee: int) -> None:
        ...


@dataclass
class DisputeRecord:
    """Arbitrator-side view of a dispute."""

    id: int
    arbitrable: Arbitrable
    choices: int
    fees_paid: int
    appeals: int = 0
    rulings: list[int] = field(default_factory=list)


class ManualArbitrator:
    """Arbitrator operated by hand.

    Charges fixed costs and forwards rulings given by its operator. Useful
    as a centralized arbitrator and as the arbitrator of every test.
    """

    def __init__(self, address: str, arbitration_cost: int, appeal_cost: int | None = None):
        self._address = address
        self.arbitration_cost = arbitration_cost
        self.fixed_appeal_cost = arbitration_cost if appeal_cost is None else appeal_cost
        self.disputes: dict[int, DisputeRecord] = {}
        self.collected = 0

    @property
    def address(self) -> str:
        return self._address

    def dispute_cost(self, extra_data: str) -> int:
        return self.arbitration_cost

    def create_dispute(self, choices: int, extra_data: str, fee: int, arbitrable: Arbitrable) -> int:
        if fee < self.arbitration_cost:
            raise InsufficientFunds(
                "Not enough fees to create a dispute",
                required=self.arbitration_cost,
                provided=fee,
            )
        dispute_id = len(self.disputes)
        self.disputes[dispute_id] = DisputeRecord(
            id=dispute_id, arbitrable=arbitrable, choices=choices, fees_paid=fee
        )
        self.collected += fee
        logger.info("Dispute %d created (%d choices)", dispute_id, choices)
        return dispute_id

    def appeal_cost(self, dispute_id: int, extra_data: str) -> int:
        self._get(dispute_id)
        return self.fixed_appeal_cost

    def appeal(self, dispute_id: int, extra_data: str, fee: int) -> None:
        dispute = self._get(dispute_id)
        if fee < self.fixed_appeal_cost:
            raise InsufficientFunds(
                "Not enough fees to appeal",
                required=self.fixed_appeal_cost,
                provided=fee,
            )
        dispute.appeals += 1
        dispute.fees_paid += fee
        self.collected += fee
        logger.info("Dispute %d appealed (appeal #%d)", dispute_id, dispute.appeals)

    def give_ruling(self, dispute_id: int, ruling: int) -> None:
        """Send a ruling to the arbitrable that created the dispute."""
        dispute = self._get(dispute_id)
        if not 0 <= ruling <= dispute.choices:
            raise InvalidState(f"Ruling {ruling} out of range for dispute {dispute_id}")
        dispute.arbitrable.rule(self._address, dispute_id, ruling)
        dispute.rulings.append(ruling)

    def _get(self, dispute_id: int) -> DisputeRecord:
        try:
            return self.disputes[dispute_id]
        except KeyError:
            raise UnknownId("Dispute", dispute_id) from None
