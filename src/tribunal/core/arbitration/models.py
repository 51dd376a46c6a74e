"""Data models for items, requests and funding rounds.

Models reference each other by id only; the arena in
``tribunal.core.arbitration.storage`` owns every instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from ..clock import Window
from .enums import ItemStatus, Party, RequestKind, Ruling
from .governance import GovernanceParams

P = TypeVar("P")

FUNDED_SIDES = (Party.REQUESTER, Party.CHALLENGER)


@dataclass
class Item(Generic[P]):
    """A list entry and the ids of every request ever made about it."""

    id: str
    payload: P
    status: ItemStatus = ItemStatus.ABSENT
    request_ids: list[int] = field(default_factory=list)

    @property
    def latest_request_id(self) -> int | None:
        return self.request_ids[-1] if self.request_ids else None

    def to_dict(self) -> dict[str, Any]:
        payload = self.payload.to_dict() if hasattr(self.payload, "to_dict") else self.payload
        return {
            "id": self.id,
            "payload": payload,
            "status": self.status.value,
            "request_ids": list(self.request_ids),
        }


@dataclass
class Round:
    """One funding cycle of a request.

    ``contributions`` is keyed by ``(address, party)``. ``required`` is the
    amount each side must reach to be fully paid. It is recomputed from
    the arbitrator's appeal cost on every contribution and never lowered.
    """

    id: int
    request_id: int
    index: int
    contributions: dict[tuple[str, Party], int] = field(default_factory=dict)
    paid_total: dict[Party, int] = field(default_factory=lambda: {p: 0 for p in FUNDED_SIDES})
    required: dict[Party, int] = field(default_factory=lambda: {p: 0 for p in FUNDED_SIDES})
    fully_paid: dict[Party, bool] = field(default_factory=lambda: {p: False for p in FUNDED_SIDES})
    fee_rewards: int = 0
    appealed: bool = False

    @property
    def both_paid(self) -> bool:
        return all(self.fully_paid[p] for p in FUNDED_SIDES)

    @property
    def total_paid(self) -> int:
        return sum(self.paid_total.values())

    def contribution_of(self, address: str, party: Party) -> int:
        return self.contributions.get((address, party), 0)

    def contributors(self) -> set[str]:
        return {address for address, _ in self.contributions}

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "request_id": self.request_id,
            "index": self.index,
            "contributions": [
                {"address": address, "party": party.name, "amount": amount}
                for (address, party), amount in sorted(self.contributions.items())
            ],
            "paid_total": {p.name: v for p, v in self.paid_total.items()},
            "required": {p.name: v for p, v in self.required.items()},
            "fully_paid": {p.name: v for p, v in self.fully_paid.items()},
            "fee_rewards": self.fee_rewards,
            "appealed": self.appealed,
        }


@dataclass
class Request:
    """A registration or clearing request and its dispute state.

    ``params``, ``arbitrator`` and ``arbitrator_extra_data`` are the
    governance values in force when the request was submitted.
    """

    id: int
    item_id: str
    kind: RequestKind
    requester: str
    submission_time: int
    params: GovernanceParams
    arbitrator: str
    arbitrator_extra_data: str
    challenger: str | None = None
    disputed: bool = False
    dispute_id: int | None = None
    resolved: bool = False
    ruling: Ruling = Ruling.OTHER
    current_ruling: Ruling | None = None
    appeal_period: Window | None = None
    round_ids: list[int] = field(default_factory=list)

    @property
    def current_round_id(self) -> int:
        return self.round_ids[-1]

    @property
    def winner(self) -> Party:
        """Winning side once resolved; NONE otherwise."""
        if not self.resolved:
            return Party.NONE
        return Party.for_ruling(self.ruling)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "kind": self.kind.value,
            "requester": self.requester,
            "challenger": self.challenger,
            "submission_time": self.submission_time,
            "disputed": self.disputed,
            "dispute_id": self.dispute_id,
            "resolved": self.resolved,
            "ruling": self.ruling.name,
            "current_ruling": self.current_ruling.name if self.current_ruling is not None else None,
            "appeal_period": self.appeal_period.to_dict() if self.appeal_period else None,
            "arbitrator": self.arbitrator,
            "arbitrator_extra_data": self.arbitrator_extra_data,
            "params": self.params.to_dict(),
            "round_ids": list(self.round_ids),
        }


@dataclass(frozen=True)
class ContributionReceipt:
    """What happened to the value sent with a funding call."""

    request_id: int
    round_index: int
    party: Party
    contributor: str
    contributed: int
    refunded: int
    fully_paid: bool
    appeal_raised: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "request_id": self.request_id,
            "round_index": self.round_index,
            "party": self.party.name,
            "contributor": self.contributor,
            "contributed": self.contributed,
            "refunded": self.refunded,
            "fully_paid": self.fully_paid,
            "appeal_raised": self.appeal_raised,
        }
