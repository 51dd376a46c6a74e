"""Pull-based distribution of deposits, fees and rewards.

Nothing is pushed to contributors when a request resolves. Each
contributor (or anyone on their behalf) withdraws per round once the
request is resolved:

- a round not fully funded by both sides refunds every contribution as is;
- a fully funded round split by an OTHER ruling shares the remaining fee
  pool proportionally to what each contributor put in;
- otherwise contributors to the winning side share the pool in proportion
  to their share of that side's total.

Integer division may leave a few units of dust in custody.
"""

from __future__ import annotations

import logging

from ..clock import TimeoutClock
from ..events import EventLog, EventType
from ..exceptions import InvalidState, UnknownId
from ..payments import Vault
from .enums import Party, Ruling
from .models import FUNDED_SIDES, Request, Round
from .storage import LedgerStore

logger = logging.getLogger(__name__)


def entitlement(request: Request, round_: Round, beneficiary: str) -> int:
    """Amount ``beneficiary`` may withdraw from ``round_``."""
    own = {party: round_.contribution_of(beneficiary, party) for party in FUNDED_SIDES}

    if not round_.both_paid:
        return sum(own.values())

    if request.ruling == Ruling.OTHER:
        total = round_.total_paid
        if total == 0:
            return 0
        return sum(own[party] * round_.fee_rewards // total for party in FUNDED_SIDES)

    winner = Party.for_ruling(request.ruling)
    paid = round_.paid_total[winner]
    if paid == 0:
        return 0
    return own[winner] * round_.fee_rewards // paid


class FeeDistributor:
    """Computes and pays out what each contributor is owed."""

    def __init__(self, store: LedgerStore, vault: Vault, events: EventLog, clock: TimeoutClock):
        self.store = store
        self.vault = vault
        self.events = events
        self.clock = clock

    def _locate(self, item_id: str, request_id: int) -> Request:
        self.store.get_item(item_id)
        request = self.store.get_request(request_id)
        if request.item_id != item_id:
            raise UnknownId("Request", f"{item_id}/{request_id}")
        return request

    def amount_withdrawable(self, beneficiary: str, item_id: str, request_id: int, round_index: int) -> int:
        """What ``withdraw`` would pay right now; 0 for unresolved requests."""
        request = self._locate(item_id, request_id)
        round_ = self.store.round_at(request_id, round_index)
        if not request.resolved:
            return 0
        return entitlement(request, round_, beneficiary)

    def withdraw(self, beneficiary: str, item_id: str, request_id: int, round_index: int) -> int:
        """Pay ``beneficiary`` what it is owed for one round.

        The beneficiary's contributions to the round are cleared, so calling
        again returns 0 and changes nothing.

        Raises:
            UnknownId: Unknown item, request or round, or request of another item.
            InvalidState: The request is not resolved yet.
        """
        request = self._locate(item_id, request_id)
        round_ = self.store.round_at(request_id, round_index)
        if not request.resolved:
            raise InvalidState(f"Request {request_id} is not resolved")

        reward = entitlement(request, round_, beneficiary)
        for party in FUNDED_SIDES:
            round_.contributions.pop((beneficiary, party), None)

        if reward == 0:
            return 0

        self.vault.queue_payout(beneficiary, reward)
        self.events.emit(
            EventType.REWARD_WITHDRAWN,
            self.clock.now(),
            beneficiary=beneficiary,
            item_id=item_id,
            request_id=request_id,
            round_index=round_index,
            amount=reward,
        )
        logger.info(
            "Withdrawal of %d for request %d round %d",
            reward, request_id, round_index,
            extra={"request_id": request_id, "item_id": item_id, "round_index": round_index},
        )
        return reward

    def batch_round_withdraw(
        self,
        beneficiary: str,
        item_id: str,
        request_id: int,
        cursor: int = 0,
        count: int = 0,
    ) -> int:
        """Withdraw from ``count`` rounds starting at ``cursor`` (0 means all)."""
        request = self._locate(item_id, request_id)
        end = len(request.round_ids) if count == 0 else min(cursor + count, len(request.round_ids))
        return sum(self.withdraw(beneficiary, item_id, request_id, index) for index in range(cursor, end))

    def batch_request_withdraw(
        self,
        beneficiary: str,
        item_id: str,
        cursor: int = 0,
        count: int = 0,
    ) -> int:
        """Withdraw from every round of ``count`` requests of an item.

        Unresolved requests are skipped so the call can run at any time.
        """
        item = self.store.get_item(item_id)
        end = len(item.request_ids) if count == 0 else min(cursor + count, len(item.request_ids))
        total = 0
        for request_id in item.request_ids[cursor:end]:
            if not self.store.get_request(request_id).resolved:
                continue
            total += self.batch_round_withdraw(beneficiary, item_id, request_id)
        return total
