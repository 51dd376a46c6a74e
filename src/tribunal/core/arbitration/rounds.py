"""Per-round contribution accounting and the appeal-funding race.

After an appealable ruling, both sides crowdfund the appeal fee. The side
the ruling favours may fund during the whole appeal period; the other side
only during its first half. Each side's requirement is the appeal cost plus
a stake scaled by the winner, loser or shared multiplier. Once both sides
are fully paid the appeal is raised immediately and a fresh round opens.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..clock import TimeoutClock
from ..events import EventLog, EventType
from ..exceptions import AlreadyResolved, DeadlinePassed, InsufficientFunds, InvalidState
from ..payments import Vault
from .constants import ArbitrationConstants
from .enums import Party, Ruling
from .models import FUNDED_SIDES, ContributionReceipt, Request, Round
from .storage import LedgerStore

if TYPE_CHECKING:
    from .governance import Governance

logger = logging.getLogger(__name__)


def scaled_fee(appeal_cost: int, multiplier: int) -> int:
    """Appeal cost plus its stake: ``cost + cost * multiplier / DIVISOR``."""
    return appeal_cost + appeal_cost * multiplier // ArbitrationConstants.MULTIPLIER_DIVISOR


def contribute(round_: Round, party: Party, contributor: str, amount: int, required: int) -> tuple[int, int]:
    """Credit ``amount`` toward ``party`` up to ``required``.

    Returns:
        (contribution, remainder) where the remainder must go back to the
        contributor.
    """
    missing = max(required - round_.paid_total[party], 0)
    contribution = min(amount, missing)
    remainder = amount - contribution

    key = (contributor, party)
    round_.contributions[key] = round_.contributions.get(key, 0) + contribution
    round_.paid_total[party] += contribution
    round_.fee_rewards += contribution
    return contribution, remainder


def record_deposit(round_: Round, party: Party, contributor: str, amount: int) -> None:
    """Record a submission or challenge deposit in full.

    Deposits are checked against their minimum before this is called, and
    any overpayment is kept as part of the contribution.
    """
    round_.required[party] = amount
    contribute(round_, party, contributor, amount, amount)
    round_.fully_paid[party] = True


class RoundLedger:
    """Funding state of the rounds of every request."""

    def __init__(
        self,
        store: LedgerStore,
        vault: Vault,
        events: EventLog,
        clock: TimeoutClock,
        governance: Governance,
    ):
        self.store = store
        self.vault = vault
        self.events = events
        self.clock = clock
        self.governance = governance

    def multiplier_for(self, request: Request, party: Party) -> int:
        params = request.params
        if request.current_ruling is None or request.current_ruling == Ruling.OTHER:
            return params.shared_multiplier
        if party == Party.for_ruling(request.current_ruling):
            return params.winner_multiplier
        return params.loser_multiplier

    def funding_deadline(self, request: Request, party: Party) -> int:
        """Last instant (exclusive) at which ``party`` may fund the current round."""
        window = request.appeal_period
        if window is None:
            raise InvalidState(f"Request {request.id} has no appealable ruling")
        ruling = request.current_ruling
        if ruling is None or ruling == Ruling.OTHER or party == Party.for_ruling(ruling):
            return window.end
        return window.half

    def required_fee(self, request: Request, party: Party) -> int:
        """Amount ``party`` must raise in the current round.

        Follows the arbitrator's current appeal cost but never drops below
        what the round already asked of the side.
        """
        round_ = self.store.get_round(request.current_round_id)
        scaled = scaled_fee(self.appeal_cost(request), self.multiplier_for(request, party))
        return max(round_.required[party], scaled)

    def appeal_cost(self, request: Request) -> int:
        arbitrator = self.governance.arbitrator_for(request.arbitrator)
        return arbitrator.appeal_cost(request.dispute_id, request.arbitrator_extra_data)

    def fund_appeal(self, request_id: int, party: Party, contributor: str, value: int) -> ContributionReceipt:
        """Contribute toward one side's appeal fee.

        Raises:
            AlreadyResolved: The request is resolved.
            InvalidState: Wrong party, no appealable ruling, or side already funded.
            DeadlinePassed: The side's funding window has closed.
            InsufficientFunds: Nothing was sent.
            PayoutFailed: The excess could not be returned to the contributor.
        """
        request = self.store.get_request(request_id)
        if request.resolved:
            raise AlreadyResolved(request_id)
        if party not in FUNDED_SIDES:
            raise InvalidState(f"Cannot fund party {party!r}")
        party = Party(party)
        if not request.disputed or request.appeal_period is None:
            raise InvalidState(f"Request {request_id} has no appealable ruling")

        deadline = self.funding_deadline(request, party)
        now = self.clock.now()
        if now >= deadline:
            raise DeadlinePassed(
                f"Appeal funding for {party.name} closed",
                deadline=deadline,
                now=now,
            )

        round_ = self.store.get_round(request.current_round_id)
        if round_.fully_paid[party]:
            raise InvalidState(f"{party.name} side already fully funded")
        if value <= 0:
            raise InsufficientFunds("Appeal contribution must be positive", provided=value)

        appeal_cost = self.appeal_cost(request)
        required = max(round_.required[party], scaled_fee(appeal_cost, self.multiplier_for(request, party)))
        round_.required[party] = required

        self.vault.receive(value)
        contributed, remainder = contribute(round_, party, contributor, value, required)
        self.vault.queue_payout(contributor, remainder)

        self.events.emit(
            EventType.APPEAL_CONTRIBUTION,
            now,
            request_id=request.id,
            item_id=request.item_id,
            round_index=round_.index,
            party=party.name,
            contributor=contributor,
            amount=contributed,
        )

        if round_.paid_total[party] >= required:
            round_.fully_paid[party] = True
            self.events.emit(
                EventType.HAS_PAID_APPEAL_FEE,
                now,
                request_id=request.id,
                item_id=request.item_id,
                round_index=round_.index,
                party=party.name,
            )
            logger.info(
                "Request %d round %d: %s fully funded", request.id, round_.index, party.name,
                extra={"request_id": request.id, "round_index": round_.index},
            )

        appeal_raised = False
        if round_.both_paid:
            self._raise_appeal(request, round_, appeal_cost)
            appeal_raised = True

        return ContributionReceipt(
            request_id=request.id,
            round_index=round_.index,
            party=party,
            contributor=contributor,
            contributed=contributed,
            refunded=remainder,
            fully_paid=round_.fully_paid[party],
            appeal_raised=appeal_raised,
        )

    def _raise_appeal(self, request: Request, round_: Round, appeal_cost: int) -> None:
        """Pay the arbitrator out of the round and open the next one.

        Ledger work and pending refunds go first. The arbitrator is called
        last, once nothing else in the transaction can fail.
        """
        if round_.total_paid < appeal_cost:
            raise InsufficientFunds(
                f"Round {round_.index} cannot cover the appeal",
                required=appeal_cost,
                provided=round_.total_paid,
            )

        self.vault.pay_arbitrator(appeal_cost)
        round_.fee_rewards -= appeal_cost
        round_.appealed = True
        self.store.new_round(request.id)
        request.appeal_period = None
        request.current_ruling = None

        self.events.emit(
            EventType.APPEAL_RAISED,
            self.clock.now(),
            request_id=request.id,
            item_id=request.item_id,
            dispute_id=request.dispute_id,
            round_index=round_.index,
        )

        self.vault.flush()
        arbitrator = self.governance.arbitrator_for(request.arbitrator)
        arbitrator.appeal(request.dispute_id, request.arbitrator_extra_data, appeal_cost)
        logger.info(
            "Appeal raised for dispute %s (request %d)", request.dispute_id, request.id,
            extra={"request_id": request.id, "dispute_id": request.dispute_id, "round_index": round_.index},
        )
