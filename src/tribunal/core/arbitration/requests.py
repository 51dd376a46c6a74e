"""Request lifecycle: submission, challenge, dispute and final ruling.

A request is open for challenge during ``challenge_period_duration``. A
challenge with a matching deposit creates a dispute and the first appeal
round. The arbitrator then calls back twice per round: once with an
appealable ruling, which opens the appeal period, and once more with the
final ruling after the period (or its loser half) has run out.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..clock import TimeoutClock
from ..events import EventLog, EventType
from ..exceptions import (
    AlreadyChallenged,
    AlreadyResolved,
    DeadlineNotReached,
    DeadlinePassed,
    InsufficientFunds,
    InvalidState,
    Unauthorized,
    UnknownId,
)
from ..payments import Vault
from .constants import ArbitrationConstants
from .enums import Party, RequestKind, RequestPhase, Ruling
from .models import Request
from .rounds import record_deposit
from .storage import LedgerStore

if TYPE_CHECKING:
    from .gateway import Arbitrable
    from .governance import Governance

logger = logging.getLogger(__name__)


class RequestLedger:
    """Owns the request/challenge/dispute lifecycle."""

    def __init__(
        self,
        store: LedgerStore,
        vault: Vault,
        events: EventLog,
        clock: TimeoutClock,
        governance: Governance,
        arbitrable: Arbitrable,
    ):
        self.store = store
        self.vault = vault
        self.events = events
        self.clock = clock
        self.governance = governance
        self.arbitrable = arbitrable
        self.on_resolved: Callable[[Request], None] | None = None

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def minimum_deposit(self) -> int:
        """Deposit required to submit or challenge under current governance."""
        params = self.governance.params
        cost = self.governance.arbitrator.dispute_cost(params.arbitration_extra_data)
        return params.total_deposit(cost)

    def challenge_deadline(self, request: Request) -> int:
        return request.submission_time + request.params.challenge_period_duration

    def phase_of(self, request: Request) -> RequestPhase:
        if request.resolved:
            return RequestPhase.RESOLVED
        if not request.disputed:
            return RequestPhase.CHALLENGE_PERIOD
        if request.appeal_period is None:
            return RequestPhase.AWAITING_RULING
        return RequestPhase.APPEAL_PERIOD

    # ------------------------------------------------------------------
    # Submission and challenge
    # ------------------------------------------------------------------

    def submit(self, item_id: str, kind: RequestKind, requester: str, deposit: int) -> Request:
        """Open a request and record the requester's deposit in round 0.

        Raises:
            InsufficientFunds: If the deposit is below the minimum.
        """
        params = self.governance.params
        arbitrator = self.governance.arbitrator
        cost = arbitrator.dispute_cost(params.arbitration_extra_data)
        required = params.total_deposit(cost)
        if deposit < required:
            raise InsufficientFunds(
                "Deposit below the required submission amount",
                required=required,
                provided=deposit,
            )

        now = self.clock.now()
        request = self.store.new_request(
            item_id=item_id,
            kind=kind,
            requester=requester,
            submission_time=now,
            params=params,
            arbitrator=arbitrator.address,
            arbitrator_extra_data=params.arbitration_extra_data,
        )
        round_ = self.store.new_round(request.id)
        self.vault.receive(deposit)
        record_deposit(round_, Party.REQUESTER, requester, deposit)

        self.events.emit(
            EventType.REQUEST_SUBMITTED,
            now,
            request_id=request.id,
            item_id=item_id,
            kind=kind.value,
            requester=requester,
            deposit=deposit,
        )
        logger.info(
            "Request %d submitted for item %s (%s)", request.id, item_id, kind.value,
            extra={"request_id": request.id, "item_id": item_id},
        )
        return request

    def challenge(self, request_id: int, challenger: str, deposit: int, evidence: str = "") -> Request:
        """Challenge a request and raise a dispute.

        Raises:
            AlreadyResolved: The request is resolved.
            AlreadyChallenged: The request is already disputed.
            DeadlinePassed: The challenge period has elapsed.
            InsufficientFunds: The deposit is below the minimum.
        """
        request = self.store.get_request(request_id)
        if request.resolved:
            raise AlreadyResolved(request_id)
        if request.disputed:
            raise AlreadyChallenged(f"Request {request_id} is already challenged")

        params = request.params
        if self.clock.has_elapsed(request.submission_time, params.challenge_period_duration):
            raise DeadlinePassed(
                "Challenge period is over",
                deadline=self.challenge_deadline(request),
                now=self.clock.now(),
            )

        arbitrator = self.governance.arbitrator_for(request.arbitrator)
        cost = arbitrator.dispute_cost(request.arbitrator_extra_data)
        required = params.total_deposit(cost)
        if deposit < required:
            raise InsufficientFunds(
                "Deposit below the required challenge amount",
                required=required,
                provided=deposit,
            )

        round_ = self.store.get_round(request.round_ids[0])
        self.vault.receive(deposit)
        record_deposit(round_, Party.CHALLENGER, challenger, deposit)
        request.challenger = challenger

        dispute_id = arbitrator.create_dispute(
            ArbitrationConstants.RULING_OPTIONS,
            request.arbitrator_extra_data,
            cost,
            self.arbitrable,
        )
        self.vault.pay_arbitrator(cost)
        round_.fee_rewards -= cost

        request.disputed = True
        request.dispute_id = dispute_id
        self.store.link_dispute(arbitrator.address, dispute_id, request.id)
        self.store.new_round(request.id)

        now = self.clock.now()
        self.events.emit(
            EventType.DISPUTE,
            now,
            request_id=request.id,
            item_id=request.item_id,
            arbitrator=arbitrator.address,
            dispute_id=dispute_id,
            challenger=challenger,
        )
        if evidence:
            self.submit_evidence(request.id, challenger, evidence)
        logger.info(
            "Request %d challenged, dispute %d created", request.id, dispute_id,
            extra={"request_id": request.id, "item_id": request.item_id, "dispute_id": dispute_id},
        )
        return request

    def submit_evidence(self, request_id: int, party: str, evidence: str) -> None:
        """Attach opaque evidence to a request's dispute."""
        request = self.store.get_request(request_id)
        if request.resolved:
            raise AlreadyResolved(request_id)
        self.events.emit(
            EventType.EVIDENCE,
            self.clock.now(),
            request_id=request.id,
            item_id=request.item_id,
            party=party,
            evidence=evidence,
        )

    # ------------------------------------------------------------------
    # Arbitrator callback
    # ------------------------------------------------------------------

    def _request_for_ruling(self, caller: str, dispute_id: int) -> Request:
        matches = self.store.requests_with_dispute(dispute_id)
        if not matches:
            raise UnknownId("Dispute", dispute_id)
        for request in matches:
            if request.arbitrator == caller:
                return request
        raise Unauthorized(f"Only the arbitrator of dispute {dispute_id} can rule", caller=caller)

    def rule(self, caller: str, dispute_id: int, ruling: int) -> Request:
        """Handle a ruling from the arbitrator.

        The first call in a round is appealable and opens the appeal
        period. The next call is final and is accepted once the period is
        over, or once the loser half is over without the loser fully paid.

        Raises:
            UnknownId: Unknown dispute.
            Unauthorized: Caller is not the dispute's arbitrator.
            AlreadyResolved: The request is resolved.
            InvalidState: Ruling outside the offered options.
            DeadlineNotReached: Final ruling given while funding is still open.
        """
        request = self._request_for_ruling(caller, dispute_id)
        if request.resolved:
            raise AlreadyResolved(request.id)
        if ruling not in tuple(Ruling):
            raise InvalidState(f"Ruling {ruling} is not a valid option")
        ruling = Ruling(ruling)

        now = self.clock.now()
        if request.appeal_period is None:
            request.current_ruling = ruling
            request.appeal_period = self.clock.window(request.params.appeal_period_duration)
            self.events.emit(
                EventType.APPEALABLE_RULING,
                now,
                request_id=request.id,
                item_id=request.item_id,
                dispute_id=dispute_id,
                ruling=ruling.name,
                appeal_period=request.appeal_period.to_dict(),
            )
            logger.info(
                "Appealable ruling %s for request %d", ruling.name, request.id,
                extra={"request_id": request.id, "dispute_id": dispute_id},
            )
            return request

        window = request.appeal_period
        if now < window.end and not self._loser_out_of_time(request, now):
            raise DeadlineNotReached(
                "Appeal period still open",
                deadline=window.end,
                now=now,
            )
        self.resolve(request, ruling)
        return request

    def _loser_out_of_time(self, request: Request, now: int) -> bool:
        """Whether the loser half elapsed without the loser fully funding."""
        current = request.current_ruling
        if current is None or current == Ruling.OTHER:
            return False
        if now < request.appeal_period.half:
            return False
        loser = Party.for_ruling(current).opponent
        round_ = self.store.get_round(request.current_round_id)
        return not round_.fully_paid[loser]

    def resolve(self, request: Request, stated: Ruling) -> None:
        """Apply the final ruling.

        If only one side fully funded the last round, that side wins
        whatever the arbitrator stated.
        """
        round_ = self.store.get_round(request.current_round_id)
        final = stated
        if round_.fully_paid[Party.REQUESTER] and not round_.fully_paid[Party.CHALLENGER]:
            final = Ruling.ACCEPT
        elif round_.fully_paid[Party.CHALLENGER] and not round_.fully_paid[Party.REQUESTER]:
            final = Ruling.REFUSE
        if final != stated:
            logger.info(
                "Request %d: ruling %s overridden to %s (unfunded side)",
                request.id, stated.name, final.name,
            )

        request.resolved = True
        request.ruling = final
        self.events.emit(
            EventType.RULING,
            self.clock.now(),
            request_id=request.id,
            item_id=request.item_id,
            dispute_id=request.dispute_id,
            stated=stated.name,
            ruling=final.name,
        )
        if self.on_resolved is not None:
            self.on_resolved(request)
