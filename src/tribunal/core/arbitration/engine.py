"""ArbitrableEngine - the single capability surface of a curated list.

Wires the ledgers together and runs every entry point as an atomic
transaction. The arena journals the records a call touches while the
custody vault and event log are snapshotted; everything is restored if the
call raises, including on a refused payout.
Outbound transfers are only sent once the ledger work has succeeded.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from ..clock import TimeoutClock, Window
from ..config import EngineSettings, get_config
from ..events import EventLog, EventType
from ..logging import operation_logger, transaction_context
from ..payments import BalanceBook, PayoutSink, Vault
from .distributor import FeeDistributor
from .enums import Party, RequestPhase
from .gateway import ArbitratorGateway
from .governance import Governance, GovernanceParams
from .models import ContributionReceipt, Item, Request, Round
from .registry import ItemFilter, ItemRegistry
from .requests import RequestLedger
from .rounds import RoundLedger
from .storage import LedgerStore

logger = logging.getLogger(__name__)

P = TypeVar("P")


class ArbitrableEngine(Generic[P]):
    """Generic request → challenge → dispute → appeal → payout engine.

    Parameterised over the item payload type; domain lists compose it
    rather than subclass it.

    Example:
        engine = ArbitrableEngine(arbitrator, governor="0xgov", params=params)
        request_id = engine.request_status_change("item", payload, "0xalice", value=15)
        clock.advance(params.challenge_period_duration + 1)
        engine.execute_request(request_id)
        engine.withdraw("0xalice", "item", request_id, 0)
    """

    def __init__(
        self,
        arbitrator: ArbitratorGateway,
        governor: str,
        params: GovernanceParams | None = None,
        clock: TimeoutClock | None = None,
        sink: PayoutSink | None = None,
        registration_meta_evidence: str = "",
        clearing_meta_evidence: str = "",
        settings: EngineSettings | None = None,
    ):
        if params is None:
            params = GovernanceParams.from_settings(settings or get_config())

        self.clock = clock or TimeoutClock()
        self.sink = sink or BalanceBook()
        self.store = LedgerStore()
        self.vault = Vault(self.sink)
        self.events = EventLog()
        self.governance = Governance(
            governor,
            arbitrator,
            params,
            registration_meta_evidence=registration_meta_evidence,
            clearing_meta_evidence=clearing_meta_evidence,
        )

        self.rounds = RoundLedger(self.store, self.vault, self.events, self.clock, self.governance)
        self.requests = RequestLedger(
            self.store, self.vault, self.events, self.clock, self.governance, arbitrable=self
        )
        self.registry = ItemRegistry(self.store, self.requests, self.events, self.clock)
        self.distributor = FeeDistributor(self.store, self.vault, self.events, self.clock)

        self._lock = threading.RLock()
        self._depth = 0
        self._emit_meta_evidence()

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self, operation: str, **arguments: Any) -> Iterator[None]:
        with self._lock, transaction_context(operation):
            if self._depth:
                # Nested call (an arbitrator ruling from inside another
                # operation) commits or rolls back with the outer one.
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            operation_logger.log_call(operation, arguments)
            self.store.begin()
            vault_snapshot = self.vault.snapshot()
            events_length = len(self.events)
            self._depth = 1
            try:
                yield
                self.vault.flush()
            except Exception as e:
                self.store.rollback()
                self.vault.restore(vault_snapshot)
                self.events.truncate(events_length)
                operation_logger.log_result(operation, False, error=type(e).__name__)
                raise
            finally:
                self._depth = 0
            self.store.commit()
            operation_logger.log_result(operation, True)

    # ------------------------------------------------------------------
    # Capability interface
    # ------------------------------------------------------------------

    def request_status_change(
        self,
        item_id: str,
        payload: P,
        requester: str,
        value: int,
        evidence: str = "",
    ) -> int:
        """Submit a registration or clearing request; returns the request id."""
        with self._transaction("request_status_change", item_id=item_id, requester=requester, value=value):
            return self.registry.request_status_change(item_id, payload, requester, value, evidence)

    submit = request_status_change

    def challenge_request(self, request_id: int, challenger: str, value: int, evidence: str = "") -> int:
        """Challenge a request; returns the dispute id."""
        with self._transaction("challenge_request", request_id=request_id, challenger=challenger, value=value):
            request = self.requests.challenge(request_id, challenger, value, evidence)
            return request.dispute_id

    challenge = challenge_request

    def fund_appeal(self, request_id: int, party: Party, contributor: str, value: int) -> ContributionReceipt:
        """Contribute to one side's appeal fee; any excess is refunded at once."""
        with self._transaction(
            "fund_appeal", request_id=request_id, party=int(party), contributor=contributor, value=value
        ):
            return self.rounds.fund_appeal(request_id, party, contributor, value)

    def rule(self, caller: str, dispute_id: int, ruling: int) -> None:
        """Arbitrator callback (appealable ruling first, then final)."""
        with self._transaction("rule", caller=caller, dispute_id=dispute_id, ruling=int(ruling)):
            self.requests.rule(caller, dispute_id, ruling)

    def execute_request(self, request_id: int) -> None:
        """Accept an unchallenged request once its challenge period is over."""
        with self._transaction("execute_request", request_id=request_id):
            self.registry.execute_request(request_id)

    execute = execute_request

    def withdraw(self, beneficiary: str, item_id: str, request_id: int, round_index: int) -> int:
        """Withdraw a beneficiary's fees and rewards for one round."""
        with self._transaction(
            "withdraw", beneficiary=beneficiary, item_id=item_id, request_id=request_id, round_index=round_index
        ):
            return self.distributor.withdraw(beneficiary, item_id, request_id, round_index)

    def batch_round_withdraw(
        self, beneficiary: str, item_id: str, request_id: int, cursor: int = 0, count: int = 0
    ) -> int:
        with self._transaction("batch_round_withdraw", beneficiary=beneficiary, request_id=request_id):
            return self.distributor.batch_round_withdraw(beneficiary, item_id, request_id, cursor, count)

    def batch_request_withdraw(self, beneficiary: str, item_id: str, cursor: int = 0, count: int = 0) -> int:
        with self._transaction("batch_request_withdraw", beneficiary=beneficiary, item_id=item_id):
            return self.distributor.batch_request_withdraw(beneficiary, item_id, cursor, count)

    def submit_evidence(self, request_id: int, party: str, evidence: str) -> None:
        with self._transaction("submit_evidence", request_id=request_id, party=party):
            self.requests.submit_evidence(request_id, party, evidence)

    # ------------------------------------------------------------------
    # Governance
    # ------------------------------------------------------------------

    def _govern(self, operation: str, caller: str, *args: Any) -> None:
        with self._transaction(operation, caller=caller):
            getattr(self.governance, operation)(caller, *args)
            self.events.emit(EventType.GOVERNANCE_CHANGE, self.clock.now(), change=operation)

    def change_governor(self, caller: str, new_governor: str) -> None:
        self._govern("change_governor", caller, new_governor)

    def change_base_deposit(self, caller: str, base_deposit: int) -> None:
        self._govern("change_base_deposit", caller, base_deposit)

    def change_challenge_period_duration(self, caller: str, duration: int) -> None:
        self._govern("change_challenge_period_duration", caller, duration)

    def change_appeal_period_duration(self, caller: str, duration: int) -> None:
        self._govern("change_appeal_period_duration", caller, duration)

    def change_shared_multiplier(self, caller: str, multiplier: int) -> None:
        self._govern("change_shared_multiplier", caller, multiplier)

    def change_winner_multiplier(self, caller: str, multiplier: int) -> None:
        self._govern("change_winner_multiplier", caller, multiplier)

    def change_loser_multiplier(self, caller: str, multiplier: int) -> None:
        self._govern("change_loser_multiplier", caller, multiplier)

    def change_arbitrator(self, caller: str, arbitrator: ArbitratorGateway, extra_data: str = "") -> None:
        self._govern("change_arbitrator", caller, arbitrator, extra_data)

    def change_meta_evidence(self, caller: str, registration: str, clearing: str) -> None:
        with self._transaction("change_meta_evidence", caller=caller):
            self.governance.change_meta_evidence(caller, registration, clearing)
            self._emit_meta_evidence()

    def _emit_meta_evidence(self) -> None:
        now = self.clock.now()
        self.events.emit(
            EventType.META_EVIDENCE, now, kind="registration", evidence=self.governance.registration_meta_evidence
        )
        self.events.emit(
            EventType.META_EVIDENCE, now, kind="clearing", evidence=self.governance.clearing_meta_evidence
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def params(self) -> GovernanceParams:
        return self.governance.params

    def minimum_deposit(self) -> int:
        return self.requests.minimum_deposit()

    def get_item(self, item_id: str) -> Item[P]:
        return self.store.get_item(item_id)

    def get_request(self, request_id: int) -> Request:
        return self.store.get_request(request_id)

    def get_round(self, request_id: int, round_index: int) -> Round:
        return self.store.round_at(request_id, round_index)

    def get_request_for_dispute(self, arbitrator: str, dispute_id: int) -> Request:
        return self.store.request_for_dispute(arbitrator, dispute_id)

    def phase_of(self, request_id: int) -> RequestPhase:
        return self.requests.phase_of(self.store.get_request(request_id))

    def appeal_period(self, request_id: int) -> Window | None:
        return self.store.get_request(request_id).appeal_period

    def required_fee(self, request_id: int, party: Party) -> int:
        """Appeal fee ``party`` must raise in the current round."""
        return self.rounds.required_fee(self.store.get_request(request_id), Party(party))

    def amount_withdrawable(self, beneficiary: str, item_id: str, request_id: int, round_index: int) -> int:
        return self.distributor.amount_withdrawable(beneficiary, item_id, request_id, round_index)

    def query_items(
        self,
        cursor: str | None = None,
        count: int = 100,
        filter: ItemFilter | None = None,
        oldest_first: bool = True,
        party: str | None = None,
    ) -> tuple[list[str], bool]:
        return self.registry.query_items(cursor, count, filter, oldest_first, party)

    def count_by_status(self) -> dict[str, int]:
        return self.registry.count_by_status()

    def item_count(self) -> int:
        return self.store.item_count()
