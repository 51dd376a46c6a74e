"""Item identity, status transitions and item queries.

Status graph::

    ABSENT --request--> REGISTRATION_REQUESTED --accepted--> REGISTERED
    REGISTERED --request--> CLEARING_REQUESTED --accepted--> ABSENT

A request that is refused (or ruled OTHER) returns the item to the status it
had before the request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..clock import TimeoutClock
from ..events import EventLog, EventType
from ..exceptions import AlreadyResolved, DeadlineNotReached, InvalidState
from .constants import ArbitrationConstants
from .enums import ItemStatus, Party, RequestKind, Ruling
from .models import Item, Request
from .requests import RequestLedger
from .storage import LedgerStore

logger = logging.getLogger(__name__)

_REQUESTED_STATUS = {
    RequestKind.REGISTRATION: ItemStatus.REGISTRATION_REQUESTED,
    RequestKind.CLEARING: ItemStatus.CLEARING_REQUESTED,
}


def resolved_status(kind: RequestKind, winner: Party) -> ItemStatus:
    """Status an item settles in once its request is resolved."""
    accepted = winner == Party.REQUESTER
    if kind == RequestKind.REGISTRATION:
        return ItemStatus.REGISTERED if accepted else ItemStatus.ABSENT
    return ItemStatus.ABSENT if accepted else ItemStatus.REGISTERED


@dataclass
class ItemFilter:
    """Selection for ``ItemRegistry.query_items``; criteria are OR-ed."""

    absent: bool = False
    registered: bool = False
    registration_requested: bool = False
    clearing_requested: bool = False
    challenged_registration: bool = False
    challenged_clearing: bool = False
    my_submissions: bool = False
    my_challenges: bool = False

    @classmethod
    def everything(cls) -> ItemFilter:
        return cls(
            absent=True,
            registered=True,
            registration_requested=True,
            clearing_requested=True,
            challenged_registration=True,
            challenged_clearing=True,
        )


class ItemRegistry:
    """Owns items and their status; delegates requests to ``RequestLedger``."""

    def __init__(
        self,
        store: LedgerStore,
        requests: RequestLedger,
        events: EventLog,
        clock: TimeoutClock,
    ):
        self.store = store
        self.requests = requests
        self.events = events
        self.clock = clock
        requests.on_resolved = self._settle

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def request_status_change(
        self,
        item_id: str,
        payload: Any,
        requester: str,
        value: int,
        evidence: str = "",
    ) -> int:
        """Request registration of an absent item or clearing of a registered one.

        Returns:
            The id of the new request.

        Raises:
            InvalidState: The item already has an unresolved request.
            InsufficientFunds: The deposit is below the minimum.
        """
        if not self.store.has_item(item_id):
            self.store.add_item(item_id, payload)
        item = self.store.get_item(item_id)
        if item.status.is_requested:
            raise InvalidState(f"Item {item_id} already has an active request")

        kind = RequestKind.REGISTRATION if item.status == ItemStatus.ABSENT else RequestKind.CLEARING
        request = self.requests.submit(item_id, kind, requester, value)
        self._set_status(item, _REQUESTED_STATUS[kind], request.id)
        if evidence:
            self.requests.submit_evidence(request.id, requester, evidence)
        return request.id

    def execute_request(self, request_id: int) -> Request:
        """Accept an unchallenged request after its challenge period.

        Raises:
            AlreadyResolved: The request is resolved.
            InvalidState: The request is disputed.
            DeadlineNotReached: The challenge period has not elapsed.
        """
        request = self.store.get_request(request_id)
        if request.resolved:
            raise AlreadyResolved(request_id)
        if request.disputed:
            raise InvalidState(f"Request {request_id} is disputed and awaits a ruling")
        if not self.clock.has_elapsed(request.submission_time, request.params.challenge_period_duration):
            raise DeadlineNotReached(
                "Challenge period not over",
                deadline=self.requests.challenge_deadline(request),
                now=self.clock.now(),
            )

        request.resolved = True
        request.ruling = Ruling.ACCEPT
        self._settle(request)
        return request

    def _settle(self, request: Request) -> None:
        item = self.store.get_item(request.item_id)
        self._set_status(item, resolved_status(request.kind, request.winner), request.id)

    def _set_status(self, item: Item, status: ItemStatus, request_id: int) -> None:
        previous = item.status
        item.status = status
        self.events.emit(
            EventType.ITEM_STATUS_CHANGE,
            self.clock.now(),
            item_id=item.id,
            request_id=request_id,
            previous=previous.value,
            status=status.value,
        )
        logger.info(
            "Item %s: %s -> %s", item.id, previous.value, status.value,
            extra={"item_id": item.id, "request_id": request_id},
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def count_by_status(self) -> dict[str, int]:
        """Number of items per status, with challenged requests split out."""
        counts = {status.value: 0 for status in ItemStatus}
        counts["challenged_registration"] = 0
        counts["challenged_clearing"] = 0
        for item in self.store.items():
            request = self._latest_request(item)
            if request is not None and request.disputed and not request.resolved:
                key = (
                    "challenged_registration"
                    if item.status == ItemStatus.REGISTRATION_REQUESTED
                    else "challenged_clearing"
                )
                counts[key] += 1
            else:
                counts[item.status.value] += 1
        return counts

    def query_items(
        self,
        cursor: str | None = None,
        count: int = 100,
        filter: ItemFilter | None = None,
        oldest_first: bool = True,
        party: str | None = None,
    ) -> tuple[list[str], bool]:
        """Page through item ids matching ``filter``.

        Args:
            cursor: Item id to start from (inclusive); None starts at the edge.
            count: Page size.
            filter: Selection; defaults to every status.
            oldest_first: Iterate in submission order or reverse.
            party: Address used by the ``my_submissions``/``my_challenges`` criteria.

        Returns:
            (item_ids, has_more)
        """
        filter = filter or ItemFilter.everything()
        count = max(0, min(count, ArbitrationConstants.MAX_QUERY_COUNT))
        items = self.store.items()
        if not oldest_first:
            items.reverse()

        start = 0
        if cursor is not None:
            ids = [item.id for item in items]
            start = ids.index(cursor) if cursor in ids else len(ids)

        values: list[str] = []
        has_more = False
        for item in items[start:]:
            if not self._matches(item, filter, party):
                continue
            if len(values) == count:
                has_more = True
                break
            values.append(item.id)
        return values, has_more

    def _latest_request(self, item: Item) -> Request | None:
        if item.latest_request_id is None:
            return None
        return self.store.get_request(item.latest_request_id)

    def _matches(self, item: Item, filter: ItemFilter, party: str | None) -> bool:
        request = self._latest_request(item)
        disputed = request is not None and request.disputed and not request.resolved
        status = item.status
        if filter.absent and status == ItemStatus.ABSENT:
            return True
        if filter.registered and status == ItemStatus.REGISTERED:
            return True
        if filter.registration_requested and status == ItemStatus.REGISTRATION_REQUESTED and not disputed:
            return True
        if filter.clearing_requested and status == ItemStatus.CLEARING_REQUESTED and not disputed:
            return True
        if filter.challenged_registration and status == ItemStatus.REGISTRATION_REQUESTED and disputed:
            return True
        if filter.challenged_clearing and status == ItemStatus.CLEARING_REQUESTED and disputed:
            return True
        if party is not None and request is not None:
            if filter.my_submissions and request.requester == party:
                return True
            if filter.my_challenges and request.challenger == party:
                return True
        return False
