# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Tribunal Contributors

"""Arena storage for items, requests and rounds.

All records live in flat maps keyed by ids. Request and round ids are
integers assigned monotonically; item ids come from the domain layer.
Records refer to each other by id only.

Transactions are journaled: between ``begin`` and ``commit`` every record
handed out by the store is copied once before it can be changed, and
every record created is remembered. ``rollback`` puts the copied state
back into the same objects and drops the created ones, so its cost
follows what the transaction touched rather than the size of the arena.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import UnknownId
from .enums import ItemStatus, RequestKind
from .governance import GovernanceParams
from .models import Item, Request, Round

logger = logging.getLogger(__name__)

_UNLINKED = object()


@dataclass
class Journal:
    """Undo log of one open transaction."""

    next_request_id: int
    next_round_id: int
    saved: dict[tuple[str, Any], tuple[Any, dict[str, Any]]] = field(default_factory=dict)
    created: dict[tuple[str, Any], None] = field(default_factory=dict)
    links: list[tuple[tuple[str, int], Any]] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.saved) + len(self.created) + len(self.links)


class LedgerStore:
    """In-memory arena keyed by opaque ids."""

    def __init__(self) -> None:
        self._items: dict[str, Item] = {}
        self._requests: dict[int, Request] = {}
        self._rounds: dict[int, Round] = {}
        self._disputes: dict[tuple[str, int], int] = {}
        self._next_request_id = 0
        self._next_round_id = 0
        self._journal: Journal | None = None

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def has_item(self, item_id: str) -> bool:
        return item_id in self._items

    def get_item(self, item_id: str) -> Item:
        try:
            item = self._items[item_id]
        except KeyError:
            raise UnknownId("Item", item_id) from None
        return self._track("item", item_id, item)

    def add_item(self, item_id: str, payload: Any) -> Item:
        item = Item(id=item_id, payload=payload, status=ItemStatus.ABSENT)
        self._items[item_id] = item
        self._created("item", item_id)
        return item

    def items(self) -> list[Item]:
        """Items in submission order."""
        return [self._track("item", item.id, item) for item in self._items.values()]

    def item_count(self) -> int:
        return len(self._items)

    # ------------------------------------------------------------------
    # Requests and rounds
    # ------------------------------------------------------------------

    def new_request(
        self,
        item_id: str,
        kind: RequestKind,
        requester: str,
        submission_time: int,
        params: GovernanceParams,
        arbitrator: str,
        arbitrator_extra_data: str,
    ) -> Request:
        item = self.get_item(item_id)
        request = Request(
            id=self._next_request_id,
            item_id=item_id,
            kind=kind,
            requester=requester,
            submission_time=submission_time,
            params=params,
            arbitrator=arbitrator,
            arbitrator_extra_data=arbitrator_extra_data,
        )
        self._next_request_id += 1
        self._requests[request.id] = request
        self._created("request", request.id)
        item.request_ids.append(request.id)
        return request

    def get_request(self, request_id: int) -> Request:
        try:
            request = self._requests[request_id]
        except KeyError:
            raise UnknownId("Request", request_id) from None
        return self._track("request", request_id, request)

    def request_count(self) -> int:
        return len(self._requests)

    def new_round(self, request_id: int) -> Round:
        request = self.get_request(request_id)
        round_ = Round(id=self._next_round_id, request_id=request_id, index=len(request.round_ids))
        self._next_round_id += 1
        self._rounds[round_.id] = round_
        self._created("round", round_.id)
        request.round_ids.append(round_.id)
        return round_

    def get_round(self, round_id: int) -> Round:
        try:
            round_ = self._rounds[round_id]
        except KeyError:
            raise UnknownId("Round", round_id) from None
        return self._track("round", round_id, round_)

    def round_at(self, request_id: int, index: int) -> Round:
        """Round by its position within a request."""
        request = self.get_request(request_id)
        if not 0 <= index < len(request.round_ids):
            raise UnknownId("Round", f"{request_id}/{index}")
        return self.get_round(request.round_ids[index])

    def rounds_of(self, request_id: int) -> list[Round]:
        return [self.get_round(rid) for rid in self.get_request(request_id).round_ids]

    # ------------------------------------------------------------------
    # Dispute correlation
    # ------------------------------------------------------------------

    def link_dispute(self, arbitrator: str, dispute_id: int, request_id: int) -> None:
        key = (arbitrator, dispute_id)
        if self._journal is not None:
            self._journal.links.append((key, self._disputes.get(key, _UNLINKED)))
        self._disputes[key] = request_id

    def request_for_dispute(self, arbitrator: str, dispute_id: int) -> Request:
        try:
            request_id = self._disputes[(arbitrator, dispute_id)]
        except KeyError:
            raise UnknownId("Dispute", dispute_id) from None
        return self.get_request(request_id)

    def requests_with_dispute(self, dispute_id: int) -> list[Request]:
        """Requests whose dispute has this id, across every arbitrator."""
        return [
            self.get_request(request_id)
            for (_, did), request_id in self._disputes.items()
            if did == dispute_id
        ]

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @property
    def in_transaction(self) -> bool:
        return self._journal is not None

    def begin(self) -> None:
        """Start journaling changes.

        Raises:
            RuntimeError: A transaction is already open.
        """
        if self._journal is not None:
            raise RuntimeError("A ledger transaction is already open")
        self._journal = Journal(
            next_request_id=self._next_request_id,
            next_round_id=self._next_round_id,
        )

    def commit(self) -> None:
        self._require_journal()
        self._journal = None

    def rollback(self) -> None:
        """Undo everything done since ``begin``, in place."""
        journal = self._require_journal()
        self._journal = None

        for key, previous in reversed(journal.links):
            if previous is _UNLINKED:
                self._disputes.pop(key, None)
            else:
                self._disputes[key] = previous
        for kind, record_id in reversed(journal.created):
            self._arena(kind).pop(record_id, None)
        for record, state in journal.saved.values():
            record.__dict__.clear()
            record.__dict__.update(state)

        self._next_request_id = journal.next_request_id
        self._next_round_id = journal.next_round_id
        logger.debug("Ledger rolled back (%d journal entries)", journal.size)

    def _require_journal(self) -> Journal:
        if self._journal is None:
            raise RuntimeError("No ledger transaction is open")
        return self._journal

    def _arena(self, kind: str) -> dict[Any, Any]:
        return {"item": self._items, "request": self._requests, "round": self._rounds}[kind]

    def _track(self, kind: str, record_id: Any, record: Any) -> Any:
        journal = self._journal
        key = (kind, record_id)
        if journal is not None and key not in journal.saved and key not in journal.created:
            journal.saved[key] = (record, copy.deepcopy(vars(record)))
        return record

    def _created(self, kind: str, record_id: Any) -> None:
        if self._journal is not None:
            self._journal.created[(kind, record_id)] = None
