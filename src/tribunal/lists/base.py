"""Composition of the generic engine for a concrete payload type.

A ``CuratedList`` derives item ids from payloads and validates them before
they reach the engine. Everything else (challenges, appeals, rulings,
withdrawals) is addressed by request id and goes straight to ``engine``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from ..core.arbitration.engine import ArbitrableEngine
from ..core.arbitration.enums import ItemStatus
from ..core.arbitration.models import Item

logger = logging.getLogger(__name__)

P = TypeVar("P")


class CuratedList(ABC, Generic[P]):
    """A list of ``P`` payloads curated through disputes."""

    def __init__(self, engine: ArbitrableEngine[P]):
        self.engine = engine

    @abstractmethod
    def item_id(self, payload: P) -> str:
        """Stable id of the item a payload describes."""

    @abstractmethod
    def validate(self, payload: P) -> P:
        """Return the canonical form of ``payload`` or raise ``ValidationException``."""

    def request_status_change(self, payload: P, requester: str, value: int, evidence: str = "") -> int:
        """Request registration (or clearing, if already listed) of ``payload``."""
        payload = self.validate(payload)
        item_id = self.item_id(payload)
        logger.debug("Status change requested for %s", item_id)
        return self.engine.request_status_change(item_id, payload, requester, value, evidence)

    def get(self, payload: P) -> Item[P]:
        return self.engine.get_item(self.item_id(self.validate(payload)))

    def status_of(self, payload: P) -> ItemStatus:
        payload = self.validate(payload)
        item_id = self.item_id(payload)
        if not self.engine.store.has_item(item_id):
            return ItemStatus.ABSENT
        return self.engine.get_item(item_id).status

    def is_registered(self, payload: P) -> bool:
        return self.status_of(payload) in (ItemStatus.REGISTERED, ItemStatus.CLEARING_REQUESTED)
