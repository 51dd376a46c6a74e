# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Tribunal Contributors

"""Append-only event log.

Events are the observable side of every state transition: the evidence
channel (MetaEvidence, Evidence) passes through here untouched, and
front-ends reconstruct funding progress from AppealContribution and
HasPaidAppealFee without reading the ledger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class EventType(StrEnum):
    """Kinds of events emitted by the engine."""

    META_EVIDENCE = "meta_evidence"
    EVIDENCE = "evidence"
    REQUEST_SUBMITTED = "request_submitted"
    ITEM_STATUS_CHANGE = "item_status_change"
    DISPUTE = "dispute"
    APPEALABLE_RULING = "appealable_ruling"
    APPEAL_CONTRIBUTION = "appeal_contribution"
    HAS_PAID_APPEAL_FEE = "has_paid_appeal_fee"
    APPEAL_RAISED = "appeal_raised"
    RULING = "ruling"
    REWARD_WITHDRAWN = "reward_withdrawn"
    GOVERNANCE_CHANGE = "governance_change"


@dataclass(frozen=True)
class Event:
    """A single emitted event."""

    sequence: int
    type: EventType
    timestamp: int
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequence": self.sequence,
            "type": self.type.value,
            "timestamp": self.timestamp,
            "data": dict(self.data),
        }


class EventLog:
    """Ordered, append-only list of events.

    ``truncate`` exists only so a failed transaction can drop the events it
    emitted; committed events are never removed.
    """

    def __init__(self) -> None:
        self._events: list[Event] = []

    def emit(self, event_type: EventType, timestamp: int, **data: Any) -> Event:
        event = Event(sequence=len(self._events), type=event_type, timestamp=timestamp, data=data)
        self._events.append(event)
        logger.debug("Event %s #%d: %s", event_type.value, event.sequence, data)
        return event

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(list(self._events))

    def filter(self, event_type: EventType | None = None, **match: Any) -> list[Event]:
        """Events of a type whose data contains every ``match`` pair."""
        return [
            e
            for e in self._events
            if (event_type is None or e.type == event_type)
            and all(e.data.get(k) == v for k, v in match.items())
        ]

    def truncate(self, length: int) -> None:
        del self._events[length:]
