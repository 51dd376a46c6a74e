"""Enums for the arbitration workflow.

Integer values match the arbitrator wire format: ruling 0 means the
arbitrator refused to decide, 1 sides with the requester, 2 with the
challenger.
"""

from enum import IntEnum, StrEnum


class Ruling(IntEnum):
    """Outcome issued by the arbitrator."""
    OTHER = 0    # No decision
    ACCEPT = 1   # The requester wins
    REFUSE = 2   # The challenger wins


class Party(IntEnum):
    """Side of a request."""
    NONE = 0
    REQUESTER = 1
    CHALLENGER = 2

    @property
    def opponent(self) -> "Party":
        if self is Party.REQUESTER:
            return Party.CHALLENGER
        if self is Party.CHALLENGER:
            return Party.REQUESTER
        return Party.NONE

    @classmethod
    def for_ruling(cls, ruling: Ruling) -> "Party":
        """The party a ruling favours."""
        if ruling == Ruling.ACCEPT:
            return cls.REQUESTER
        if ruling == Ruling.REFUSE:
            return cls.CHALLENGER
        return cls.NONE


class RequestKind(StrEnum):
    REGISTRATION = "registration"
    CLEARING = "clearing"


class ItemStatus(StrEnum):
    """Status of an item in a list."""
    ABSENT = "absent"
    REGISTERED = "registered"
    REGISTRATION_REQUESTED = "registration_requested"
    CLEARING_REQUESTED = "clearing_requested"

    @property
    def is_requested(self) -> bool:
        return self in (ItemStatus.REGISTRATION_REQUESTED, ItemStatus.CLEARING_REQUESTED)

    @property
    def requested_kind(self) -> RequestKind | None:
        if self is ItemStatus.REGISTRATION_REQUESTED:
            return RequestKind.REGISTRATION
        if self is ItemStatus.CLEARING_REQUESTED:
            return RequestKind.CLEARING
        return None


class RequestPhase(StrEnum):
    """Where a request stands in its lifecycle."""
    CHALLENGE_PERIOD = "challenge_period"   # Waiting for a challenge or the timeout
    AWAITING_RULING = "awaiting_ruling"     # Disputed, no appealable ruling yet
    APPEAL_PERIOD = "appeal_period"         # Appealable ruling given, funding open
    RESOLVED = "resolved"
