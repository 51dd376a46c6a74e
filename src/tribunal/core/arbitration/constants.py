"""Constants for the arbitration workflow."""

from __future__ import annotations


class ArbitrationConstants:
    """Fixed-point and protocol constants."""

    # Denominator of every stake multiplier (basis points)
    MULTIPLIER_DIVISOR = 10_000

    # Number of ruling options offered to the arbitrator (ACCEPT, REFUSE)
    RULING_OPTIONS = 2

    # Page size cap for item queries
    MAX_QUERY_COUNT = 1_000
