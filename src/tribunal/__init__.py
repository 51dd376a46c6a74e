# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Tribunal Contributors

"""Tribunal - Dispute-bound curated lists.

Tribunal keeps lists of items (tokens, addresses, ...) whose membership is
decided by an adversarial process with an external arbitrator in the loop.

Lifecycle:
  Request (deposit)
    → Challenge (matching deposit, dispute created)
    → Appealable ruling → crowdfunded appeal rounds
    → Final ruling → pull withdrawals by the contributors of the winning side

Key design principles:
  - One generic engine parameterised over the payload type; domain lists
    compose it.
  - Every entry point is an all-or-nothing transaction; a refused payout
    restores the ledger.
  - The engine never waits: periods are deadlines against a host clock and
    the arbitrator answers through a callback keyed by dispute id.
  - Funds are only pushed back to the immediate caller; everything else is
    withdrawn.
"""

__version__ = "0.1.0"

from . import (
    core as core,
)
from . import (
    lists as lists,
)
