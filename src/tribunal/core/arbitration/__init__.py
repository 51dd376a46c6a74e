"""Arbitrable-item engine.

This package implements the request → challenge → dispute → appeal →
payout lifecycle:
- Anyone may request that an item be registered or cleared, with a deposit
- Anyone may challenge the request with a matching deposit, raising a dispute
- Each appealable ruling opens a crowdfunding race for the next round
- Contributors to the winning side withdraw their share once resolved

Submodules:
- constants: Fixed-point divisor and query limits
- enums: Rulings, parties, item statuses and request phases
- governance: Governance parameters and governor-gated changes
- models: Items, requests, rounds and contribution receipts
- storage: Arena storage with a per-transaction undo journal
- gateway: Arbitrator boundary and a manually operated arbitrator
- rounds: Contribution accounting and the appeal-funding race
- requests: Submission, challenge and ruling handling
- registry: Item statuses and queries
- distributor: Pull withdrawals of deposits and rewards
- engine: ArbitrableEngine, the transactional entry points
"""

from .constants import ArbitrationConstants

from .enums import (
    ItemStatus,
    Party,
    RequestKind,
    RequestPhase,
    Ruling,
)

from .governance import Governance, GovernanceParams

from .models import (
    ContributionReceipt,
    Item,
    Request,
    Round,
)

from .storage import LedgerStore

from .gateway import (
    Arbitrable,
    ArbitratorGateway,
    DisputeRecord,
    ManualArbitrator,
)

from .rounds import RoundLedger, contribute, scaled_fee

from .requests import RequestLedger

from .registry import ItemFilter, ItemRegistry, resolved_status

from .distributor import FeeDistributor, entitlement

from .engine import ArbitrableEngine

__all__ = [
    # Constants
    "ArbitrationConstants",
    # Enums
    "ItemStatus",
    "Party",
    "RequestKind",
    "RequestPhase",
    "Ruling",
    # Governance
    "Governance",
    "GovernanceParams",
    # Models
    "ContributionReceipt",
    "Item",
    "Request",
    "Round",
    # Storage
    "LedgerStore",
    # Gateway
    "Arbitrable",
    "ArbitratorGateway",
    "DisputeRecord",
    "ManualArbitrator",
    # Ledgers
    "RoundLedger",
    "contribute",
    "scaled_fee",
    "RequestLedger",
    "ItemFilter",
    "ItemRegistry",
    "resolved_status",
    "FeeDistributor",
    "entitlement",
    # Engine
    "ArbitrableEngine",
]
