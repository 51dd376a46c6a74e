#!/usr/bin/env python3
"""Example 01: Token Dispute - Submit, challenge, appeal and withdraw.

This example walks through the full Tribunal lifecycle on a token list:
1. Submitting a token with a deposit
2. Challenging it, which raises a dispute with the arbitrator
3. Crowdfunding an appeal after the first ruling
4. Letting the final ruling stand and withdrawing rewards

Requirements:
    - `pip install tribunal` or run from source

Usage:
    python examples/01_token_dispute.py
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add src to path when running from source
src_path = Path(__file__).parent.parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from tribunal.core import ManualClock, configure_logging
from tribunal.core.arbitration import (
    ArbitrableEngine,
    GovernanceParams,
    ManualArbitrator,
    Party,
    Ruling,
)
from tribunal.lists import Token, TokenList

GOVERNOR = "0x9999999999999999999999999999999999999999"
ALICE = "0x1111111111111111111111111111111111111111"
BOB = "0x2222222222222222222222222222222222222222"
CAROL = "0x3333333333333333333333333333333333333333"


def main() -> None:
    """Run the token dispute example."""
    configure_logging(level="WARNING", json_format=False)

    print("=" * 60)
    print("  Tribunal Example 01: Token Dispute")
    print("=" * 60)
    print()

    clock = ManualClock(start=0)
    arbitrator = ManualArbitrator("0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa", arbitration_cost=1_000)
    params = GovernanceParams(
        base_deposit=10_000,
        challenge_period_duration=3_600,
        appeal_period_duration=3_600,
        shared_multiplier=10_000,
        winner_multiplier=10_000,
        loser_multiplier=20_000,
    )
    engine = ArbitrableEngine(arbitrator, governor=GOVERNOR, params=params, clock=clock)
    tokens = TokenList(engine)

    # =========================================================================
    # Step 1: Submit a token
    # =========================================================================
    print("[Step 1] Alice submits a token...")
    print("-" * 40)

    token = Token(
        name="Pinakion",
        ticker="PNK",
        address="0x93ED3FBe21207Ec2E8f2d3c3de6e058Cb73Bc04d",
        symbol_multihash="/ipfs/QmPinakionSymbol",
    )
    deposit = engine.minimum_deposit()
    request_id = tokens.request_status_change(token, ALICE, deposit)
    print(f"✓ Request {request_id} submitted with a deposit of {deposit}")
    print(f"  Status: {tokens.status_of(token)}")
    print()

    # =========================================================================
    # Step 2: Challenge
    # =========================================================================
    print("[Step 2] Bob challenges the submission...")
    print("-" * 40)

    dispute_id = engine.challenge_request(request_id, BOB, deposit, evidence="/ipfs/QmWrongTicker")
    print(f"✓ Dispute {dispute_id} created")
    print(f"  Phase: {engine.phase_of(request_id)}")
    print()

    # =========================================================================
    # Step 3: Appealable ruling and crowdfunded appeal
    # =========================================================================
    print("[Step 3] The arbitrator refuses the token; Alice's side appeals...")
    print("-" * 40)

    arbitrator.give_ruling(dispute_id, Ruling.REFUSE)
    requester_fee = engine.required_fee(request_id, Party.REQUESTER)
    challenger_fee = engine.required_fee(request_id, Party.CHALLENGER)
    print(f"  Requester side must raise {requester_fee}, challenger side {challenger_fee}")

    receipt = engine.fund_appeal(request_id, Party.REQUESTER, CAROL, requester_fee // 2)
    print(f"✓ Carol contributed {receipt.contributed}")
    receipt = engine.fund_appeal(request_id, Party.REQUESTER, ALICE, requester_fee)
    print(f"✓ Alice contributed {receipt.contributed} (refunded {receipt.refunded})")
    receipt = engine.fund_appeal(request_id, Party.CHALLENGER, BOB, challenger_fee)
    print(f"✓ Bob contributed {receipt.contributed}; appeal raised: {receipt.appeal_raised}")
    print()

    # =========================================================================
    # Step 4: Final ruling and withdrawals
    # =========================================================================
    print("[Step 4] The appeal rules for Alice and nobody appeals again...")
    print("-" * 40)

    arbitrator.give_ruling(dispute_id, Ruling.ACCEPT)
    clock.advance(params.appeal_period_duration)
    arbitrator.give_ruling(dispute_id, Ruling.ACCEPT)
    print(f"✓ Final ruling: {engine.get_request(request_id).ruling.name}")
    print(f"  Status: {tokens.status_of(token)}")

    item_id = tokens.item_id(tokens.validate(token))
    for name, address in (("Alice", ALICE), ("Bob", BOB), ("Carol", CAROL)):
        amount = engine.batch_request_withdraw(address, item_id)
        print(f"  {name} withdrew {amount}")

    print()
    print(f"Left in custody (rounding): {engine.vault.custody}")
    print(f"Paid to the arbitrator: {engine.vault.paid_to_arbitrators}")


if __name__ == "__main__":
    main()
