"""Tests for tribunal.core.arbitration.rounds - the appeal-funding race.

With the shared fixtures the appeal cost is 5, so after an appealable
ruling the favoured side must raise 5 + 100% = 10 and the other side
5 + 200% = 15. Each side's window is [start, start + 100) for the favoured
side and [start, start + 50) for the other.
"""

from __future__ import annotations

import pytest

from conftest import CHALLENGER, CROWDFUNDER, REQUESTER
from tribunal.core.arbitration.enums import Party, RequestPhase, Ruling
from tribunal.core.arbitration.models import Round
from tribunal.core.arbitration.rounds import contribute, record_deposit, scaled_fee
from tribunal.core.events import EventType
from tribunal.core.exceptions import (
    AlreadyResolved,
    DeadlinePassed,
    InsufficientFunds,
    InvalidState,
)


@pytest.fixture
def appealable(engine, arbitrator, challenged) -> int:
    """``challenged`` with an appealable ruling in favour of the requester."""
    arbitrator.give_ruling(engine.get_request(challenged).dispute_id, Ruling.ACCEPT)
    return challenged


# ============================================================================
# Pure Accounting
# ============================================================================


class TestScaledFee:
    """Tests for scaled_fee."""

    def test_multipliers(self):
        assert scaled_fee(5, 0) == 5
        assert scaled_fee(5, 10_000) == 10
        assert scaled_fee(5, 20_000) == 15

    def test_floor_division(self):
        assert scaled_fee(3, 5_000) == 4


class TestContribute:
    """Tests for contribute and record_deposit."""

    def test_capped_at_requirement(self):
        round_ = Round(id=0, request_id=0, index=1)

        assert contribute(round_, Party.REQUESTER, "0xa", 7, 10) == (7, 0)
        assert contribute(round_, Party.REQUESTER, "0xb", 7, 10) == (3, 4)

        assert round_.paid_total[Party.REQUESTER] == 10
        assert round_.contribution_of("0xb", Party.REQUESTER) == 3
        assert round_.fee_rewards == 10

    def test_nothing_accepted_once_met(self):
        round_ = Round(id=0, request_id=0, index=1)
        contribute(round_, Party.CHALLENGER, "0xa", 10, 10)
        assert contribute(round_, Party.CHALLENGER, "0xa", 4, 10) == (0, 4)

    def test_record_deposit_keeps_overpayment(self):
        round_ = Round(id=0, request_id=0, index=0)

        record_deposit(round_, Party.REQUESTER, "0xa", 20)

        assert round_.required[Party.REQUESTER] == 20
        assert round_.paid_total[Party.REQUESTER] == 20
        assert round_.fully_paid[Party.REQUESTER]


# ============================================================================
# Required Fees
# ============================================================================


class TestRequiredFee:
    """Tests for the per-side appeal requirement."""

    def test_winner_and_loser(self, engine, appealable):
        assert engine.required_fee(appealable, Party.REQUESTER) == 10
        assert engine.required_fee(appealable, Party.CHALLENGER) == 15

    def test_shared_when_no_winner(self, engine, arbitrator, challenged):
        arbitrator.give_ruling(engine.get_request(challenged).dispute_id, Ruling.OTHER)
        assert engine.required_fee(challenged, Party.REQUESTER) == 5
        assert engine.required_fee(challenged, Party.CHALLENGER) == 5

    def test_follows_current_appeal_cost(self, engine, arbitrator, appealable):
        engine.fund_appeal(appealable, Party.CHALLENGER, CHALLENGER, 4)
        arbitrator.fixed_appeal_cost = 50
        assert engine.required_fee(appealable, Party.CHALLENGER) == 150

    def test_never_lowered_within_round(self, engine, arbitrator, appealable):
        """A cheaper appeal does not shrink a side's cap below what it already asked."""
        engine.fund_appeal(appealable, Party.CHALLENGER, CHALLENGER, 4)
        arbitrator.fixed_appeal_cost = 1
        assert engine.required_fee(appealable, Party.CHALLENGER) == 15


# ============================================================================
# fund_appeal Preconditions
# ============================================================================


class TestFundAppealPreconditions:
    """Calls rejected before any value is accepted."""

    def test_undisputed_request(self, engine, submitted):
        with pytest.raises(InvalidState):
            engine.fund_appeal(submitted, Party.REQUESTER, REQUESTER, 10)

    def test_before_appealable_ruling(self, engine, challenged):
        with pytest.raises(InvalidState):
            engine.fund_appeal(challenged, Party.REQUESTER, REQUESTER, 10)

    def test_invalid_party(self, engine, appealable):
        with pytest.raises(InvalidState):
            engine.fund_appeal(appealable, Party.NONE, REQUESTER, 10)

    def test_nothing_sent(self, engine, appealable):
        with pytest.raises(InsufficientFunds):
            engine.fund_appeal(appealable, Party.REQUESTER, REQUESTER, 0)

    def test_loser_after_half(self, engine, clock, appealable):
        clock.advance(50)
        with pytest.raises(DeadlinePassed) as exc_info:
            engine.fund_appeal(appealable, Party.CHALLENGER, CHALLENGER, 15)
        assert exc_info.value.deadline == engine.appeal_period(appealable).half

    def test_winner_until_end(self, engine, clock, appealable):
        clock.advance(99)
        engine.fund_appeal(appealable, Party.REQUESTER, REQUESTER, 10)

    def test_winner_after_end(self, engine, clock, appealable):
        clock.advance(100)
        with pytest.raises(DeadlinePassed):
            engine.fund_appeal(appealable, Party.REQUESTER, REQUESTER, 10)

    def test_side_already_paid(self, engine, appealable):
        engine.fund_appeal(appealable, Party.CHALLENGER, CHALLENGER, 15)
        with pytest.raises(InvalidState):
            engine.fund_appeal(appealable, Party.CHALLENGER, CROWDFUNDER, 1)

    def test_resolved_request(self, engine, clock, arbitrator, appealable):
        clock.advance(100)
        arbitrator.give_ruling(engine.get_request(appealable).dispute_id, Ruling.ACCEPT)
        with pytest.raises(AlreadyResolved):
            engine.fund_appeal(appealable, Party.REQUESTER, REQUESTER, 10)

    def test_rejected_call_keeps_value(self, engine, sink, appealable):
        custody = engine.vault.custody
        with pytest.raises(InvalidState):
            engine.fund_appeal(appealable, Party.NONE, CROWDFUNDER, 10)
        assert engine.vault.custody == custody
        assert sink.balance_of(CROWDFUNDER) == 0


# ============================================================================
# Funding
# ============================================================================


class TestFundAppeal:
    """Tests for contributions and appeal raising."""

    def test_partial_contribution(self, engine, appealable):
        receipt = engine.fund_appeal(appealable, Party.CHALLENGER, CROWDFUNDER, 6)

        assert receipt.contributed == 6
        assert receipt.refunded == 0
        assert not receipt.fully_paid
        round_ = engine.get_round(appealable, 1)
        assert round_.paid_total[Party.CHALLENGER] == 6
        assert round_.required[Party.CHALLENGER] == 15

    def test_excess_refunded_in_same_call(self, engine, sink, appealable):
        receipt = engine.fund_appeal(appealable, Party.CHALLENGER, CHALLENGER, 20)

        assert receipt.contributed == 15
        assert receipt.refunded == 5
        assert receipt.fully_paid
        assert sink.balance_of(CHALLENGER) == 5
        assert engine.get_round(appealable, 1).paid_total[Party.CHALLENGER] == 15

    def test_crowdfunding(self, engine, appealable):
        engine.fund_appeal(appealable, Party.CHALLENGER, CROWDFUNDER, 6)
        receipt = engine.fund_appeal(appealable, Party.CHALLENGER, CHALLENGER, 9)

        round_ = engine.get_round(appealable, 1)
        assert receipt.fully_paid
        assert round_.contribution_of(CROWDFUNDER, Party.CHALLENGER) == 6
        assert round_.contribution_of(CHALLENGER, Party.CHALLENGER) == 9

    def test_events(self, engine, appealable):
        engine.fund_appeal(appealable, Party.CHALLENGER, CROWDFUNDER, 6)
        engine.fund_appeal(appealable, Party.CHALLENGER, CHALLENGER, 9)

        contributions = engine.events.filter(EventType.APPEAL_CONTRIBUTION, request_id=appealable)
        assert [e.data["amount"] for e in contributions] == [6, 9]
        paid = engine.events.filter(EventType.HAS_PAID_APPEAL_FEE, request_id=appealable)
        assert len(paid) == 1
        assert paid[0].data["party"] == "CHALLENGER"

    def test_both_paid_raises_appeal(self, engine, arbitrator, appealable):
        engine.fund_appeal(appealable, Party.CHALLENGER, CHALLENGER, 15)
        receipt = engine.fund_appeal(appealable, Party.REQUESTER, REQUESTER, 10)

        request = engine.get_request(appealable)
        appealed = engine.get_round(appealable, 1)
        assert receipt.appeal_raised
        assert arbitrator.disputes[request.dispute_id].appeals == 1
        assert appealed.appealed
        assert appealed.fee_rewards == 15 + 10 - 5
        assert len(request.round_ids) == 3
        assert request.appeal_period is None
        assert request.current_ruling is None
        assert engine.phase_of(appealable) == RequestPhase.AWAITING_RULING
        assert len(engine.events.filter(EventType.APPEAL_RAISED)) == 1

    def test_next_round_after_appeal(self, engine, arbitrator, clock, appealable):
        engine.fund_appeal(appealable, Party.CHALLENGER, CHALLENGER, 15)
        engine.fund_appeal(appealable, Party.REQUESTER, REQUESTER, 10)
        clock.advance(10)

        arbitrator.give_ruling(engine.get_request(appealable).dispute_id, Ruling.REFUSE)

        assert engine.required_fee(appealable, Party.CHALLENGER) == 10
        assert engine.required_fee(appealable, Party.REQUESTER) == 15
        receipt = engine.fund_appeal(appealable, Party.CHALLENGER, CROWDFUNDER, 3)
        assert receipt.round_index == 2

    def test_custody_tracks_contributions(self, engine, appealable):
        before = engine.vault.custody
        engine.fund_appeal(appealable, Party.CHALLENGER, CHALLENGER, 20)
        assert engine.vault.custody == before + 15

    def test_appeal_cost_rise_mid_funding(self, engine, arbitrator, appealable):
        """A costlier appeal raises both caps; the appeal is paid from this round only."""
        engine.request_status_change("item-2", {"name": "other"}, CROWDFUNDER, 15)
        engine.fund_appeal(appealable, Party.REQUESTER, REQUESTER, 1)
        engine.fund_appeal(appealable, Party.CHALLENGER, CHALLENGER, 1)
        arbitrator.fixed_appeal_cost = 35

        first = engine.fund_appeal(appealable, Party.REQUESTER, REQUESTER, 9)
        second = engine.fund_appeal(appealable, Party.CHALLENGER, CHALLENGER, 14)

        round_ = engine.get_round(appealable, 1)
        assert not first.fully_paid
        assert not second.fully_paid
        assert not second.appeal_raised
        assert round_.required == {Party.REQUESTER: 70, Party.CHALLENGER: 105}
        assert round_.fee_rewards == 25

        before = engine.vault.custody
        engine.fund_appeal(appealable, Party.REQUESTER, REQUESTER, 60)
        receipt = engine.fund_appeal(appealable, Party.CHALLENGER, CHALLENGER, 90)

        assert receipt.appeal_raised
        assert round_.fee_rewards == 70 + 105 - 35
        assert engine.vault.paid_to_arbitrators == 5 + 35
        assert engine.vault.custody == before + 150 - 35
        assert arbitrator.disputes[engine.get_request(appealable).dispute_id].fees_paid == 5 + 35
