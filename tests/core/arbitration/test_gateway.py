"""Tests for tribunal.core.arbitration.gateway module."""

from __future__ import annotations

import pytest

from tribunal.core.arbitration.gateway import Arbitrable, ArbitratorGateway, ManualArbitrator
from tribunal.core.exceptions import InsufficientFunds, InvalidState, UnknownId


class RecordingArbitrable:
    def __init__(self):
        self.rulings = []

    def rule(self, caller: str, dispute_id: int, ruling: int) -> None:
        self.rulings.append((caller, dispute_id, ruling))


class RejectingArbitrable:
    def rule(self, caller: str, dispute_id: int, ruling: int) -> None:
        raise InvalidState("not now")


class TestManualArbitrator:
    """Tests for the manually operated arbitrator."""

    @pytest.fixture
    def arbitrator(self):
        return ManualArbitrator("0xarbitrator", arbitration_cost=5, appeal_cost=8)

    def test_satisfies_protocols(self, arbitrator):
        assert isinstance(arbitrator, ArbitratorGateway)
        assert isinstance(RecordingArbitrable(), Arbitrable)

    def test_costs(self, arbitrator):
        assert arbitrator.dispute_cost("") == 5
        dispute_id = arbitrator.create_dispute(2, "", 5, RecordingArbitrable())
        assert arbitrator.appeal_cost(dispute_id, "") == 8

    def test_appeal_cost_defaults_to_arbitration_cost(self):
        arbitrator = ManualArbitrator("0xarb", arbitration_cost=4)
        dispute_id = arbitrator.create_dispute(2, "", 4, RecordingArbitrable())
        assert arbitrator.appeal_cost(dispute_id, "") == 4

    def test_dispute_ids_are_sequential(self, arbitrator):
        arbitrable = RecordingArbitrable()
        assert arbitrator.create_dispute(2, "", 5, arbitrable) == 0
        assert arbitrator.create_dispute(2, "", 5, arbitrable) == 1
        assert arbitrator.collected == 10

    def test_underpaid_dispute_rejected(self, arbitrator):
        with pytest.raises(InsufficientFunds) as exc_info:
            arbitrator.create_dispute(2, "", 4, RecordingArbitrable())
        assert exc_info.value.required == 5
        assert arbitrator.disputes == {}

    def test_appeal(self, arbitrator):
        dispute_id = arbitrator.create_dispute(2, "", 5, RecordingArbitrable())
        arbitrator.appeal(dispute_id, "", 8)

        dispute = arbitrator.disputes[dispute_id]
        assert dispute.appeals == 1
        assert dispute.fees_paid == 13
        assert arbitrator.collected == 13

    def test_underpaid_appeal_rejected(self, arbitrator):
        dispute_id = arbitrator.create_dispute(2, "", 5, RecordingArbitrable())
        with pytest.raises(InsufficientFunds):
            arbitrator.appeal(dispute_id, "", 7)
        assert arbitrator.disputes[dispute_id].appeals == 0

    def test_unknown_dispute(self, arbitrator):
        with pytest.raises(UnknownId):
            arbitrator.appeal_cost(3, "")
        with pytest.raises(UnknownId):
            arbitrator.give_ruling(3, 1)

    def test_give_ruling_calls_back(self, arbitrator):
        arbitrable = RecordingArbitrable()
        dispute_id = arbitrator.create_dispute(2, "", 5, arbitrable)

        arbitrator.give_ruling(dispute_id, 2)

        assert arbitrable.rulings == [("0xarbitrator", dispute_id, 2)]
        assert arbitrator.disputes[dispute_id].rulings == [2]

    def test_ruling_out_of_range(self, arbitrator):
        dispute_id = arbitrator.create_dispute(2, "", 5, RecordingArbitrable())
        with pytest.raises(InvalidState):
            arbitrator.give_ruling(dispute_id, 3)

    def test_rejected_ruling_not_recorded(self, arbitrator):
        dispute_id = arbitrator.create_dispute(2, "", 5, RejectingArbitrable())
        with pytest.raises(InvalidState):
            arbitrator.give_ruling(dispute_id, 1)
        assert arbitrator.disputes[dispute_id].rulings == []
