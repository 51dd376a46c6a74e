"""Global test fixtures for the Tribunal test suite."""

from __future__ import annotations

import os

import pytest

from tribunal.core.arbitration import ArbitrableEngine, GovernanceParams, ManualArbitrator
from tribunal.core.clock import ManualClock
from tribunal.core.config import clear_config_cache
from tribunal.core.payments import BalanceBook

GOVERNOR = "0x9999999999999999999999999999999999999999"
ARBITRATOR = "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
REQUESTER = "0x1111111111111111111111111111111111111111"
CHALLENGER = "0x2222222222222222222222222222222222222222"
CROWDFUNDER = "0x3333333333333333333333333333333333333333"

START_TIME = 1_000
CHALLENGE_PERIOD = 100
APPEAL_PERIOD = 100


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all TRIBUNAL_ environment variables and the cached config."""
    for key in list(os.environ.keys()):
        if key.startswith("TRIBUNAL_"):
            monkeypatch.delenv(key, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


# ============================================================================
# Engine Fixtures
# ============================================================================


class RefusingSink(BalanceBook):
    """Balance book that refuses transfers to chosen recipients."""

    def __init__(self) -> None:
        super().__init__()
        self.refused: set[str] = set()

    def send(self, recipient: str, amount: int) -> bool:
        if recipient in self.refused:
            return False
        return super().send(recipient, amount)


def make_params(**overrides) -> GovernanceParams:
    values = {
        "base_deposit": 10,
        "challenge_period_duration": CHALLENGE_PERIOD,
        "appeal_period_duration": APPEAL_PERIOD,
        "shared_multiplier": 0,
        "winner_multiplier": 10_000,
        "loser_multiplier": 20_000,
    }
    values.update(overrides)
    return GovernanceParams(**values)


@pytest.fixture
def params() -> GovernanceParams:
    """base_deposit=10, shared 0%, winner 100%, loser 200%."""
    return make_params()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=START_TIME)


@pytest.fixture
def arbitrator() -> ManualArbitrator:
    """Arbitrator charging 5 for disputes and appeals."""
    return ManualArbitrator(ARBITRATOR, arbitration_cost=5)


@pytest.fixture
def sink() -> RefusingSink:
    return RefusingSink()


@pytest.fixture
def engine(arbitrator, params, clock, sink) -> ArbitrableEngine:
    return ArbitrableEngine(
        arbitrator,
        governor=GOVERNOR,
        params=params,
        clock=clock,
        sink=sink,
        registration_meta_evidence="/ipfs/registration",
        clearing_meta_evidence="/ipfs/clearing",
    )


@pytest.fixture
def submitted(engine) -> int:
    """A registration request for item ``item-1`` with a deposit of 15."""
    return engine.request_status_change("item-1", {"name": "item"}, REQUESTER, 15)


@pytest.fixture
def challenged(engine, submitted) -> int:
    """``submitted`` challenged with a deposit of 15; returns the request id."""
    engine.challenge_request(submitted, CHALLENGER, 15)
    return submitted
