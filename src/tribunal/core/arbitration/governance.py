"""Governance parameters and governor-gated changes.

Requests copy the frozen ``GovernanceParams`` (and the arbitrator address)
when they are created, so a parameter change only affects requests
submitted afterwards.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..config import EngineSettings
from ..exceptions import ConfigException, Unauthorized, UnknownId
from .constants import ArbitrationConstants

if TYPE_CHECKING:
    from .gateway import ArbitratorGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GovernanceParams:
    """Deposit, timing and multiplier parameters."""

    base_deposit: int
    challenge_period_duration: int
    appeal_period_duration: int
    shared_multiplier: int
    winner_multiplier: int
    loser_multiplier: int
    arbitration_extra_data: str = ""

    def __post_init__(self) -> None:
        for name in (
            "base_deposit",
            "challenge_period_duration",
            "shared_multiplier",
            "winner_multiplier",
            "loser_multiplier",
        ):
            value = getattr(self, name)
            if value < 0:
                raise ConfigException(f"{name} must be non-negative", field=name, value=value)
        if self.appeal_period_duration < 1:
            raise ConfigException(
                "appeal_period_duration must be positive",
                field="appeal_period_duration",
                value=self.appeal_period_duration,
            )

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> GovernanceParams:
        return cls(
            base_deposit=settings.base_deposit,
            challenge_period_duration=settings.challenge_period_duration,
            appeal_period_duration=settings.appeal_period_duration,
            shared_multiplier=settings.shared_multiplier,
            winner_multiplier=settings.winner_multiplier,
            loser_multiplier=settings.loser_multiplier,
            arbitration_extra_data=settings.arbitration_extra_data,
        )

    def shared_stake(self, amount: int) -> int:
        return amount * self.shared_multiplier // ArbitrationConstants.MULTIPLIER_DIVISOR

    def total_deposit(self, arbitration_cost: int) -> int:
        """Minimum deposit for submitting or challenging a request."""
        return self.base_deposit + arbitration_cost + self.shared_stake(arbitration_cost)

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


class Governance:
    """Live governance state: governor, arbitrator, parameters, meta-evidence."""

    def __init__(
        self,
        governor: str,
        arbitrator: ArbitratorGateway,
        params: GovernanceParams,
        registration_meta_evidence: str = "",
        clearing_meta_evidence: str = "",
    ):
        self.governor = governor
        self.params = params
        self.registration_meta_evidence = registration_meta_evidence
        self.clearing_meta_evidence = clearing_meta_evidence
        self._arbitrator = arbitrator
        # Every arbitrator ever configured, so that open requests can still
        # reach the one they snapshotted.
        self._arbitrators: dict[str, ArbitratorGateway] = {arbitrator.address: arbitrator}

    @property
    def arbitrator(self) -> ArbitratorGateway:
        return self._arbitrator

    def arbitrator_for(self, address: str) -> ArbitratorGateway:
        try:
            return self._arbitrators[address]
        except KeyError:
            raise UnknownId("Arbitrator", address) from None

    def _require_governor(self, caller: str) -> None:
        if caller != self.governor:
            raise Unauthorized("Only the governor can change governance parameters", caller=caller)

    def _replace(self, caller: str, **changes: Any) -> GovernanceParams:
        self._require_governor(caller)
        new_params = dataclasses.replace(self.params, **changes)
        logger.info("Governance change: %s", changes)
        self.params = new_params
        return new_params

    def change_governor(self, caller: str, new_governor: str) -> None:
        self._require_governor(caller)
        logger.info("Governor changed")
        self.governor = new_governor

    def change_base_deposit(self, caller: str, base_deposit: int) -> GovernanceParams:
        return self._replace(caller, base_deposit=base_deposit)

    def change_challenge_period_duration(self, caller: str, duration: int) -> GovernanceParams:
        return self._replace(caller, challenge_period_duration=duration)

    def change_appeal_period_duration(self, caller: str, duration: int) -> GovernanceParams:
        return self._replace(caller, appeal_period_duration=duration)

    def change_shared_multiplier(self, caller: str, multiplier: int) -> GovernanceParams:
        return self._replace(caller, shared_multiplier=multiplier)

    def change_winner_multiplier(self, caller: str, multiplier: int) -> GovernanceParams:
        return self._replace(caller, winner_multiplier=multiplier)

    def change_loser_multiplier(self, caller: str, multiplier: int) -> GovernanceParams:
        return self._replace(caller, loser_multiplier=multiplier)

    def change_arbitrator(
        self,
        caller: str,
        arbitrator: ArbitratorGateway,
        extra_data: str = "",
    ) -> GovernanceParams:
        self._require_governor(caller)
        self._arbitrators[arbitrator.address] = arbitrator
        self._arbitrator = arbitrator
        self.params = dataclasses.replace(self.params, arbitration_extra_data=extra_data)
        logger.info("Arbitrator changed to %s", arbitrator.address)
        return self.params

    def change_meta_evidence(self, caller: str, registration: str, clearing: str) -> None:
        self._require_governor(caller)
        self.registration_meta_evidence = registration
        self.clearing_meta_evidence = clearing
