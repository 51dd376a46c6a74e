# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Tribunal Contributors

"""Core configuration - centralized config for the tribunal package.

All environment-based configuration should flow through this module.
Governance parameters loaded here only seed a new engine; once running,
parameters change through the governor and are snapshotted per request.

Usage:
    from tribunal.core.config import get_config
    config = get_config()

    base_deposit = config.base_deposit
    log_level = config.log_level
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Configuration settings for a Tribunal engine.

    Settings can be configured via environment variables with the
    TRIBUNAL_ prefix, or through a local .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # DEPOSIT SETTINGS
    # ==========================================================================

    base_deposit: int = Field(
        default=10_000,
        ge=0,
        description="Stake required from requesters and challengers on top of arbitration costs",
        validation_alias="TRIBUNAL_BASE_DEPOSIT",
    )
    arbitration_extra_data: str = Field(
        default="",
        description="Opaque extra data passed to the arbitrator with every call",
        validation_alias="TRIBUNAL_ARBITRATION_EXTRA_DATA",
    )

    # ==========================================================================
    # TIMING SETTINGS (seconds of host time)
    # ==========================================================================

    challenge_period_duration: int = Field(
        default=3 * 24 * 3600,
        ge=0,
        description="Time during which a request can be challenged",
        validation_alias="TRIBUNAL_CHALLENGE_PERIOD_DURATION",
    )
    appeal_period_duration: int = Field(
        default=3 * 24 * 3600,
        ge=1,
        description="Time after an appealable ruling during which appeals can be funded",
        validation_alias="TRIBUNAL_APPEAL_PERIOD_DURATION",
    )

    # ==========================================================================
    # STAKE MULTIPLIERS (basis points of MULTIPLIER_DIVISOR)
    # ==========================================================================

    shared_multiplier: int = Field(
        default=10_000,
        ge=0,
        description="Multiplier used when there is no winner or loser",
        validation_alias="TRIBUNAL_SHARED_MULTIPLIER",
    )
    winner_multiplier: int = Field(
        default=10_000,
        ge=0,
        description="Multiplier applied to the side the current ruling favours",
        validation_alias="TRIBUNAL_WINNER_MULTIPLIER",
    )
    loser_multiplier: int = Field(
        default=20_000,
        ge=0,
        description="Multiplier applied to the side the current ruling disfavours",
        validation_alias="TRIBUNAL_LOSER_MULTIPLIER",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="TRIBUNAL_LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="TRIBUNAL_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="TRIBUNAL_LOG_FILE",
    )


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: EngineSettings | None = None


def get_config() -> EngineSettings:
    """Get the global configuration instance.

    Returns:
        The singleton EngineSettings instance.
    """
    global _config
    if _config is None:
        _config = EngineSettings()
    return _config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
