"""Tribunal Core - Shared primitives for the arbitration engine."""

from .clock import ManualClock, TimeoutClock, Window
from .config import EngineSettings, clear_config_cache, get_config
from .events import Event, EventLog, EventType
from .exceptions import (
    AlreadyChallenged,
    AlreadyResolved,
    ConfigException,
    DeadlineNotReached,
    DeadlinePassed,
    InsufficientFunds,
    InvalidState,
    PayoutFailed,
    TribunalException,
    Unauthorized,
    UnknownId,
    ValidationException,
)
from .logging import (
    OperationLogger,
    configure_logging,
    get_logger,
    operation_logger,
    transaction_context,
)
from .payments import BalanceBook, PayoutSink, Vault

__all__ = [
    # Clock
    "ManualClock",
    "TimeoutClock",
    "Window",
    # Config
    "EngineSettings",
    "clear_config_cache",
    "get_config",
    # Events
    "Event",
    "EventLog",
    "EventType",
    # Exceptions
    "AlreadyChallenged",
    "AlreadyResolved",
    "ConfigException",
    "DeadlineNotReached",
    "DeadlinePassed",
    "InsufficientFunds",
    "InvalidState",
    "PayoutFailed",
    "TribunalException",
    "Unauthorized",
    "UnknownId",
    "ValidationException",
    # Logging
    "OperationLogger",
    "configure_logging",
    "get_logger",
    "operation_logger",
    "transaction_context",
    # Payments
    "BalanceBook",
    "PayoutSink",
    "Vault",
]
