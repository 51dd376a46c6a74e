# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Tribunal Contributors

"""Custom exception hierarchy for Tribunal.

Every engine operation is all-or-nothing: any of these exceptions escaping an
entry point means the ledger was restored to its pre-call state.
"""

from __future__ import annotations

from typing import Any


class TribunalException(Exception):  # noqa: N818
    """Base exception for all Tribunal errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class InsufficientFunds(TribunalException):
    """Raised when a deposit or fee is below the required amount.

    The whole call aborts; nothing is credited.
    """

    def __init__(self, message: str, required: int | None = None, provided: int | None = None):
        details: dict[str, Any] = {}
        if required is not None:
            details["required"] = required
        if provided is not None:
            details["provided"] = provided
        super().__init__(message, details)
        self.required = required
        self.provided = provided


class InvalidState(TribunalException):
    """Raised when an operation does not fit the current status or phase.

    Raised when:
    - An item already has an unresolved request
    - An undisputed request is asked for appeal funding
    - A side that already paid in full is funded again
    """

    pass


class AlreadyChallenged(InvalidState):
    """Raised when a request that is already disputed is challenged again."""

    pass


class Unauthorized(TribunalException):
    """Raised when the caller is not allowed to perform an operation."""

    def __init__(self, message: str, caller: str | None = None):
        details = {}
        if caller:
            details["caller"] = caller
        super().__init__(message, details)
        self.caller = caller


class DeadlinePassed(TribunalException):
    """Raised when an operation arrives after its window closed."""

    def __init__(self, message: str, deadline: int | None = None, now: int | None = None):
        details = {}
        if deadline is not None:
            details["deadline"] = deadline
        if now is not None:
            details["now"] = now
        super().__init__(message, details)
        self.deadline = deadline
        self.now = now


class DeadlineNotReached(TribunalException):
    """Raised when an operation arrives before its window opened."""

    def __init__(self, message: str, deadline: int | None = None, now: int | None = None):
        details = {}
        if deadline is not None:
            details["deadline"] = deadline
        if now is not None:
            details["now"] = now
        super().__init__(message, details)
        self.deadline = deadline
        self.now = now


class AlreadyResolved(TribunalException):
    """Raised when a resolved request is mutated."""

    def __init__(self, request_id: int):
        super().__init__(f"Request already resolved: {request_id}", {"request_id": request_id})
        self.request_id = request_id


class UnknownId(TribunalException):
    """Raised when an id does not map to a stored record."""

    def __init__(self, resource_type: str, resource_id: Any):
        message = f"{resource_type} not found: {resource_id}"
        details = {
            "resource_type": resource_type,
            "resource_id": str(resource_id),
        }
        super().__init__(message, details)
        self.resource_type = resource_type
        self.resource_id = resource_id


class PayoutFailed(TribunalException):
    """Raised when the payout sink refuses an outbound transfer."""

    def __init__(self, message: str, recipient: str | None = None, amount: int | None = None):
        details: dict[str, Any] = {}
        if recipient:
            details["recipient"] = recipient
        if amount is not None:
            details["amount"] = amount
        super().__init__(message, details)
        self.recipient = recipient
        self.amount = amount


class ConfigException(TribunalException):
    """Exception for configuration errors.

    Raised when:
    - Governance parameters are out of range
    - Configuration files are invalid
    """

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ValidationException(TribunalException):
    """Exception for invalid item payloads.

    Raised when:
    - A token field is empty or malformed
    - An address is not a 20-byte hex string
    """

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details)
        self.field = field
        self.value = value
