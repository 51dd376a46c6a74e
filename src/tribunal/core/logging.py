# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Tribunal Contributors

"""Structured logging configuration for Tribunal.

Provides:
- Correlation IDs and the operation name of the engine transaction in
  progress, carried by context variables
- Ledger fields (request, item, dispute, round) lifted from ``extra=`` into
  top-level keys of the JSON output
- JSON formatter for production and a tagged text formatter for development
- Operation logging with shortened addresses
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

# Context variables for the transaction in progress (thread/async-safe)
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_operation: ContextVar[str | None] = ContextVar("operation", default=None)

# Record attributes promoted to top-level JSON keys when present
LEDGER_FIELDS = ("request_id", "item_id", "dispute_id", "round_index")

# Marks handlers installed by configure_logging
_HANDLER_MARK = "_tribunal_handler"


def get_correlation_id() -> str | None:
    """Get the current correlation ID, or None if not set."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None) -> None:
    _correlation_id.set(correlation_id)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def get_operation() -> str | None:
    """Name of the engine entry point being executed, if any."""
    return _operation.get()


@contextmanager
def correlation_context(
    correlation_id: str | None = None,
) -> Generator[str, None, None]:
    """Context manager for correlation ID scope.

    Nested contexts keep the outer ID so that an operation triggered from
    inside another one (an arbitrator ruling raised during a call) logs
    under the same transaction.

    Args:
        correlation_id: Optional correlation ID to use. If None, reuses the
            current one or generates a new one.

    Yields:
        The correlation ID being used.
    """
    cid = correlation_id or _correlation_id.get() or generate_correlation_id()
    token = _correlation_id.set(cid)
    try:
        yield cid
    finally:
        _correlation_id.reset(token)


@contextmanager
def transaction_context(operation: str) -> Generator[str, None, None]:
    """Correlation scope of one engine transaction.

    The outermost operation names the transaction; a nested entry point
    logs under the outer name and correlation ID.
    """
    token = _operation.set(_operation.get() or operation)
    try:
        with correlation_context() as cid:
            yield cid
    finally:
        _operation.reset(token)


def _ledger_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {name: getattr(record, name) for name in LEDGER_FIELDS if hasattr(record, name)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, keyed for log aggregation.

    ``operation`` and ``correlation_id`` come from the transaction context;
    ledger fields come from the record's ``extra``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            log_data["correlation_id"] = correlation_id
        operation = get_operation()
        if operation:
            log_data["operation"] = operation
        log_data.update(_ledger_fields(record))

        if record.levelno >= logging.WARNING:
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        if hasattr(record, "extra_data"):
            log_data["extra"] = record.extra_data

        return json.dumps(log_data, default=str)


class StandardFormatter(logging.Formatter):
    """Human-readable lines tagged with the transaction in progress.

    A line logged inside ``withdraw`` for request 3 reads
    ``... - INFO - [1a2b3c4d withdraw request=3] Withdrawal of 25 ...``.
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    TAG_COLOR = "\033[90m"

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def context_tag(self, record: logging.LogRecord) -> str:
        parts = []
        correlation_id = get_correlation_id()
        if correlation_id:
            parts.append(correlation_id[:8])
        operation = get_operation()
        if operation:
            parts.append(operation)
        parts.extend(f"{name.removesuffix('_id')}={value}" for name, value in _ledger_fields(record).items())
        return " ".join(parts)

    def format(self, record: logging.LogRecord) -> str:
        record = logging.makeLogRecord(record.__dict__)

        tag = self.context_tag(record)
        if tag:
            tag = f"[{tag}]"
            if self.use_colors:
                tag = f"{self.TAG_COLOR}{tag}{self.RESET}"
            record.msg = f"{tag} {record.msg}"

        if self.use_colors:
            record.levelname = f"{self.COLORS.get(record.levelname, '')}{record.levelname}{self.RESET}"

        return super().format(record)


def configure_logging(
    level: str | int | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Install Tribunal's handlers on the root logger.

    Only handlers installed by a previous call are replaced, so a host
    process embedding the engine keeps its own handlers.

    Args:
        level: Log level; defaults to ``TRIBUNAL_LOG_LEVEL``
        json_format: Use JSON output; defaults to ``TRIBUNAL_LOG_FORMAT``
            ("json" or "text"), auto-detected from the terminal if unset
        log_file: Extra JSON log file; defaults to ``TRIBUNAL_LOG_FILE``
    """
    from .config import get_config

    config = get_config()

    level = config.log_level if level is None else level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_format is None:
        log_format = config.log_format.lower()
        json_format = log_format == "json" if log_format in ("json", "text") else not sys.stderr.isatty()

    log_file = config.log_file if log_file is None else log_file

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    handlers[0].setFormatter(JSONFormatter() if json_format else StandardFormatter())
    if log_file:
        # Files are always machine-read
        handlers.append(logging.FileHandler(log_file))
        handlers[-1].setFormatter(JSONFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in installed_handlers(root_logger):
        root_logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        setattr(handler, _HANDLER_MARK, True)
        root_logger.addHandler(handler)


def installed_handlers(logger: logging.Logger | None = None) -> list[logging.Handler]:
    """Handlers added by ``configure_logging`` to ``logger`` (root by default)."""
    logger = logger or logging.getLogger()
    return [handler for handler in logger.handlers if getattr(handler, _HANDLER_MARK, False)]


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class OperationLogger:
    """Logger for engine entry points.

    Logs each operation with its arguments. Address-like values are
    shortened so logs stay readable and do not reproduce full identities.
    """

    ADDRESS_KEYS = {
        "caller",
        "requester",
        "challenger",
        "contributor",
        "beneficiary",
        "governor",
    }

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("tribunal.operations")

    def log_call(
        self,
        operation: str,
        arguments: dict[str, Any],
        level: int = logging.DEBUG,
    ) -> None:
        """Log an operation call with shortened addresses.

        Ledger ids among the arguments are also set as record attributes so
        that formatters can index on them.
        """
        self.logger.log(
            level,
            f"Operation: {operation}",
            extra={
                **{name: arguments[name] for name in LEDGER_FIELDS if name in arguments},
                "extra_data": {
                    "operation": operation,
                    "arguments": self._shorten(arguments),
                },
            },
        )

    def log_result(
        self,
        operation: str,
        success: bool,
        error: str | None = None,
        level: int = logging.DEBUG,
    ) -> None:
        """Log the outcome of an operation."""
        status = "committed" if success else "rolled back"
        msg = f"Operation result: {operation} -> {status}"
        if error:
            msg += f" ({error})"

        self.logger.log(
            level,
            msg,
            extra={
                "extra_data": {
                    "operation": operation,
                    "success": success,
                    "error": error,
                }
            },
        )

    def _shorten(self, data: Any) -> Any:
        if isinstance(data, dict):
            result = {}
            for key, value in data.items():
                if key in self.ADDRESS_KEYS and isinstance(value, str) and len(value) > 10:
                    result[key] = value[:10] + "..."
                else:
                    result[key] = self._shorten(value)
            return result
        elif isinstance(data, list):
            return [self._shorten(item) for item in data]
        elif isinstance(data, str) and len(data) > 200:
            return data[:200] + "..."
        else:
            return data


# Default operation logger
operation_logger = OperationLogger()
