"""
Structured logging utilities using structlog.

Events are written one per line to a daily file, either as JSON (the
default, for ingestion) or in structlog's console layout (for reading
while developing against a local fork).
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog

LOG_FORMATS = ("json", "console")


def _renderer(log_format: str):
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    if log_format == "console":
        return structlog.dev.ConsoleRenderer(colors=False)
    raise ValueError(f"Unknown log format: {log_format!r} (expected one of {', '.join(LOG_FORMATS)})")


def setup_logger(
    log_level: str = "INFO",
    log_dir: str = "logs",
    log_format: str = "json",
    service_name: str = "chainorders"
) -> structlog.BoundLogger:
    """
    Configure structlog process-wide and return a logger bound to the service.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files, created if missing
        log_format: "json" or "console"
        service_name: Service name; also names the log file
            (``<service_name>_YYYY-MM-DD.log``)

    Returns:
        Logger with ``service`` bound

    Raises:
        ValueError: If the level or format is unknown
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level!r}")

    renderer = _renderer(log_format)

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / f"{service_name}_{datetime.now(timezone.utc):%Y-%m-%d}.log"

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=open(log_file, "a")),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger(service=service_name)


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """
    Get a logger instance with optional name context.

    Args:
        name: Optional logger name (typically __name__)

    Returns:
        Logger instance
    """
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()


class EventType:
    """Standard event types for structured logging."""

    # Action lifecycle
    ACTION_SUBMITTED = "ACTION_SUBMITTED"
    ACTION_CONFIRMED = "ACTION_CONFIRMED"
    ACTION_FAILED = "ACTION_FAILED"
    ACTION_TIMED_OUT = "ACTION_TIMED_OUT"

    # Order book
    OPEN_ORDERS_COMPUTED = "OPEN_ORDERS_COMPUTED"
    RECONCILIATION_INCONSISTENCY = "RECONCILIATION_INCONSISTENCY"

    # System events
    STARTUP = "STARTUP"
    SHUTDOWN = "SHUTDOWN"

    # Node connection
    NODE_CONNECTED = "NODE_CONNECTED"
    NODE_DISCONNECTED = "NODE_DISCONNECTED"
    RPC_ERROR = "RPC_ERROR"


def log_action_event(
    logger: structlog.BoundLogger,
    event_type: str,
    transaction_hash: str,
    submitter: str,
    nonce: int,
    **kwargs
) -> None:
    """
    Log an action-related event with standard fields.

    Args:
        logger: Logger instance
        event_type: Event type from EventType class
        transaction_hash: Hash of the submitted transaction
        submitter: Submitting account address
        nonce: Account nonce recorded at submission
        **kwargs: Additional fields
    """
    logger.info(
        event_type,
        event_type=event_type,
        transaction_hash=transaction_hash,
        submitter=submitter,
        nonce=nonce,
        timestamp=datetime.now(timezone.utc).isoformat(),
        **kwargs
    )


def log_system_event(
    logger: structlog.BoundLogger,
    event_type: str,
    message: str,
    **kwargs
) -> None:
    """
    Log a system event.

    Args:
        logger: Logger instance
        event_type: Event type from EventType class
        message: Event message
        **kwargs: Additional context
    """
    logger.info(
        message,
        event_type=event_type,
        timestamp=datetime.now(timezone.utc).isoformat(),
        **kwargs
    )
