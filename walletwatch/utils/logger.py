"""
Structured logging utilities using structlog.

Provides JSON-formatted logging for production and
human-readable logging for development.
"""

import logging
import sys
import structlog
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional


def setup_logger(
    log_level: str = "INFO",
    log_dir: str = "logs",
    log_format: str = "json",
    service_name: str = "walletwatch"
) -> structlog.BoundLogger:
    """
    Configure and return a structured logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files
        log_format: "json" writes to a dated file, "console" to stdout
        service_name: Name of the service for log context

    Returns:
        Configured structlog logger instance
    """
    if log_format == "json":
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        log_filename = f"walletwatch_{datetime.now(timezone.utc).strftime('%Y-%m-%d')}.log"
        log_file = open(log_path / log_filename, "a")

        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ]
    else:  # console format for development
        log_file = sys.stdout
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer(colors=True)
        ]

    level = getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=log_file),
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


# Event type constants for structured logging
class EventType:
    """Standard event types for wallet monitoring."""

    # Balance events
    BALANCE_UPDATED = "BALANCE_UPDATED"
    BALANCE_FETCH_FAILED = "BALANCE_FETCH_FAILED"

    # Polling events
    POLLING_STARTED = "POLLING_STARTED"
    POLLING_STOPPED = "POLLING_STOPPED"
    POLLING_EXHAUSTED = "POLLING_EXHAUSTED"

    # System events
    STARTUP = "STARTUP"
    SHUTDOWN = "SHUTDOWN"
    ERROR = "ERROR"

    # Connection events
    API_ERROR = "API_ERROR"


def log_balance_event(
    logger: structlog.BoundLogger,
    event_type: str,
    exchange: str,
    **kwargs
) -> None:
    """
    Log a balance-related event with standard fields.

    Args:
        logger: Logger instance
        event_type: Event type from EventType class
        exchange: Exchange selector, e.g. "bybit/unified"
        **kwargs: Additional event-specific fields
    """
    logger.info(
        event_type,
        event_type=event_type,
        exchange=exchange,
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
