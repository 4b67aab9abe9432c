"""
Module: logger.py
Description: Structured logging configuration for the queue manager.

Configures structlog for JSON output so queue operations, resolver
decisions, and poller activity land in CloudWatch (or any log shipper)
as one JSON object per line.

Key Components:
- JSON output for CloudWatch compatibility
- Timestamp and log level processors
- configure_logging() to apply a level filter from settings
- get_logger() helper function

Dependencies: structlog, logging, datetime
"""

import logging

import structlog
from datetime import datetime, timezone


def _add_timestamp(logger, method_name, event_dict):
    """Stamp each queue event with the UTC time it was emitted."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _add_log_level(logger, method_name, event_dict):
    # "warning" -> "WARNING"
    event_dict["level"] = method_name.upper()
    return event_dict


_PROCESSORS = [
    _add_timestamp,
    _add_log_level,
    structlog.processors.format_exc_info,
    structlog.processors.JSONRenderer(),
]


def configure_logging(level: str = "INFO") -> None:
    """
    Configure structlog with a minimum level.

    Messages below ``level`` are dropped before rendering. Safe to call
    more than once; the last call wins for loggers created afterwards.

    Args:
        level: Standard level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Raises:
        ValueError: If level is not a known level name
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    structlog.configure(
        processors=_PROCESSORS,
        logger_factory=structlog.WriteLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )


# Default configuration until the application applies its own level
configure_logging("INFO")


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a logger for a queue_manager module.

    The logger follows whatever level the most recent configure_logging()
    call set, so module-level loggers pick up a QueueClient's log_level.
    Bind queue_name (and message ids) per call site.

    Example:
        >>> log = get_logger(__name__).bind(queue_name="orders")
        >>> log.warning("Batch partially failed", failed_ids=["2"])
    """
    return structlog.get_logger(name)
