"""
Package: queue_manager
Description: Durable-queue client for Amazon SQS.

QueueClient owns one named queue: it resolves (or creates) the queue on
first use and exposes send/receive/delete, batch variants, purge,
delete-queue, message counts, and a long-poll poller.
"""

from .errors import (
    QueueConflictError,
    QueueError,
    QueueNotFoundError,
    QueueValidationError,
    TransportError,
)
from .config.settings import QueueSettings, load_settings
from .polling import PollerStats, QueuePoller, StopPolling
from .sqs_queue import EndpointResolver, QueueClient, QueueService, SQSService, create_sqs_client

__version__ = "0.1.0"

__all__ = [
    "QueueClient",
    "QueuePoller",
    "PollerStats",
    "StopPolling",
    "EndpointResolver",
    "QueueService",
    "SQSService",
    "create_sqs_client",
    "QueueSettings",
    "load_settings",
    "QueueError",
    "QueueNotFoundError",
    "QueueConflictError",
    "TransportError",
    "QueueValidationError",
]
