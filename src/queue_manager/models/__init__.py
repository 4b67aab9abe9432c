"""
Module: models
Description: Package initialization for Pydantic data models.

This package contains all data models used by the queue manager:
- Message, SendRequest, SendResult, DeleteOutcome: single-message lifecycle
- SendBatchEntry, DeleteBatchEntry, BatchResult: batch requests and outcomes
- QueueConfig, QueueCounts, Found, NotFound: queue-level models

All models are exported here for convenient importing.
"""

from .message import (
    DeleteOutcome,
    Message,
    MessageAttributeValue,
    SendRequest,
    SendResult,
)
from .batch import (
    BatchFailure,
    BatchResult,
    BatchResultEntry,
    DeleteBatchEntry,
    SendBatchEntry,
)
from .queue import (
    COUNT_ATTRIBUTES,
    DELAYED_ATTRIBUTE,
    IN_FLIGHT_ATTRIBUTE,
    VISIBLE_ATTRIBUTE,
    Found,
    LookupResult,
    NotFound,
    QueueConfig,
    QueueCounts,
)

__all__ = [
    "DeleteOutcome",
    "Message",
    "MessageAttributeValue",
    "SendRequest",
    "SendResult",
    "BatchFailure",
    "BatchResult",
    "BatchResultEntry",
    "DeleteBatchEntry",
    "SendBatchEntry",
    "COUNT_ATTRIBUTES",
    "DELAYED_ATTRIBUTE",
    "IN_FLIGHT_ATTRIBUTE",
    "VISIBLE_ATTRIBUTE",
    "Found",
    "LookupResult",
    "NotFound",
    "QueueConfig",
    "QueueCounts",
]
