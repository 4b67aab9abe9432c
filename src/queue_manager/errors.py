"""
Module: errors.py
Description: Error taxonomy for queue operations.

Every failure that leaves the queue manager is one of the exceptions
below. botocore errors are translated at the service boundary so callers
never have to inspect raw AWS error codes.

Key Components:
- QueueError: Base class for all queue manager errors
- QueueNotFoundError: Queue absent on a non-resolution path
- QueueConflictError: Queue already exists / purge already in progress
- TransportError: Network or service unavailability (never retried here)
- QueueValidationError: Request rejected before any network call
- translate_client_error(): botocore exception -> taxonomy

Dependencies: botocore
"""

from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

# Error codes SQS returns (query and JSON protocol spellings)
QUEUE_MISSING_CODES = frozenset({
    "AWS.SimpleQueueService.NonExistentQueue",
    "QueueDoesNotExist",
    "NonExistentQueue",
})
QUEUE_EXISTS_CODES = frozenset({
    "QueueAlreadyExists",
    "QueueNameExists",
})
PURGE_IN_PROGRESS_CODES = frozenset({
    "AWS.SimpleQueueService.PurgeQueueInProgress",
    "PurgeQueueInProgress",
})
RECEIPT_HANDLE_CODES = frozenset({
    "ReceiptHandleIsInvalid",
    "InvalidParameterValue",
    "AWS.SimpleQueueService.MessageNotInflight",
    "MessageNotInflight",
})
VALIDATION_CODES = frozenset({
    "InvalidParameterValue",
    "MissingParameter",
    "ValidationError",
    "AWS.SimpleQueueService.TooManyEntriesInBatchRequest",
    "TooManyEntriesInBatchRequest",
    "AWS.SimpleQueueService.BatchEntryIdsNotDistinct",
    "BatchEntryIdsNotDistinct",
    "AWS.SimpleQueueService.EmptyBatchRequest",
    "EmptyBatchRequest",
    "InvalidBatchEntryId",
    "AWS.SimpleQueueService.InvalidBatchEntryId",
})


class QueueError(Exception):
    """Base class for queue manager errors."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        code: Optional[str] = None
    ):
        super().__init__(message)
        self.operation = operation
        self.code = code


class QueueNotFoundError(QueueError):
    """The queue does not exist."""


class QueueConflictError(QueueError):
    """The queue already exists, or a purge is already running."""


class TransportError(QueueError):
    """Network or service failure. Not retried by the queue manager."""


class QueueValidationError(QueueError, ValueError):
    """A request was rejected before reaching the queue service."""


def error_code(exc: ClientError) -> str:
    """Return the AWS error code carried by a ClientError."""
    return exc.response.get("Error", {}).get("Code", "")


def error_message(exc: ClientError) -> str:
    """Return the AWS error message carried by a ClientError."""
    return exc.response.get("Error", {}).get("Message", str(exc))


def translate_client_error(exc: Exception, operation: str) -> QueueError:
    """
    Map a botocore exception onto the queue error taxonomy.

    Args:
        exc: Exception raised by the boto3 SQS client
        operation: Logical operation name, kept on the translated error

    Returns:
        QueueError subclass instance (caller raises it ``from exc``)
    """
    if isinstance(exc, ClientError):
        code = error_code(exc)
        message = error_message(exc)

        if code in QUEUE_MISSING_CODES:
            return QueueNotFoundError(message, operation=operation, code=code)
        if code in QUEUE_EXISTS_CODES or code in PURGE_IN_PROGRESS_CODES:
            return QueueConflictError(message, operation=operation, code=code)
        if code in VALIDATION_CODES:
            return QueueValidationError(message, operation=operation, code=code)
        return TransportError(message, operation=operation, code=code)

    # Endpoint, connection and read-timeout failures all derive from this
    if isinstance(exc, BotoCoreError):
        return TransportError(str(exc), operation=operation, code=type(exc).__name__)

    return TransportError(str(exc), operation=operation)
