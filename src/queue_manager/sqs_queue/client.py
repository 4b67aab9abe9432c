"""
Module: client.py
Description: QueueClient, the façade over one named queue.

Owns the lazily resolved queue endpoint and exposes the message
lifecycle (send/receive/delete, single and batch), purge, delete-queue,
attribute counts, and the long-poll poller.

Key Components:
- QueueClient: Main client class
- Validation: Requests are checked before any network call
- Endpoint caching: Delegated to EndpointResolver

Dependencies: pydantic, models, errors, sqs_queue, polling
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from queue_manager.config.settings import MAX_BATCH_ENTRIES, QueueSettings, load_settings
from queue_manager.errors import QueueValidationError
from queue_manager.models import (
    COUNT_ATTRIBUTES,
    DELAYED_ATTRIBUTE,
    IN_FLIGHT_ATTRIBUTE,
    VISIBLE_ATTRIBUTE,
    BatchResult,
    DeleteBatchEntry,
    DeleteOutcome,
    Message,
    QueueConfig,
    QueueCounts,
    SendBatchEntry,
    SendRequest,
    SendResult,
)
from queue_manager.polling.poller import QueuePoller
from queue_manager.sqs_queue.resolver import EndpointResolver
from queue_manager.sqs_queue.service import QueueService
from queue_manager.sqs_queue.sqs import SQSService, create_sqs_client
from queue_manager.utils.batch_helpers import validate_batch_entries
from queue_manager.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)

SendEntry = Union[SendBatchEntry, Mapping[str, Any]]
DeleteEntry = Union[DeleteBatchEntry, Mapping[str, Any]]


class QueueClient:
    """
    Client for one named queue.

    The queue endpoint is resolved on first use (creating the queue when
    it does not exist) and cached until delete_queue() is called.

    Attributes:
        settings: Effective queue settings
        service: Queue service collaborator (SQSService by default)
        resolver: Endpoint resolver holding the cached endpoint

    Example:
        >>> client = QueueClient("orders")
        >>> client.send('{"order_id": "12345"}')
        SendResult(message_id='...', sequence_number=None, md5_of_body='...')
        >>> for message in client.receive_batch():
        ...     client.delete(message)
    """

    def __init__(
        self,
        queue_name: Optional[str] = None,
        visibility_timeout: Optional[int] = None,
        service: Optional[QueueService] = None,
        settings: Optional[QueueSettings] = None,
        **options
    ):
        """
        Initialize the queue client.

        Args:
            queue_name: Queue name (falls back to QUEUE_QUEUE_NAME)
            visibility_timeout: Seconds received messages stay hidden (default 60)
            service: Queue service; an SQSService is built from settings if omitted
            settings: Complete settings, used instead of the other arguments
            **options: Any other QueueSettings field

        The settings log_level becomes the process-wide logging level.

        Raises:
            pydantic.ValidationError: If the resulting settings are invalid
        """
        if settings is None:
            overrides = dict(options)
            if queue_name is not None:
                overrides['queue_name'] = queue_name
            if visibility_timeout is not None:
                overrides['visibility_timeout'] = visibility_timeout
            settings = load_settings(**overrides)

        configure_logging(settings.log_level)
        self.settings = settings
        self.service = service or SQSService(create_sqs_client(settings))
        self.resolver = EndpointResolver(
            settings.queue_name,
            self.service,
            QueueConfig(
                visibility_timeout=settings.visibility_timeout,
                open_timeout=settings.open_timeout,
                read_timeout=settings.read_timeout,
                fifo=settings.fifo,
            )
        )
        self._poller: Optional[QueuePoller] = None
        self.log = logger.bind(queue_name=settings.queue_name)

        self.log.info(
            "Queue client initialized",
            visibility_timeout=settings.visibility_timeout,
            fifo=settings.fifo
        )

    @classmethod
    def from_settings(cls, settings: QueueSettings, service: Optional[QueueService] = None) -> "QueueClient":
        return cls(settings=settings, service=service)

    @property
    def queue_name(self) -> str:
        return self.settings.queue_name

    @property
    def visibility_timeout(self) -> int:
        return self.settings.visibility_timeout

    @property
    def queue_url(self) -> str:
        """Resolved queue endpoint (resolves on first access)."""
        return self.resolver.resolve()

    # Single-message operations

    def send(
        self,
        body: Union[str, bytes, SendRequest],
        message_attributes: Optional[Dict[str, Any]] = None,
        delay_seconds: Optional[int] = None,
        message_group_id: Optional[str] = None,
        message_deduplication_id: Optional[str] = None
    ) -> SendResult:
        """
        Send one message.

        Args:
            body: Message body, or a prepared SendRequest
            message_attributes: Optional structured attributes
            delay_seconds: Optional per-message delay (0-900)
            message_group_id: Required for FIFO queues
            message_deduplication_id: FIFO deduplication token

        Returns:
            SendResult with the service-assigned message id

        Raises:
            QueueValidationError: If the request is invalid
            TransportError: If the service cannot be reached
        """
        if isinstance(body, SendRequest):
            request = body
        else:
            try:
                request = SendRequest(
                    body=body,
                    message_attributes=message_attributes,
                    delay_seconds=delay_seconds,
                    message_group_id=message_group_id,
                    message_deduplication_id=message_deduplication_id,
                )
            except ValidationError as e:
                raise QueueValidationError(str(e), operation='send') from e

        self._check_fifo([request], 'send')

        result = self.service.send(self.queue_url, request)
        self.log.info(
            "Message sent",
            message_id=result.message_id,
            sequence_number=result.sequence_number
        )
        return result

    def receive(self, max_messages: int = 1, wait_time_seconds: Optional[int] = None) -> List[Message]:
        """
        Receive up to ``max_messages`` messages in a single request.

        An empty list means no message was available; failures raise.

        Args:
            max_messages: Number of messages to request (1-10)
            wait_time_seconds: Long-poll wait; None uses the queue default

        Returns:
            Received messages, possibly empty
        """
        self._check_max_messages(max_messages, 'receive')

        messages = self.service.receive(
            self.queue_url,
            visibility_timeout=self.visibility_timeout,
            max_messages=max_messages,
            wait_time=wait_time_seconds
        )
        self.log.debug("Messages received", count=len(messages), max_messages=max_messages)
        return messages

    def delete(self, receipt_handle: Union[str, Message]) -> DeleteOutcome:
        """
        Delete one delivered message.

        An expired, invalid or already used receipt handle yields
        DeleteOutcome.NOT_FOUND rather than an error.

        Args:
            receipt_handle: Receipt handle, or the Message itself

        Returns:
            DeleteOutcome.DELETED or DeleteOutcome.NOT_FOUND
        """
        if isinstance(receipt_handle, Message):
            receipt_handle = receipt_handle.receipt_handle
        if not receipt_handle or not isinstance(receipt_handle, str):
            raise QueueValidationError("receipt_handle must be a non-empty string", operation='delete')

        outcome = self.service.delete(self.queue_url, receipt_handle)
        self.log.info("Message delete finished", outcome=outcome.value)
        return outcome

    # Batch operations

    def send_batch(self, entries: Sequence[SendEntry]) -> BatchResult:
        """
        Send up to 10 messages in one request.

        Individual entry failures are reported in the returned BatchResult;
        only request-level failures raise. Larger workloads must be
        chunked by the caller (see utils.batch_helpers.chunk_list).

        Args:
            entries: SendBatchEntry objects or dicts with Id/MessageBody

        Returns:
            BatchResult with successful and failed entries

        Raises:
            QueueValidationError: On empty, oversized or malformed batches
        """
        batch = self._coerce_entries(entries, SendBatchEntry, 'send_batch')
        self._check_fifo(batch, 'send_batch')

        result = self.service.send_batch(self.queue_url, batch)
        self._log_batch('send_batch', result)
        return result

    def receive_batch(
        self,
        max_messages: Optional[int] = None,
        wait_time_seconds: Optional[int] = None
    ) -> List[Message]:
        """Receive up to ``max_messages`` (default: receive_batch_size) messages."""
        if max_messages is None:
            max_messages = self.settings.receive_batch_size
        return self.receive(max_messages=max_messages, wait_time_seconds=wait_time_seconds)

    def delete_batch(self, entries: Sequence[DeleteEntry]) -> BatchResult:
        """
        Delete up to 10 messages in one request.

        Args:
            entries: DeleteBatchEntry objects or dicts with Id/ReceiptHandle

        Returns:
            BatchResult; invalid receipt handles appear in ``failed``
        """
        batch = self._coerce_entries(entries, DeleteBatchEntry, 'delete_batch')

        result = self.service.delete_batch(self.queue_url, batch)
        self._log_batch('delete_batch', result)
        return result

    # Queue-level operations

    def purge(self) -> None:
        """
        Remove all messages from the queue.

        Purging is asynchronous on the service side; the queue may still
        report messages for a while after this returns.
        """
        self.service.purge(self.queue_url)
        self.log.info("Queue purge requested")

    def delete_queue(self) -> None:
        """Delete the queue and forget its endpoint."""
        self.resolver.release(self.service.delete_queue)
        self.log.info("Queue deleted")

    def counts(self) -> QueueCounts:
        """Approximate visible, in-flight and delayed message counts."""
        attributes = self.service.get_attributes(self.queue_url, COUNT_ATTRIBUTES)
        return QueueCounts.from_attributes(attributes)

    def size(self) -> int:
        """Total of visible, in-flight and delayed messages."""
        return self.counts().total

    def available_size(self) -> int:
        return self._single_count(VISIBLE_ATTRIBUTE).visible

    def in_flight_size(self) -> int:
        return self._single_count(IN_FLIGHT_ATTRIBUTE).in_flight

    def delayed_size(self) -> int:
        return self._single_count(DELAYED_ATTRIBUTE).delayed

    def poller(self, **overrides) -> QueuePoller:
        """
        Return a QueuePoller for this queue.

        Without overrides the same poller is returned on every call until
        it is stopped; a stopped poller is replaced by a fresh one.

        Args:
            **overrides: QueuePoller options (max_messages, wait_time_seconds,
                skip_delete, idle_timeout)
        """
        if overrides:
            return QueuePoller(self, **overrides)
        if self._poller is None or self._poller.stopped:
            self._poller = QueuePoller(self)
        return self._poller

    # Helpers

    def _single_count(self, attribute: str) -> QueueCounts:
        return QueueCounts.from_attributes(self.service.get_attributes(self.queue_url, [attribute]))

    def _check_max_messages(self, max_messages: int, operation: str) -> None:
        if isinstance(max_messages, bool) or not isinstance(max_messages, int) \
                or not 1 <= max_messages <= MAX_BATCH_ENTRIES:
            raise QueueValidationError(
                f"max_messages must be between 1 and {MAX_BATCH_ENTRIES}",
                operation=operation
            )

    def _check_fifo(self, requests: Sequence[SendRequest], operation: str) -> None:
        if not self.settings.fifo:
            return
        if any(request.message_group_id is None for request in requests):
            raise QueueValidationError(
                "message_group_id is required for FIFO queues",
                operation=operation
            )

    def _coerce_entries(self, entries, model, operation: str) -> List:
        if entries is None or isinstance(entries, (str, bytes)):
            raise QueueValidationError("entries must be a list of batch entries", operation=operation)

        entries = list(entries)
        # Size is checked before parsing so oversized batches fail fast
        if len(entries) > self.settings.max_batch_entries:
            raise QueueValidationError(
                f"batch size cannot exceed {self.settings.max_batch_entries} entries (got {len(entries)})",
                operation=operation
            )

        try:
            batch = [
                entry if isinstance(entry, model) else model.from_raw(dict(entry))
                for entry in entries
            ]
        except (ValidationError, TypeError, ValueError) as e:
            raise QueueValidationError(str(e), operation=operation) from e

        try:
            validate_batch_entries([entry.id for entry in batch], self.settings.max_batch_entries)
        except QueueValidationError as e:
            e.operation = operation
            raise
        return batch

    def _log_batch(self, operation: str, result: BatchResult) -> None:
        if result.failed:
            self.log.warning(
                "Batch partially failed",
                operation=operation,
                successful=len(result.successful),
                failed=len(result.failed),
                failed_ids=result.failed_ids,
                error_codes=sorted({failure.code for failure in result.failed})
            )
        else:
            self.log.info("Batch completed", operation=operation, successful=len(result.successful))
