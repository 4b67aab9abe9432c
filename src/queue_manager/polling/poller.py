"""
Module: poller.py
Description: Long-poll loop over a queue client.

Receives batches, hands them to the consumer, and deletes what the
consumer processed successfully. A failure while processing one message
is logged and reported but never stops the loop; the message is left in
the queue and becomes visible again once its visibility timeout expires.

Key Components:
- QueuePoller: iter_batches() generator and poll(handler) loop
- StopPolling: raised by a handler to end the loop cleanly
- PollerStats: counters for requests, received/deleted/failed messages
- Cancellation: stop() sets an event checked between batches

Dependencies: threading, pydantic, models, utils
"""

import threading
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Iterator, List, Optional, Union

from pydantic import BaseModel, Field

from queue_manager.config.settings import MAX_BATCH_ENTRIES, MAX_WAIT_TIME_SECONDS
from queue_manager.errors import QueueValidationError
from queue_manager.models import DeleteBatchEntry, Message
from queue_manager.utils.logger import get_logger

if TYPE_CHECKING:
    from queue_manager.sqs_queue.client import QueueClient

logger = get_logger(__name__)

_UNSET: Any = object()

Handler = Callable[[Any], Any]
ErrorCallback = Callable[[Exception, Union[Message, List[Message]]], Any]


class StopPolling(Exception):
    """
    Raised from a handler to end the poll loop after the current message.

    The message whose handler raised StopPolling counts as processed and
    is deleted with the rest of the processed batch. Messages of the same
    batch that were not handed to the handler yet are left in the queue.
    """


class PollerStats(BaseModel):
    """Running counters for one poller."""

    request_count: int = Field(default=0, ge=0)
    received_message_count: int = Field(default=0, ge=0)
    deleted_message_count: int = Field(default=0, ge=0)
    failed_message_count: int = Field(default=0, ge=0)
    last_message_received_at: Optional[datetime] = None
    polling_started_at: Optional[datetime] = None
    polling_stopped_at: Optional[datetime] = None


class QueuePoller:
    """
    Long-poll loop for one queue.

    A poller is single-use: once stopped it stays stopped, and a new
    poller has to be created to poll again.

    Attributes:
        client: Queue client used for receive and delete_batch
        max_messages: Messages per receive (1-10)
        wait_time_seconds: Long-poll wait; None uses the queue default
        skip_delete: Leave processed messages in the queue
        idle_timeout: Stop after this many seconds without messages
        stats: PollerStats for the current/last run
        error: Loop-control error that ended a background run, if any

    Example:
        >>> poller = client.poller()
        >>> poller.poll(lambda message: print(message.body))
    """

    def __init__(
        self,
        client: "QueueClient",
        max_messages: Optional[int] = None,
        wait_time_seconds: Optional[int] = _UNSET,
        skip_delete: Optional[bool] = None,
        idle_timeout: Optional[float] = _UNSET
    ):
        settings = client.settings

        self.client = client
        self.max_messages = settings.receive_batch_size if max_messages is None else max_messages
        self.wait_time_seconds = (
            settings.wait_time_seconds if wait_time_seconds is _UNSET else wait_time_seconds
        )
        self.skip_delete = settings.skip_delete if skip_delete is None else skip_delete
        self.idle_timeout = settings.idle_timeout if idle_timeout is _UNSET else idle_timeout

        if isinstance(self.max_messages, bool) or not isinstance(self.max_messages, int) \
                or not 1 <= self.max_messages <= MAX_BATCH_ENTRIES:
            raise QueueValidationError(f"max_messages must be between 1 and {MAX_BATCH_ENTRIES}")
        if self.wait_time_seconds is not None and not 0 <= self.wait_time_seconds <= MAX_WAIT_TIME_SECONDS:
            raise QueueValidationError(
                f"wait_time_seconds must be between 0 and {MAX_WAIT_TIME_SECONDS}"
            )
        if self.idle_timeout is not None and self.idle_timeout <= 0:
            raise QueueValidationError("idle_timeout must be positive")

        self.stats = PollerStats()
        self.error: Optional[Exception] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_activity = time.monotonic()
        self.log = logger.bind(queue_name=client.queue_name)

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def stop(self) -> None:
        """
        Ask the loop to stop.

        Checked between batches: an in-flight receive finishes (up to the
        wait time) and its batch is processed before the loop exits.
        """
        if not self._stop_event.is_set():
            self.log.info("Poller stop requested")
        self._stop_event.set()

    def __iter__(self) -> Iterator[List[Message]]:
        return self.iter_batches()

    def iter_batches(self) -> Iterator[List[Message]]:
        """
        Yield non-empty batches until stopped or idle.

        A yielded batch is deleted when the consumer asks for the next one
        (unless skip_delete). If the consumer raises or abandons the
        generator, the current batch stays in the queue.
        """
        self._begin()
        try:
            while not self._stop_event.is_set():
                messages = self._receive()
                if not messages:
                    if self._idle_expired():
                        break
                    continue

                yield messages

                if not self.skip_delete:
                    self._delete(messages)
        finally:
            self._finish()

    def poll(
        self,
        handler: Handler,
        batch: bool = False,
        on_error: Optional[ErrorCallback] = None
    ) -> PollerStats:
        """
        Run the poll loop in the calling thread.

        Args:
            handler: Called with each Message, or with the whole batch
                when ``batch`` is True
            batch: Hand whole batches to the handler
            on_error: Called with (exception, message_or_batch) when the
                handler fails

        Returns:
            PollerStats for this run

        Raises:
            QueueError: On receive/delete failures (loop-control errors)
        """
        self._begin()
        try:
            while not self._stop_event.is_set():
                messages = self._receive()
                if not messages:
                    if self._idle_expired():
                        break
                    continue

                processed, stop_requested = self._process(messages, handler, batch, on_error)

                if processed and not self.skip_delete:
                    self._delete(processed)

                if stop_requested:
                    self.log.info("Handler requested stop")
                    self._stop_event.set()
        finally:
            self._finish()

        return self.stats

    def start(
        self,
        handler: Handler,
        batch: bool = False,
        on_error: Optional[ErrorCallback] = None
    ) -> threading.Thread:
        """
        Run poll() on a dedicated daemon thread.

        A loop-control error that ends the thread is stored on ``error``.

        Returns:
            The started thread
        """
        if self.running:
            raise RuntimeError("poller is already running")
        if self.stopped:
            raise RuntimeError("poller was stopped; create a new poller")

        def run() -> None:
            try:
                self.poll(handler, batch=batch, on_error=on_error)
            except Exception as e:
                self.error = e
                self.log.error(
                    "Poller terminated by error",
                    error=str(e),
                    error_type=type(e).__name__
                )

        self._thread = threading.Thread(
            target=run,
            name=f"queue-poller-{self.client.queue_name}",
            daemon=True
        )
        self._thread.start()
        return self._thread

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _begin(self) -> None:
        self.stats.polling_started_at = datetime.now(timezone.utc)
        self.stats.polling_stopped_at = None
        self._last_activity = time.monotonic()
        self.log.info(
            "Poller started",
            max_messages=self.max_messages,
            wait_time_seconds=self.wait_time_seconds,
            skip_delete=self.skip_delete,
            idle_timeout=self.idle_timeout
        )

    def _finish(self) -> None:
        self.stats.polling_stopped_at = datetime.now(timezone.utc)
        self.log.info(
            "Poller stopped",
            request_count=self.stats.request_count,
            received=self.stats.received_message_count,
            deleted=self.stats.deleted_message_count,
            failed=self.stats.failed_message_count
        )

    def _receive(self) -> List[Message]:
        self.stats.request_count += 1
        messages = self.client.receive(
            max_messages=self.max_messages,
            wait_time_seconds=self.wait_time_seconds
        )
        if messages:
            self.stats.received_message_count += len(messages)
            self.stats.last_message_received_at = datetime.now(timezone.utc)
            self._last_activity = time.monotonic()
        return messages

    def _idle_expired(self) -> bool:
        if self.idle_timeout is None:
            return False
        if time.monotonic() - self._last_activity < self.idle_timeout:
            return False
        self.log.info("Poller idle timeout reached", idle_timeout=self.idle_timeout)
        return True

    def _process(self, messages, handler, batch, on_error):
        """Run the handler; return (successfully processed messages, stop requested)."""
        if batch:
            try:
                handler(messages)
            except StopPolling:
                return messages, True
            except Exception as e:
                self._handler_failed(e, messages, on_error, message_count=len(messages))
                return [], False
            return messages, False

        processed = []
        for message in messages:
            try:
                handler(message)
            except StopPolling:
                processed.append(message)
                return processed, True
            except Exception as e:
                self._handler_failed(e, message, on_error, message_count=1)
                continue
            processed.append(message)
        return processed, False

    def _handler_failed(self, exc, item, on_error, message_count):
        self.stats.failed_message_count += message_count
        message_ids = [m.message_id for m in item] if isinstance(item, list) else [item.message_id]
        self.log.error(
            "Message processing failed, leaving message in queue",
            message_ids=message_ids,
            error=str(exc),
            error_type=type(exc).__name__
        )

        if on_error is None:
            return
        try:
            on_error(exc, item)
        except Exception as report_error:
            self.log.error(
                "Error callback failed",
                message_ids=message_ids,
                error=str(report_error),
                error_type=type(report_error).__name__
            )

    def _delete(self, messages: List[Message]) -> None:
        entries = [
            DeleteBatchEntry(id=str(index), receipt_handle=message.receipt_handle)
            for index, message in enumerate(messages)
        ]
        result = self.client.delete_batch(entries)
        self.stats.deleted_message_count += len(result.successful)

        if result.failed:
            self.log.warning(
                "Processed messages could not be deleted",
                message_ids=[messages[int(failure.id)].message_id for failure in result.failed],
                error_codes=sorted({failure.code for failure in result.failed})
            )
