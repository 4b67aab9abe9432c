"""
Module: service.py
Description: Abstract queue service collaborator.

The queue client talks to the queue service only through these ten
operations. SQSService implements them over boto3; tests plug in an
in-memory double.
"""

import abc
from typing import Any, Dict, List, Optional, Sequence

from queue_manager.models import (
    BatchResult,
    DeleteBatchEntry,
    DeleteOutcome,
    LookupResult,
    Message,
    QueueConfig,
    SendBatchEntry,
    SendRequest,
    SendResult,
)


class QueueService(abc.ABC):

    @abc.abstractmethod
    def lookup_queue(self, name: str) -> LookupResult:
        """Return Found(endpoint) or NotFound(name); never raises for a missing queue."""

    @abc.abstractmethod
    def create_queue(self, name: str, config: QueueConfig) -> str:
        """Create the queue (or accept an existing one) and return its endpoint."""

    @abc.abstractmethod
    def send(self, endpoint: str, request: SendRequest) -> SendResult:
        pass

    @abc.abstractmethod
    def send_batch(self, endpoint: str, entries: Sequence[SendBatchEntry]) -> BatchResult:
        pass

    @abc.abstractmethod
    def receive(
        self,
        endpoint: str,
        visibility_timeout: int,
        max_messages: int,
        wait_time: Optional[int] = None
    ) -> List[Message]:
        pass

    @abc.abstractmethod
    def delete(self, endpoint: str, receipt_handle: str) -> DeleteOutcome:
        pass

    @abc.abstractmethod
    def delete_batch(self, endpoint: str, entries: Sequence[DeleteBatchEntry]) -> BatchResult:
        pass

    @abc.abstractmethod
    def purge(self, endpoint: str) -> None:
        pass

    @abc.abstractmethod
    def delete_queue(self, endpoint: str) -> None:
        pass

    @abc.abstractmethod
    def get_attributes(self, endpoint: str, names: Sequence[str]) -> Dict[str, Any]:
        pass
