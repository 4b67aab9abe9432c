"""
Module: conftest.py
Description: Shared pytest fixtures for queue manager tests.

Provides moto-backed SQS clients for tests that exercise the boto3
adapter, and an in-memory FakeQueueService for fast resolver, client and
poller tests that need to count calls or script failures.
"""

import itertools
from typing import Callable, Dict, List, Optional, Sequence

import boto3
import pytest
from moto import mock_aws

from queue_manager.config.settings import QueueSettings
from queue_manager.errors import QueueNotFoundError
from queue_manager.models import (
    BatchFailure,
    BatchResult,
    BatchResultEntry,
    DeleteOutcome,
    Found,
    Message,
    NotFound,
    QueueConfig,
    SendResult,
)
from queue_manager.sqs_queue.client import QueueClient
from queue_manager.sqs_queue.service import QueueService
from queue_manager.sqs_queue.sqs import SQSService

REGION = "us-east-1"
ACCOUNT_URL = "https://sqs.us-east-1.amazonaws.com/123456789012"


class FakeQueueService(QueueService):
    """
    In-memory queue service double.

    Records every call in ``calls`` as (operation, name_or_endpoint) and
    keeps visible/in-flight messages per queue. ``expire_visibility()``
    makes in-flight messages visible again, simulating a timeout.
    """

    def __init__(self):
        self.queues: Dict[str, Dict[str, list]] = {}
        self.calls: List[tuple] = []
        self.created: List[tuple] = []
        self.failing_send_ids = set()
        self.attributes: Dict[str, str] = {}
        self.on_empty_receive: Optional[Callable[[], None]] = None
        self.receive_error: Optional[Exception] = None
        self._ids = itertools.count(1)

    # Helpers for tests

    def add_queue(self, name: str) -> str:
        self.queues[name] = {'visible': [], 'in_flight': {}}
        return self.url_for(name)

    @staticmethod
    def url_for(name: str) -> str:
        return f"{ACCOUNT_URL}/{name}"

    def enqueue(self, name: str, *bodies: str) -> None:
        for body in bodies:
            self.queues[name]['visible'].append((f"msg-{next(self._ids)}", body))

    def expire_visibility(self, name: str) -> None:
        queue = self.queues[name]
        queue['visible'].extend(queue['in_flight'].values())
        queue['in_flight'].clear()

    def operations(self) -> List[str]:
        return [operation for operation, _ in self.calls]

    def _queue(self, endpoint: str) -> Dict[str, list]:
        name = endpoint.rsplit('/', 1)[-1]
        if name not in self.queues:
            raise QueueNotFoundError(f"Queue {name} does not exist", code="QueueDoesNotExist")
        return self.queues[name]

    # QueueService

    def lookup_queue(self, name):
        self.calls.append(('lookup_queue', name))
        if name in self.queues:
            return Found(endpoint=self.url_for(name))
        return NotFound(name=name)

    def create_queue(self, name, config: QueueConfig):
        self.calls.append(('create_queue', name))
        self.created.append((name, config))
        if name not in self.queues:
            self.add_queue(name)
        return self.url_for(name)

    def send(self, endpoint, request):
        self.calls.append(('send', endpoint))
        message_id = f"msg-{next(self._ids)}"
        self._queue(endpoint)['visible'].append((message_id, request.body))
        return SendResult(message_id=message_id)

    def send_batch(self, endpoint, entries):
        self.calls.append(('send_batch', endpoint))
        queue = self._queue(endpoint)
        result = BatchResult()
        for entry in entries:
            if entry.id in self.failing_send_ids:
                result.failed.append(BatchFailure(
                    id=entry.id, code="InternalError", message="Internal failure", sender_fault=False
                ))
                continue
            message_id = f"msg-{next(self._ids)}"
            queue['visible'].append((message_id, entry.body))
            result.successful.append(BatchResultEntry(id=entry.id, message_id=message_id))
        return result

    def receive(self, endpoint, visibility_timeout, max_messages, wait_time=None):
        self.calls.append(('receive', endpoint))
        if self.receive_error is not None:
            raise self.receive_error
        queue = self._queue(endpoint)
        taken = queue['visible'][:max_messages]
        del queue['visible'][:max_messages]

        messages = []
        for message_id, body in taken:
            handle = f"rh-{message_id}-{next(self._ids)}"
            queue['in_flight'][handle] = (message_id, body)
            messages.append(Message(message_id=message_id, receipt_handle=handle, body=body))

        if not messages and self.on_empty_receive is not None:
            self.on_empty_receive()
        return messages

    def delete(self, endpoint, receipt_handle):
        self.calls.append(('delete', endpoint))
        in_flight = self._queue(endpoint)['in_flight']
        if in_flight.pop(receipt_handle, None) is None:
            return DeleteOutcome.NOT_FOUND
        return DeleteOutcome.DELETED

    def delete_batch(self, endpoint, entries):
        self.calls.append(('delete_batch', endpoint))
        in_flight = self._queue(endpoint)['in_flight']
        result = BatchResult()
        for entry in entries:
            if in_flight.pop(entry.receipt_handle, None) is None:
                result.failed.append(BatchFailure(
                    id=entry.id, code="ReceiptHandleIsInvalid", sender_fault=True
                ))
            else:
                result.successful.append(BatchResultEntry(id=entry.id))
        return result

    def purge(self, endpoint):
        self.calls.append(('purge', endpoint))
        queue = self._queue(endpoint)
        queue['visible'].clear()
        queue['in_flight'].clear()

    def delete_queue(self, endpoint):
        self.calls.append(('delete_queue', endpoint))
        self._queue(endpoint)
        del self.queues[endpoint.rsplit('/', 1)[-1]]

    def get_attributes(self, endpoint, names: Sequence[str]):
        self.calls.append(('get_attributes', endpoint))
        self._queue(endpoint)
        return {name: value for name, value in self.attributes.items() if name in names}


@pytest.fixture
def test_settings():
    """
    Provide queue settings for tests.

    Disables .env loading so the developer's environment cannot leak in.
    """
    return QueueSettings(queue_name="orders", _env_file=None)


@pytest.fixture
def fake_service():
    """Provide an empty in-memory queue service."""
    return FakeQueueService()


@pytest.fixture
def fake_client(fake_service, test_settings):
    """Provide a QueueClient wired to the in-memory service."""
    return QueueClient.from_settings(test_settings, service=fake_service)


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake AWS credentials so boto3 never touches a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)


@pytest.fixture
def sqs_client(aws_credentials):
    """
    Provide a boto3 SQS client backed by moto.

    The mock stays active for the whole test; queues vanish afterwards.
    """
    with mock_aws():
        yield boto3.client('sqs', region_name=REGION)


@pytest.fixture
def sqs_service(sqs_client):
    """Provide an SQSService over the moto-backed client."""
    return SQSService(sqs_client)


@pytest.fixture
def sqs_queue_client(sqs_service, test_settings):
    """Provide a QueueClient over moto-backed SQS."""
    return QueueClient.from_settings(test_settings, service=sqs_service)
