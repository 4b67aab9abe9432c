"""
Module: test_queue_lifecycle.py
Description: Integration tests for QueueClient over moto-backed SQS.

Exercises the full path from lazy queue creation through send, receive,
batch calls, counts, polling and queue deletion.
"""

from unittest.mock import patch

import pytest

from queue_manager.errors import QueueValidationError
from queue_manager.config.settings import QueueSettings
from queue_manager.models import DeleteOutcome
from queue_manager.sqs_queue.client import QueueClient


class TestQueueLifecycle:
    """End-to-end queue lifecycle against mocked SQS."""

    def test_queue_created_on_first_use(self, sqs_queue_client, sqs_client):
        """Test that a missing queue is created with visibility timeout 60."""
        url = sqs_queue_client.queue_url

        attributes = sqs_client.get_queue_attributes(
            QueueUrl=url, AttributeNames=['VisibilityTimeout']
        )['Attributes']
        assert attributes['VisibilityTimeout'] == '60'

    def test_second_resolve_makes_no_calls(self, sqs_queue_client):
        first = sqs_queue_client.queue_url

        with patch.object(sqs_queue_client.service, 'lookup_queue') as lookup, \
                patch.object(sqs_queue_client.service, 'create_queue') as create:
            assert sqs_queue_client.queue_url == first

        lookup.assert_not_called()
        create.assert_not_called()

    def test_receive_empty_queue(self, sqs_queue_client):
        assert sqs_queue_client.receive() == []

    def test_send_receive_delete(self, sqs_queue_client):
        sqs_queue_client.send('{"Something": "Something"}')

        messages = sqs_queue_client.receive()

        assert [m.body for m in messages] == ['{"Something": "Something"}']
        assert sqs_queue_client.delete(messages[0]) == DeleteOutcome.DELETED

    def test_delete_unknown_handle_does_not_raise(self, sqs_queue_client):
        sqs_queue_client.send("a")
        assert sqs_queue_client.delete("Something") == DeleteOutcome.NOT_FOUND

    def test_batch_round(self, sqs_queue_client):
        sent = sqs_queue_client.send_batch([
            {'Id': '1', 'MessageBody': 'Something'},
            {'Id': '2', 'MessageBody': 'Anything'},
        ])
        assert sent.all_succeeded

        messages = sqs_queue_client.receive_batch()
        assert sorted(m.body for m in messages) == ['Anything', 'Something']

        deleted = sqs_queue_client.delete_batch([
            {'Id': str(index), 'ReceiptHandle': message.receipt_handle}
            for index, message in enumerate(messages)
        ])
        assert deleted.all_succeeded
        assert sqs_queue_client.size() == 0

    def test_oversized_batch_makes_no_request(self, sqs_queue_client):
        with patch.object(sqs_queue_client.service, 'send_batch') as send_batch:
            with pytest.raises(QueueValidationError):
                sqs_queue_client.send_batch([
                    {'Id': str(i), 'MessageBody': 'x'} for i in range(11)
                ])

        send_batch.assert_not_called()
        assert sqs_queue_client.resolver.is_resolved is False

    def test_counts(self, sqs_queue_client):
        sqs_queue_client.send("a")
        sqs_queue_client.send("b")
        sqs_queue_client.send("later", delay_seconds=60)
        sqs_queue_client.receive()

        counts = sqs_queue_client.counts()

        assert counts.visible == 1
        assert counts.in_flight == 1
        assert counts.delayed == 1
        assert sqs_queue_client.size() == 3
        assert sqs_queue_client.available_size() == 1
        assert sqs_queue_client.in_flight_size() == 1
        assert sqs_queue_client.delayed_size() == 1

    def test_purge(self, sqs_queue_client):
        sqs_queue_client.send("a")
        sqs_queue_client.purge()
        assert sqs_queue_client.receive() == []

    def test_delete_queue_then_recreate(self, sqs_queue_client, sqs_client):
        first = sqs_queue_client.queue_url

        sqs_queue_client.delete_queue()

        assert sqs_queue_client.resolver.endpoint is None
        assert sqs_client.list_queues().get('QueueUrls', []) == []

        sqs_queue_client.send("again")
        assert sqs_queue_client.queue_url == first
        assert [m.body for m in sqs_queue_client.receive()] == ["again"]

    def test_poller_processes_messages(self, sqs_queue_client):
        """Test that a failing message stays in flight while others are deleted."""
        for body in ("one", "two", "three"):
            sqs_queue_client.send(body)

        poller = sqs_queue_client.poller(idle_timeout=0.05)

        def handler(message):
            if message.body == "two":
                raise RuntimeError("cannot process two")

        stats = poller.poll(handler)

        assert stats.received_message_count == 3
        assert stats.deleted_message_count == 2
        assert stats.failed_message_count == 1

        counts = sqs_queue_client.counts()
        assert counts.visible == 0
        assert counts.in_flight == 1


class TestFifoQueueLifecycle:
    """FIFO queues created on first use."""

    @pytest.fixture
    def fifo_client(self, sqs_service):
        settings = QueueSettings(queue_name="orders.fifo", fifo=True, _env_file=None)
        return QueueClient.from_settings(settings, service=sqs_service)

    def test_send_with_group_id_only(self, fifo_client, sqs_client):
        """Test that a FIFO send needs no explicit deduplication id."""
        result = fifo_client.send('{"order_id": "1"}', message_group_id="customer-1")

        assert result.message_id

        attributes = sqs_client.get_queue_attributes(
            QueueUrl=fifo_client.queue_url,
            AttributeNames=['FifoQueue', 'ContentBasedDeduplication']
        )['Attributes']
        assert attributes['FifoQueue'] == 'true'
        assert attributes['ContentBasedDeduplication'] == 'true'

    def test_messages_received_in_order(self, fifo_client):
        for body in ("first", "second", "third"):
            fifo_client.send(body, message_group_id="customer-1")

        assert [m.body for m in fifo_client.receive_batch()] == ["first", "second", "third"]

    def test_batch_send_with_group_ids(self, fifo_client):
        result = fifo_client.send_batch([
            {'Id': '1', 'MessageBody': 'a', 'MessageGroupId': 'g1'},
            {'Id': '2', 'MessageBody': 'b', 'MessageGroupId': 'g1'},
        ])

        assert result.all_succeeded

    def test_missing_group_id_rejected_before_network(self, fifo_client):
        with patch.object(fifo_client.service, 'send') as send:
            with pytest.raises(QueueValidationError, match="message_group_id"):
                fifo_client.send("a")

        send.assert_not_called()
