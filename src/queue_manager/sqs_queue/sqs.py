"""
Module: sqs.py
Description: Amazon SQS implementation of the queue service.

Wraps a boto3 SQS client injected at construction. Every botocore
failure is logged with its AWS error code and re-raised as a QueueError
subclass; "queue does not exist" on lookup and "receipt handle invalid"
on delete are expected outcomes and come back as values instead.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from queue_manager.config.settings import QueueSettings
from queue_manager.errors import (
    QUEUE_EXISTS_CODES,
    QUEUE_MISSING_CODES,
    RECEIPT_HANDLE_CODES,
    QueueConflictError,
    error_code,
    error_message,
    translate_client_error,
)
from queue_manager.models import (
    BatchResult,
    DeleteBatchEntry,
    DeleteOutcome,
    Found,
    LookupResult,
    Message,
    NotFound,
    QueueConfig,
    SendBatchEntry,
    SendRequest,
    SendResult,
)
from queue_manager.sqs_queue.service import QueueService
from queue_manager.utils.logger import get_logger

logger = get_logger(__name__)


def create_sqs_client(settings: QueueSettings) -> Any:
    """
    Build a boto3 SQS client from settings.

    Connect and read timeouts come from ``open_timeout`` and
    ``read_timeout``; credentials follow the usual boto3 chain.

    Args:
        settings: Queue settings

    Returns:
        boto3 SQS client
    """
    config = Config(
        region_name=settings.aws_region,
        connect_timeout=settings.open_timeout,
        read_timeout=settings.read_timeout,
    )
    return boto3.client(
        'sqs',
        region_name=settings.aws_region,
        endpoint_url=settings.endpoint_url,
        config=config
    )


class SQSService(QueueService):
    """
    SQS-backed queue service.

    Attributes:
        client: boto3 SQS client

    Example:
        >>> service = SQSService(boto3.client('sqs', region_name='us-east-1'))
        >>> service.lookup_queue("orders")
        Found(endpoint='https://sqs.us-east-1.amazonaws.com/123456789012/orders')
    """

    def __init__(self, client: Any):
        if client is None:
            raise ValueError("client must be a boto3 SQS client")

        self.client = client

    def _invoke(self, operation: str, call: Callable[..., Dict[str, Any]], **params) -> Dict[str, Any]:
        """Run one SQS API call, translating botocore failures."""
        try:
            return call(**params)

        except ClientError as e:
            logger.error(
                "SQS request failed",
                operation=operation,
                queue_url=params.get('QueueUrl'),
                error_code=error_code(e),
                error_message=error_message(e)
            )
            raise translate_client_error(e, operation) from e

        except BotoCoreError as e:
            logger.error(
                "SQS transport failure",
                operation=operation,
                queue_url=params.get('QueueUrl'),
                error=str(e),
                error_type=type(e).__name__
            )
            raise translate_client_error(e, operation) from e

    def lookup_queue(self, name: str) -> LookupResult:
        try:
            response = self.client.get_queue_url(QueueName=name)

        except ClientError as e:
            if error_code(e) in QUEUE_MISSING_CODES:
                logger.info("Queue does not exist", queue_name=name)
                return NotFound(name=name)

            logger.error(
                "Failed to look up queue",
                queue_name=name,
                error_code=error_code(e),
                error_message=error_message(e)
            )
            raise translate_client_error(e, 'lookup_queue') from e

        except BotoCoreError as e:
            logger.error("Queue lookup transport failure", queue_name=name, error=str(e))
            raise translate_client_error(e, 'lookup_queue') from e

        return Found(endpoint=response['QueueUrl'])

    def create_queue(self, name: str, config: QueueConfig) -> str:
        """
        Create a queue, treating "already exists" as success.

        SQS answers QueueAlreadyExists when a queue with the same name but
        different attributes exists (or a concurrent creator won the race).
        In both cases the existing queue is looked up and returned.

        Args:
            name: Queue name
            config: Attributes for the new queue

        Returns:
            Queue URL

        Raises:
            QueueConflictError: If the queue exists but cannot be looked up
            TransportError: On network/service failure
        """
        try:
            response = self.client.create_queue(
                QueueName=name,
                Attributes=config.to_attributes()
            )

        except ClientError as e:
            if error_code(e) not in QUEUE_EXISTS_CODES:
                logger.error(
                    "Failed to create queue",
                    queue_name=name,
                    error_code=error_code(e),
                    error_message=error_message(e)
                )
                raise translate_client_error(e, 'create_queue') from e

            logger.warning(
                "Queue already exists, using existing queue",
                queue_name=name,
                error_code=error_code(e)
            )
            lookup = self.lookup_queue(name)
            if isinstance(lookup, Found):
                return lookup.endpoint
            raise QueueConflictError(
                f"Queue {name} reported as existing but could not be found",
                operation='create_queue',
                code=error_code(e)
            ) from e

        except BotoCoreError as e:
            logger.error("Queue creation transport failure", queue_name=name, error=str(e))
            raise translate_client_error(e, 'create_queue') from e

        queue_url = response['QueueUrl']
        logger.info(
            "Queue created",
            queue_name=name,
            queue_url=queue_url,
            visibility_timeout=config.visibility_timeout,
            fifo=config.fifo
        )
        return queue_url

    def send(self, endpoint: str, request: SendRequest) -> SendResult:
        response = self._invoke(
            'send',
            self.client.send_message,
            QueueUrl=endpoint,
            **request.to_sqs_params()
        )
        return SendResult.from_sqs(response)

    def send_batch(self, endpoint: str, entries: Sequence[SendBatchEntry]) -> BatchResult:
        response = self._invoke(
            'send_batch',
            self.client.send_message_batch,
            QueueUrl=endpoint,
            Entries=[entry.to_sqs() for entry in entries]
        )
        return BatchResult.from_sqs(response)

    def receive(
        self,
        endpoint: str,
        visibility_timeout: int,
        max_messages: int,
        wait_time: Optional[int] = None
    ) -> List[Message]:
        params: Dict[str, Any] = {
            'QueueUrl': endpoint,
            'MaxNumberOfMessages': max_messages,
            'VisibilityTimeout': visibility_timeout,
            'AttributeNames': ['All'],
            'MessageAttributeNames': ['All'],
        }
        if wait_time is not None:
            params['WaitTimeSeconds'] = wait_time

        response = self._invoke('receive', self.client.receive_message, **params)
        return [Message.from_sqs(raw) for raw in response.get('Messages', [])]

    def delete(self, endpoint: str, receipt_handle: str) -> DeleteOutcome:
        try:
            self.client.delete_message(QueueUrl=endpoint, ReceiptHandle=receipt_handle)

        except ClientError as e:
            if error_code(e) in RECEIPT_HANDLE_CODES:
                logger.warning(
                    "Receipt handle no longer valid",
                    queue_url=endpoint,
                    error_code=error_code(e)
                )
                return DeleteOutcome.NOT_FOUND

            logger.error(
                "Failed to delete message",
                queue_url=endpoint,
                error_code=error_code(e),
                error_message=error_message(e)
            )
            raise translate_client_error(e, 'delete') from e

        except BotoCoreError as e:
            logger.error("Message delete transport failure", queue_url=endpoint, error=str(e))
            raise translate_client_error(e, 'delete') from e

        return DeleteOutcome.DELETED

    def delete_batch(self, endpoint: str, entries: Sequence[DeleteBatchEntry]) -> BatchResult:
        response = self._invoke(
            'delete_batch',
            self.client.delete_message_batch,
            QueueUrl=endpoint,
            Entries=[entry.to_sqs() for entry in entries]
        )
        return BatchResult.from_sqs(response)

    def purge(self, endpoint: str) -> None:
        self._invoke('purge', self.client.purge_queue, QueueUrl=endpoint)

    def delete_queue(self, endpoint: str) -> None:
        self._invoke('delete_queue', self.client.delete_queue, QueueUrl=endpoint)

    def get_attributes(self, endpoint: str, names: Sequence[str]) -> Dict[str, Any]:
        response = self._invoke(
            'get_attributes',
            self.client.get_queue_attributes,
            QueueUrl=endpoint,
            AttributeNames=list(names)
        )
        return response.get('Attributes', {})
