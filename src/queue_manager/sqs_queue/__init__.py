"""
Package: sqs_queue
Description: SQS queue access for the queue manager.

Provides the QueueService collaborator boundary, its boto3-backed
SQSService implementation, the endpoint resolver, and QueueClient.
"""

from .service import QueueService
from .sqs import SQSService, create_sqs_client
from .resolver import EndpointResolver
from .client import QueueClient

__all__ = [
    "QueueService",
    "SQSService",
    "create_sqs_client",
    "EndpointResolver",
    "QueueClient",
]
