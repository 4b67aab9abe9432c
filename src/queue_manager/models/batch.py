"""
Module: batch.py
Description: Batch request and result models.

A batch call reports per-entry outcomes in a BatchResult. Partial
failure is a normal outcome, never an exception.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from queue_manager.models.message import SendRequest

# SQS batch entry ids: alphanumerics, hyphens and underscores, up to 80 chars
BATCH_ID_PATTERN = r"^[A-Za-z0-9_-]{1,80}$"


class SendBatchEntry(SendRequest):
    """One message of a send_batch call, keyed by a client-assigned id."""

    id: str = Field(..., pattern=BATCH_ID_PATTERN, description="Client-assigned entry id")

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "SendBatchEntry":
        """Accept SQS-shaped (Id/MessageBody) or snake_case entries."""
        if 'Id' in raw or 'MessageBody' in raw:
            return cls(
                id=raw.get('Id'),
                body=raw.get('MessageBody'),
                message_attributes=raw.get('MessageAttributes'),
                delay_seconds=raw.get('DelaySeconds'),
                message_group_id=raw.get('MessageGroupId'),
                message_deduplication_id=raw.get('MessageDeduplicationId'),
            )
        if 'message_body' in raw and 'body' not in raw:
            raw = dict(raw, body=raw['message_body'])
        return cls.model_validate(raw)

    def to_sqs(self) -> Dict[str, Any]:
        return {'Id': self.id, **self.to_sqs_params()}


class DeleteBatchEntry(BaseModel):
    """One receipt handle of a delete_batch call."""

    id: str = Field(..., pattern=BATCH_ID_PATTERN, description="Client-assigned entry id")
    receipt_handle: str = Field(..., min_length=1)

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "DeleteBatchEntry":
        if 'Id' in raw or 'ReceiptHandle' in raw:
            return cls(id=raw.get('Id'), receipt_handle=raw.get('ReceiptHandle'))
        return cls.model_validate(raw)

    def to_sqs(self) -> Dict[str, Any]:
        return {'Id': self.id, 'ReceiptHandle': self.receipt_handle}


class BatchResultEntry(BaseModel):
    """Successful entry of a batch call."""

    model_config = ConfigDict(frozen=True)

    id: str
    message_id: Optional[str] = None
    sequence_number: Optional[str] = None
    md5_of_body: Optional[str] = None


class BatchFailure(BaseModel):
    """Failed entry of a batch call."""

    model_config = ConfigDict(frozen=True)

    id: str
    code: str
    message: Optional[str] = None
    sender_fault: bool = False


class BatchResult(BaseModel):
    """
    Per-entry outcome of a batch call.

    Attributes:
        successful: Entries the service accepted, in response order
        failed: Entries the service rejected, in response order
    """

    successful: List[BatchResultEntry] = Field(default_factory=list)
    failed: List[BatchFailure] = Field(default_factory=list)

    @classmethod
    def from_sqs(cls, response: Dict[str, Any]) -> "BatchResult":
        """Build from a SendMessageBatch or DeleteMessageBatch response."""
        return cls(
            successful=[
                BatchResultEntry(
                    id=entry['Id'],
                    message_id=entry.get('MessageId'),
                    sequence_number=entry.get('SequenceNumber'),
                    md5_of_body=entry.get('MD5OfMessageBody'),
                )
                for entry in response.get('Successful', [])
            ],
            failed=[
                BatchFailure(
                    id=entry['Id'],
                    code=entry.get('Code', 'Unknown'),
                    message=entry.get('Message'),
                    sender_fault=bool(entry.get('SenderFault', False)),
                )
                for entry in response.get('Failed', [])
            ],
        )

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    @property
    def successful_ids(self) -> List[str]:
        return [entry.id for entry in self.successful]

    @property
    def failed_ids(self) -> List[str]:
        return [entry.id for entry in self.failed]
