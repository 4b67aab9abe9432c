"""
Module: message.py
Description: Message data models for the queue manager.

Defines the received Message (immutable once built from an SQS
response), outgoing SendRequest, and the results of single-message
send and delete operations.

Key Components:
- Message: Received message with receipt handle and attributes
- MessageAttributeValue: Typed message attribute (String/Number/Binary)
- SendRequest: Outgoing message body plus optional attributes
- SendResult: Message id and optional FIFO sequence number
- DeleteOutcome: DELETED or NOT_FOUND

Dependencies: pydantic, typing, enum
"""

from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DeleteOutcome(str, Enum):
    """Result of deleting a single message."""

    DELETED = "deleted"
    NOT_FOUND = "not_found"


class MessageAttributeValue(BaseModel):
    """Structured message attribute as carried by SQS."""

    model_config = ConfigDict(frozen=True)

    data_type: str = Field(..., min_length=1, description="String, Number or Binary")
    string_value: Optional[str] = Field(default=None)
    binary_value: Optional[bytes] = Field(default=None)

    @classmethod
    def from_sqs(cls, raw: Dict[str, Any]) -> "MessageAttributeValue":
        return cls(
            data_type=raw.get('DataType', 'String'),
            string_value=raw.get('StringValue'),
            binary_value=raw.get('BinaryValue'),
        )

    def to_sqs(self) -> Dict[str, Any]:
        value: Dict[str, Any] = {'DataType': self.data_type}
        if self.string_value is not None:
            value['StringValue'] = self.string_value
        if self.binary_value is not None:
            value['BinaryValue'] = self.binary_value
        return value


def _coerce_attributes(value: Any) -> Dict[str, MessageAttributeValue]:
    """Accept SQS-shaped dicts, plain strings, or model instances."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError("message_attributes must be a dictionary")

    coerced = {}
    for name, attr in value.items():
        if isinstance(attr, MessageAttributeValue):
            coerced[name] = attr
        elif isinstance(attr, str):
            coerced[name] = MessageAttributeValue(data_type='String', string_value=attr)
        elif isinstance(attr, dict) and 'DataType' in attr:
            coerced[name] = MessageAttributeValue.from_sqs(attr)
        else:
            coerced[name] = MessageAttributeValue.model_validate(attr)
    return coerced


class Message(BaseModel):
    """
    Message received from the queue.

    Immutable once received. The receipt handle is only valid until the
    visibility timeout of the receive that produced it expires.

    Attributes:
        message_id: Service-assigned message identifier
        receipt_handle: Token required to delete this delivery
        body: Message body
        attributes: System attributes (SentTimestamp, ApproximateReceiveCount, ...)
        message_attributes: User-supplied structured attributes
        md5_of_body: MD5 digest of the body as computed by the service
    """

    model_config = ConfigDict(frozen=True)

    message_id: str = Field(..., description="Service-assigned message id")
    receipt_handle: str = Field(..., description="Opaque delete token")
    body: str = Field(default="", description="Message body")
    attributes: Dict[str, str] = Field(default_factory=dict)
    message_attributes: Dict[str, MessageAttributeValue] = Field(default_factory=dict)
    md5_of_body: Optional[str] = Field(default=None)

    @classmethod
    def from_sqs(cls, raw: Dict[str, Any]) -> "Message":
        """
        Build a Message from one entry of a ReceiveMessage response.

        Args:
            raw: SQS message dictionary (MessageId, ReceiptHandle, Body, ...)

        Returns:
            Message instance
        """
        return cls(
            message_id=raw['MessageId'],
            receipt_handle=raw['ReceiptHandle'],
            body=raw.get('Body', ''),
            attributes=raw.get('Attributes') or {},
            message_attributes={
                name: MessageAttributeValue.from_sqs(value)
                for name, value in (raw.get('MessageAttributes') or {}).items()
            },
            md5_of_body=raw.get('MD5OfBody'),
        )


class SendRequest(BaseModel):
    """Outgoing message body plus optional per-message settings."""

    model_config = ConfigDict(str_strip_whitespace=False)

    body: str = Field(..., min_length=1, description="Message body")
    message_attributes: Dict[str, MessageAttributeValue] = Field(default_factory=dict)
    delay_seconds: Optional[int] = Field(default=None, ge=0, le=900)
    message_group_id: Optional[str] = Field(default=None, min_length=1, max_length=128)
    message_deduplication_id: Optional[str] = Field(default=None, min_length=1, max_length=128)

    @field_validator('body', mode='before')
    @classmethod
    def decode_body(cls, v: Union[str, bytes]) -> str:
        """Bodies are sent as text; bytes are decoded as UTF-8."""
        if isinstance(v, bytes):
            return v.decode('utf-8')
        return v

    @field_validator('message_attributes', mode='before')
    @classmethod
    def coerce_attributes(cls, v: Any) -> Dict[str, MessageAttributeValue]:
        return _coerce_attributes(v)

    def to_sqs_params(self) -> Dict[str, Any]:
        """Render the keyword arguments shared by SendMessage and batch entries."""
        params: Dict[str, Any] = {'MessageBody': self.body}
        if self.message_attributes:
            params['MessageAttributes'] = {
                name: attr.to_sqs() for name, attr in self.message_attributes.items()
            }
        if self.delay_seconds is not None:
            params['DelaySeconds'] = self.delay_seconds
        if self.message_group_id is not None:
            params['MessageGroupId'] = self.message_group_id
        if self.message_deduplication_id is not None:
            params['MessageDeduplicationId'] = self.message_deduplication_id
        return params


class SendResult(BaseModel):
    """Result of sending a single message."""

    model_config = ConfigDict(frozen=True)

    message_id: str
    sequence_number: Optional[str] = Field(
        default=None,
        description="FIFO sequencing token"
    )
    md5_of_body: Optional[str] = None

    @classmethod
    def from_sqs(cls, response: Dict[str, Any]) -> "SendResult":
        return cls(
            message_id=response['MessageId'],
            sequence_number=response.get('SequenceNumber'),
            md5_of_body=response.get('MD5OfMessageBody'),
        )
