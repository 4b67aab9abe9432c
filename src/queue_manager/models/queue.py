"""
Module: queue.py
Description: Queue-level models: creation config, lookup results, counts.
"""

from typing import Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

VISIBLE_ATTRIBUTE = "ApproximateNumberOfMessages"
IN_FLIGHT_ATTRIBUTE = "ApproximateNumberOfMessagesNotVisible"
DELAYED_ATTRIBUTE = "ApproximateNumberOfMessagesDelayed"
COUNT_ATTRIBUTES = [VISIBLE_ATTRIBUTE, IN_FLIGHT_ATTRIBUTE, DELAYED_ATTRIBUTE]


class QueueConfig(BaseModel):
    """Configuration applied when the resolver has to create the queue."""

    model_config = ConfigDict(frozen=True)

    visibility_timeout: int = Field(default=60, ge=0, le=43200)
    open_timeout: int = Field(default=3600, ge=1)
    read_timeout: int = Field(default=3600, ge=1)
    fifo: bool = False

    def to_attributes(self) -> Dict[str, str]:
        """
        Queue attributes for CreateQueue (SQS wants string values).

        FIFO queues get content-based deduplication so a send only needs
        a message group id.
        """
        attributes = {'VisibilityTimeout': str(self.visibility_timeout)}
        if self.fifo:
            attributes['FifoQueue'] = 'true'
            attributes['ContentBasedDeduplication'] = 'true'
        return attributes


class Found(BaseModel):
    """Lookup succeeded; the queue lives at ``endpoint``."""

    model_config = ConfigDict(frozen=True)

    endpoint: str


class NotFound(BaseModel):
    """Lookup reported that no queue named ``name`` exists."""

    model_config = ConfigDict(frozen=True)

    name: str


LookupResult = Union[Found, NotFound]


def _to_count(value: Optional[str]) -> int:
    if value is None or value == "":
        return 0
    return max(int(value), 0)


class QueueCounts(BaseModel):
    """Approximate message counts of a queue."""

    model_config = ConfigDict(frozen=True)

    visible: int = Field(default=0, ge=0)
    in_flight: int = Field(default=0, ge=0)
    delayed: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.visible + self.in_flight + self.delayed

    @classmethod
    def from_attributes(cls, attributes: Mapping[str, str]) -> "QueueCounts":
        """Missing attributes count as zero."""
        return cls(
            visible=_to_count(attributes.get(VISIBLE_ATTRIBUTE)),
            in_flight=_to_count(attributes.get(IN_FLIGHT_ATTRIBUTE)),
            delayed=_to_count(attributes.get(DELAYED_ATTRIBUTE)),
        )
