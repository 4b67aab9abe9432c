"""
Module: settings.py
Description: Queue manager configuration using pydantic-settings.

Loads the queue configuration from environment variables (prefix
``QUEUE_``) with validation and defaults. Supports .env files for local
development.
"""

import re
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Hard SQS limits
MAX_BATCH_ENTRIES = 10
MAX_WAIT_TIME_SECONDS = 20
MAX_VISIBILITY_TIMEOUT = 43200


class QueueSettings(BaseSettings):
    """Queue manager settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="QUEUE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Queue identity
    queue_name: str = Field(
        ...,
        description="Name of the queue to resolve or create"
    )
    fifo: bool = Field(
        default=False,
        description="Whether the queue runs in FIFO mode"
    )

    # Message lifecycle
    visibility_timeout: int = Field(
        default=60,
        ge=0,
        le=MAX_VISIBILITY_TIMEOUT,
        description="Visibility timeout in seconds applied to every receive"
    )
    receive_batch_size: int = Field(
        default=10,
        ge=1,
        le=MAX_BATCH_ENTRIES,
        description="Default number of messages per batch receive"
    )
    max_batch_entries: int = Field(
        default=MAX_BATCH_ENTRIES,
        ge=1,
        le=MAX_BATCH_ENTRIES,
        description="Maximum entries accepted by send_batch/delete_batch"
    )

    # Poller
    wait_time_seconds: Optional[int] = Field(
        default=None,
        ge=0,
        le=MAX_WAIT_TIME_SECONDS,
        description="Long-poll wait time; None uses the queue's default"
    )
    skip_delete: bool = Field(
        default=False,
        description="Leave messages in the queue after the poller processes them"
    )
    idle_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Stop polling after this many seconds without messages"
    )

    # Transport
    aws_region: str = Field(default="us-east-1", description="AWS region")
    endpoint_url: Optional[str] = Field(
        default=None,
        description="Override SQS endpoint (LocalStack, ElasticMQ, ...)"
    )
    open_timeout: int = Field(
        default=3600,
        ge=1,
        description="HTTP connect timeout in seconds"
    )
    read_timeout: int = Field(
        default=3600,
        ge=1,
        description="HTTP read timeout in seconds"
    )

    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator('queue_name')
    @classmethod
    def validate_queue_name(cls, v: str) -> str:
        """Validate queue name against SQS naming rules."""
        if not v or not isinstance(v, str):
            raise ValueError("queue_name must be a non-empty string")

        if not re.match(r'^[a-zA-Z0-9_-]{1,80}(\.fifo)?$', v):
            raise ValueError(
                "queue_name must be 1-80 letters, numbers, hyphens or underscores"
            )

        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @model_validator(mode='after')
    def validate_fifo_suffix(self) -> 'QueueSettings':
        """FIFO queues must carry the .fifo suffix, standard queues must not."""
        has_suffix = self.queue_name.endswith('.fifo')
        if self.fifo and not has_suffix:
            raise ValueError("FIFO queue names must end with '.fifo'")
        if not self.fifo and has_suffix:
            raise ValueError("queue names ending with '.fifo' require fifo=True")
        return self


def load_settings(**overrides) -> QueueSettings:
    """
    Build settings from the environment, applying keyword overrides.

    Args:
        **overrides: Field values that take precedence over the environment

    Returns:
        Validated QueueSettings instance
    """
    return QueueSettings(**overrides)
