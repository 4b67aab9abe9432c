"""
Package: polling
Description: Long-poll message loop for the queue manager.

Provides QueuePoller, which receives batches from a queue client on the
caller's thread or a dedicated worker and deletes processed messages.
"""

from .poller import PollerStats, QueuePoller, StopPolling

__all__ = ["PollerStats", "QueuePoller", "StopPolling"]
