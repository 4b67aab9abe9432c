"""
Module: config
Description: Package initialization for configuration.

- settings: QueueSettings loaded from QUEUE_* environment variables
"""

__all__ = []
