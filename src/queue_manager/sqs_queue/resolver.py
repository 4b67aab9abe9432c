"""
Module: resolver.py
Description: Lazy queue endpoint resolution with create-on-missing.

The resolved endpoint is cached for the lifetime of the owning client.
First resolution and invalidation run under one lock; once cached, the
endpoint is read without locking.
"""

import threading
from typing import Callable, Optional, TypeVar

from queue_manager.errors import QueueNotFoundError
from queue_manager.models import Found, QueueConfig
from queue_manager.sqs_queue.service import QueueService
from queue_manager.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


class EndpointResolver:
    """
    Resolves and caches the endpoint of one named queue.

    Attributes:
        name: Queue name
        config: Configuration used if the queue has to be created
        service: Queue service collaborator

    Example:
        >>> resolver = EndpointResolver("orders", service, QueueConfig())
        >>> resolver.resolve()
        'https://sqs.us-east-1.amazonaws.com/123456789012/orders'
    """

    def __init__(self, name: str, service: QueueService, config: Optional[QueueConfig] = None):
        if not name or not isinstance(name, str):
            raise ValueError("name must be a non-empty string")

        self.name = name
        self.service = service
        self.config = config or QueueConfig()
        self._endpoint: Optional[str] = None
        self._lock = threading.RLock()

    @property
    def endpoint(self) -> Optional[str]:
        """Cached endpoint, or None when unresolved."""
        return self._endpoint

    @property
    def is_resolved(self) -> bool:
        return self._endpoint is not None

    def resolve(self) -> str:
        """
        Return the queue endpoint, looking it up or creating it on first use.

        Returns:
            Queue endpoint

        Raises:
            TransportError: If lookup or creation fails at the transport level
        """
        endpoint = self._endpoint
        if endpoint is not None:
            return endpoint

        with self._lock:
            if self._endpoint is None:
                self._endpoint = self._lookup_or_create()
            return self._endpoint

    def _lookup_or_create(self) -> str:
        lookup = self.service.lookup_queue(self.name)
        if isinstance(lookup, Found):
            logger.info("Queue resolved", queue_name=self.name, queue_url=lookup.endpoint)
            return lookup.endpoint

        logger.info(
            "Queue missing, creating",
            queue_name=self.name,
            visibility_timeout=self.config.visibility_timeout
        )
        return self.service.create_queue(self.name, self.config)

    def invalidate(self) -> None:
        """Forget the cached endpoint so the next operation re-resolves."""
        with self._lock:
            if self._endpoint is not None:
                logger.info("Queue endpoint invalidated", queue_name=self.name)
            self._endpoint = None

    def release(self, action: Callable[[str], T]) -> T:
        """
        Run a destructive action against the endpoint, then drop the cache.

        The action and the cache clear happen in one critical section, so
        no concurrent resolve can observe the endpoint in between. A
        QueueNotFoundError from the action also clears the cache.

        Args:
            action: Callable receiving the endpoint

        Returns:
            Whatever the action returns
        """
        with self._lock:
            endpoint = self.resolve()
            try:
                result = action(endpoint)
            except QueueNotFoundError:
                self._endpoint = None
                raise
            self._endpoint = None
            logger.info("Queue endpoint released", queue_name=self.name, queue_url=endpoint)
            return result
