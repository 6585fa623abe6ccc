"""Registry of inbox processors keyed by identity."""

from __future__ import annotations

import threading
import time
from typing import Callable

import structlog

from .constants import REGISTRY_TTL_SECONDS
from .processor import InboxProcessor

logger = structlog.get_logger(__name__)


class ProcessorRegistry:
    """Maps an identity key to its most recent InboxProcessor.

    Idle entries that have not been looked up for ``ttl`` seconds are evicted
    the next time the registry is accessed. Running processors are never
    evicted. The registry does not care how identity keys are derived, only
    that a key stays stable for one authorized session.
    """

    def __init__(
        self,
        ttl: float | None = REGISTRY_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._processors: dict[str, InboxProcessor] = {}
        self._last_access: dict[str, float] = {}

    def get_or_create(self, key: str, factory: Callable[[], InboxProcessor]) -> InboxProcessor:
        """Return the processor for key, building one with factory if absent."""
        with self._lock:
            self._evict_expired_locked()
            processor = self._processors.get(key)
            if processor is None:
                processor = factory()
                self._processors[key] = processor
                logger.info("processor_registered", identity=key)
            self._last_access[key] = self._clock()
            return processor

    def get(self, key: str) -> InboxProcessor | None:
        with self._lock:
            self._evict_expired_locked()
            processor = self._processors.get(key)
            if processor is not None:
                self._last_access[key] = self._clock()
            return processor

    def remove(self, key: str) -> InboxProcessor | None:
        """Evict an entry, cancelling its run if one is in progress."""
        with self._lock:
            processor = self._processors.pop(key, None)
            self._last_access.pop(key, None)
        if processor is not None:
            processor.cancel()
            logger.info("processor_removed", identity=key)
        return processor

    def evict_expired(self) -> list[str]:
        """Drop idle entries older than the TTL. Returns the evicted keys."""
        with self._lock:
            return self._evict_expired_locked()

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._processors)

    def __len__(self) -> int:
        with self._lock:
            return len(self._processors)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._processors

    def _evict_expired_locked(self) -> list[str]:
        if self.ttl is None:
            return []
        now = self._clock()
        expired = [
            key
            for key, last in self._last_access.items()
            if now - last >= self.ttl and not self._processors[key].is_running
        ]
        for key in expired:
            del self._processors[key]
            del self._last_access[key]
            logger.info("processor_evicted", identity=key)
        return expired
