"""Short-lived cache of the search backend's health."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from learnhub.core.exceptions import BackendUnavailableError
from learnhub.core.types import ClusterHealth, ClusterStatus

if TYPE_CHECKING:
    from collections.abc import Callable

    from learnhub.core.protocols import SearchBackendProtocol

logger = logging.getLogger(__name__)


class HealthStats:
    """Health cache statistics."""

    def __init__(self) -> None:
        self.hits = 0
        self.misses = 0

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate as a percentage."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0

    def __repr__(self) -> str:
        return f"HealthStats(hits={self.hits}, misses={self.misses}, hit_rate={self.hit_rate:.2f}%)"


class HealthCache:
    """Caches the last cluster status for a few seconds.

    Concurrent lookups share one probe: the first caller probes the backend
    while the others wait on the lock and then read the cached status. An
    unreachable backend is cached like any other status.

    Example:
        >>> cache = HealthCache(backend, ttl=5.0)
        >>> status = await cache.status()
        >>> status.is_usable
        True
    """

    def __init__(
        self,
        backend: SearchBackendProtocol,
        ttl: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the health cache.

        Args:
            backend: Search backend to probe.
            ttl: Seconds a probed status stays valid. 0 disables caching.
            clock: Monotonic clock, injectable for tests.
        """
        self._backend = backend
        self._ttl = ttl
        self._clock = clock
        self._status: ClusterStatus | None = None
        self._checked_at = 0.0
        self._lock = asyncio.Lock()
        self._stats = HealthStats()

    def _fresh(self) -> ClusterStatus | None:
        if self._status is None or self._ttl <= 0:
            return None
        if self._clock() - self._checked_at >= self._ttl:
            return None
        return self._status

    async def status(self) -> ClusterStatus:
        """Return the cluster status, probing the backend when stale."""
        cached = self._fresh()
        if cached is not None:
            self._stats.hits += 1
            return cached

        async with self._lock:
            cached = self._fresh()
            if cached is not None:
                self._stats.hits += 1
                return cached

            self._stats.misses += 1
            try:
                health: ClusterHealth = await self._backend.health()
                status = health.status
            except BackendUnavailableError as e:
                logger.warning(f"Search backend health probe failed: {e}")
                status = ClusterStatus.UNREACHABLE
            except Exception as e:
                logger.warning(f"Search backend health probe failed: {type(e).__name__}: {e}")
                status = ClusterStatus.UNREACHABLE
            self._status = status
            self._checked_at = self._clock()
            logger.debug(f"Search backend status: {status.value}")
            return status

    def invalidate(self) -> None:
        """Forget the cached status."""
        self._status = None

    def stats(self) -> HealthStats:
        """Get cache statistics."""
        return self._stats
